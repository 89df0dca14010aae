"""
Core types for Gavel - live sequential-bidding auctions.

This module provides the records and error taxonomy shared by the state
machines, the bid sequencer, the server and the client.
"""

from .types import (
    Auction,
    AuctionStatus,
    Bid,
    Lot,
    LotStatus,
    Player,
    PlayerCategory,
    PlayerStatus,
    Team,
    to_money,
)
from .errors import (
    AuctionError,
    AuctionNotLive,
    BidRejected,
    BidTooLow,
    Contention,
    IncrementTooSmall,
    InsufficientFunds,
    InvalidInput,
    InvalidTransition,
    LotAlreadyLive,
    LotNotLive,
    NotFound,
)

__all__ = [
    # Records
    "Auction",
    "AuctionStatus",
    "Bid",
    "Lot",
    "LotStatus",
    "Player",
    "PlayerCategory",
    "PlayerStatus",
    "Team",
    "to_money",
    # Errors
    "AuctionError",
    "AuctionNotLive",
    "BidRejected",
    "BidTooLow",
    "Contention",
    "IncrementTooSmall",
    "InsufficientFunds",
    "InvalidInput",
    "InvalidTransition",
    "LotAlreadyLive",
    "LotNotLive",
    "NotFound",
]
