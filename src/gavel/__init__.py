"""
Gavel - live sequential-bidding auctions.
"""

from .config import AuctionSettings
from .coordinators import AuctionCoordinator

__version__ = "0.1.0"
__all__ = ["AuctionCoordinator", "AuctionSettings"]
