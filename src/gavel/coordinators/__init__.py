"""
Coordinators for live auctions.

Coordinators own the exclusion sections and drive the state machines.
"""

from .auction import AuctionCoordinator
from .locks import KeyedLocks
from .sequencer import BidSequencer

__all__ = [
    "AuctionCoordinator",
    "BidSequencer",
    "KeyedLocks",
]
