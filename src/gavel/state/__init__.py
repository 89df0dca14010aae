"""
State management subsystem.

Provides:
- Event types and the auction audit trail
- Auction and lot state machines
- The storage collaborator protocol and an in-memory store
"""

from .events import Event, EventType
from .machines import AuctionStateMachine, LotStateMachine
from .store import AuctionStore, InMemoryStore

__all__ = [
    # Events
    "Event",
    "EventType",
    # State machines
    "AuctionStateMachine",
    "LotStateMachine",
    # Storage
    "AuctionStore",
    "InMemoryStore",
]
