"""
Event types and Event class for the auction audit trail.

Events represent immutable business facts that happened in an auction.
Bids are their own append-only record; events cover lifecycle transitions
and mirror each accepted bid so one auction-wide timeline exists.
"""

from enum import Enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Dict, Any
import uuid


class EventType(Enum):
    """Types of significant auction events."""

    # Auction lifecycle
    AUCTION_CREATED = "auction_created"
    AUCTION_STARTED = "auction_started"
    AUCTION_FINISHED = "auction_finished"

    # Lot lifecycle
    LOT_CREATED = "lot_created"
    LOT_STARTED = "lot_started"
    LOT_SOLD = "lot_sold"
    LOT_UNSOLD = "lot_unsold"

    # Bidding
    BID_ACCEPTED = "bid_accepted"


@dataclass(frozen=True)
class Event:
    """
    Immutable event representing a business fact.

    Events are:
    - Auction-scoped (belong to an auction)
    - Optionally lot-scoped (which lot the fact is about)
    - Timestamped (when it happened)
    """

    event_id: str
    auction_id: str
    event_type: EventType
    timestamp: datetime

    # Optional: which lot this event is about
    lot_id: Optional[str] = None

    # Event-specific data
    data: Dict[str, Any] = field(default_factory=dict)

    # Metadata (for extensibility)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        auction_id: str,
        event_type: EventType,
        data: Optional[Dict[str, Any]] = None,
        lot_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "Event":
        """
        Create a new event with auto-generated ID.

        Args:
            auction_id: Auction this event belongs to
            event_type: Type of event
            data: Event-specific data (prices, team ids, ...)
            lot_id: Lot the event is about (optional)
            metadata: Additional metadata (optional)

        Returns:
            Event instance
        """
        return cls(
            event_id=f"evt-{uuid.uuid4().hex[:12]}",
            auction_id=auction_id,
            event_type=event_type,
            timestamp=datetime.now(),
            lot_id=lot_id,
            data=data or {},
            metadata=metadata or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict for storage/transmission."""
        return {
            "event_id": self.event_id,
            "auction_id": self.auction_id,
            "event_type": self.event_type.value,
            "timestamp": self.timestamp.isoformat(),
            "lot_id": self.lot_id,
            "data": self.data,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Deserialize from dict."""
        return cls(
            event_id=data["event_id"],
            auction_id=data["auction_id"],
            event_type=EventType(data["event_type"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            lot_id=data.get("lot_id"),
            data=data.get("data", {}),
            metadata=data.get("metadata", {}),
        )
