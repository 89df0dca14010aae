"""
Core data types for Gavel.

These records are plain dataclasses that reference each other by id only.
Relationships are resolved through the store, never through back-pointers.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, Optional, Union
import uuid

from .errors import InvalidInput


MONEY_QUANTUM = Decimal("0.01")

MoneyLike = Union[Decimal, int, float, str]


def to_money(value: MoneyLike, label: str = "amount") -> Decimal:
    """
    Convert a caller-supplied value to a two-place Decimal.

    Floats go through ``str()`` so 2.2 stays 2.2 rather than its binary
    expansion. Values with more than two fractional digits are rejected
    rather than rounded.

    Raises:
        InvalidInput: value is not a finite number or is too precise
    """
    if isinstance(value, bool):
        raise InvalidInput(f"{label} must be a number", field=label, value=value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(f"{label} must be a number", field=label, value=str(value))

    if not amount.is_finite():
        raise InvalidInput(f"{label} must be finite", field=label, value=str(value))

    try:
        quantized = amount.quantize(MONEY_QUANTUM)
    except InvalidOperation:
        raise InvalidInput(f"{label} is out of range", field=label, value=str(value))
    if quantized != amount:
        raise InvalidInput(
            f"{label} supports at most two decimal places",
            field=label,
            value=str(value),
        )
    return quantized


def new_id(prefix: str) -> str:
    """Generate a short prefixed identifier (e.g. ``lot-1a2b3c4d5e6f``)."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class AuctionStatus(Enum):
    """Lifecycle of an auction session."""

    CREATED = "CREATED"
    LIVE = "LIVE"
    FINISHED = "FINISHED"


class LotStatus(Enum):
    """Lifecycle of a single lot."""

    NOT_STARTED = "NOT_STARTED"
    LIVE = "LIVE"
    SOLD = "SOLD"
    UNSOLD = "UNSOLD"


class PlayerStatus(Enum):
    """Catalog-level status of a player, independent of any auction."""

    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"
    UNSOLD = "UNSOLD"


class PlayerCategory(Enum):
    BAT = "BAT"
    BOWL = "BOWL"
    AR = "AR"
    WKB = "WKB"


@dataclass
class Auction:
    """An auction session during which lots are bid on one at a time."""

    auction_id: str
    status: AuctionStatus = AuctionStatus.CREATED
    created_at: datetime = field(default_factory=datetime.now)
    version: int = 0

    @classmethod
    def create(cls) -> "Auction":
        """Create a new auction in CREATED state."""
        return cls(auction_id=new_id("auc"))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "auction_id": self.auction_id,
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Team:
    """
    A bidding party.

    The purse is read by the core as the team's available funds; it is never
    debited (see DESIGN.md).
    """

    team_id: str
    name: str
    purse: Decimal
    max_squad_size: int = 25
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls, name: str, purse: MoneyLike, max_squad_size: int = 25
    ) -> "Team":
        """
        Create a new team with a generated ID.

        Raises:
            InvalidInput: empty name, non-positive purse or squad size
        """
        if name is None or not name.strip():
            raise InvalidInput("Team name must not be empty", field="name")
        amount = to_money(purse, "purse")
        if amount <= 0:
            raise InvalidInput(
                "Purse must be greater than zero", field="purse", value=amount
            )
        if max_squad_size <= 0:
            raise InvalidInput(
                "Max squad size must be positive",
                field="max_squad_size",
                value=max_squad_size,
            )
        return cls(
            team_id=new_id("team"),
            name=name.strip(),
            purse=amount,
            max_squad_size=max_squad_size,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "name": self.name,
            "purse": str(self.purse),
            "max_squad_size": self.max_squad_size,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Player:
    """A catalog player that can be put up as a lot."""

    player_id: str
    name: str
    category: PlayerCategory
    base_price: Decimal
    status: PlayerStatus = PlayerStatus.AVAILABLE

    @classmethod
    def create(
        cls,
        name: str,
        category: Union[PlayerCategory, str],
        base_price: MoneyLike,
    ) -> "Player":
        """
        Create a new catalog player.

        Raises:
            InvalidInput: empty name, unknown category, non-positive base price
        """
        if name is None or not name.strip():
            raise InvalidInput("Player name must not be empty", field="name")
        if category is None:
            raise InvalidInput("Player category must be specified", field="category")
        if not isinstance(category, PlayerCategory):
            try:
                category = PlayerCategory(category)
            except ValueError:
                raise InvalidInput(
                    f"Unknown player category: {category}",
                    field="category",
                    value=category,
                )
        price = to_money(base_price, "base_price")
        if price <= 0:
            raise InvalidInput(
                "Base price must be greater than zero", field="base_price", value=price
            )
        return cls(
            player_id=new_id("plr"),
            name=name.strip(),
            category=category,
            base_price=price,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "category": self.category.value,
            "base_price": str(self.base_price),
            "status": self.status.value,
        }


@dataclass
class Lot:
    """
    An auction-scoped instance of a player.

    ``current_price`` starts at ``base_price`` and only grows while the lot is
    LIVE. ``version`` is the optimistic-concurrency token the store bumps on
    every save.
    """

    lot_id: str
    auction_id: str
    player_id: str
    base_price: Decimal
    current_price: Decimal
    status: LotStatus = LotStatus.NOT_STARTED
    current_highest_bid_team_id: Optional[str] = None
    bid_count: int = 0
    version: int = 0
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lot_id": self.lot_id,
            "auction_id": self.auction_id,
            "player_id": self.player_id,
            "base_price": str(self.base_price),
            "current_price": str(self.current_price),
            "status": self.status.value,
            "current_highest_bid_team_id": self.current_highest_bid_team_id,
            "bid_count": self.bid_count,
            "created_at": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Bid:
    """
    Immutable record of one accepted bid.

    The ordered bids of a lot are its audit trail: replaying them rebuilds the
    lot's price and leader.
    """

    bid_id: str
    lot_id: str
    team_id: str
    amount: Decimal
    sequence: int
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(cls, lot_id: str, team_id: str, amount: Decimal, sequence: int) -> "Bid":
        """Create a new bid with generated ID."""
        return cls(
            bid_id=new_id("bid"),
            lot_id=lot_id,
            team_id=team_id,
            amount=amount,
            sequence=sequence,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bid_id": self.bid_id,
            "lot_id": self.lot_id,
            "team_id": self.team_id,
            "amount": str(self.amount),
            "sequence": self.sequence,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bid":
        return cls(
            bid_id=data["bid_id"],
            lot_id=data["lot_id"],
            team_id=data["team_id"],
            amount=Decimal(data["amount"]),
            sequence=data["sequence"],
            created_at=(
                datetime.fromisoformat(data["created_at"])
                if "created_at" in data
                else datetime.now()
            ),
        )
