"""
Request models for the Gavel HTTP API.

This enables:
- Type validation at the transport edge
- Self-documenting OpenAPI schemas

Money fields are Decimals; send them as JSON strings ("2.20") to avoid
binary float rounding.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from ..core.types import PlayerCategory


class CreateTeamInput(BaseModel):
    """Register a bidding team."""

    name: str = Field(..., min_length=1, description="Unique team name", examples=["Chennai"])
    purse: Decimal = Field(
        ..., gt=0, decimal_places=2, description="Funds available for bids", examples=["100.00"]
    )
    max_squad_size: Optional[int] = Field(
        default=None, ge=1, description="Squad size limit (server default if omitted)"
    )

    model_config = ConfigDict(
        json_schema_extra={"title": "Create Team", "description": "Register a bidding team"}
    )


class CreatePlayerInput(BaseModel):
    """Add a player to the catalog."""

    name: str = Field(..., min_length=1, description="Player name", examples=["R. Sharma"])
    category: PlayerCategory = Field(..., description="Playing role", examples=["BAT"])
    base_price: Decimal = Field(
        ..., gt=0, decimal_places=2, description="Catalog base price", examples=["2.00"]
    )

    model_config = ConfigDict(
        json_schema_extra={"title": "Create Player", "description": "Add a catalog player"}
    )


class CreateLotInput(BaseModel):
    """Put a catalog player up in an auction."""

    player_id: str = Field(..., description="Catalog player id", examples=["plr-1a2b3c4d5e6f"])
    base_price: Optional[Decimal] = Field(
        default=None,
        gt=0,
        decimal_places=2,
        description="Opening price (player's base price if omitted)",
    )


class PlaceBidInput(BaseModel):
    """Bid on the LIVE lot."""

    team_id: str = Field(..., description="Bidding team id", examples=["team-1a2b3c4d5e6f"])
    amount: Decimal = Field(
        ..., gt=0, decimal_places=2, description="Proposed price", examples=["2.20", "6.50"]
    )

    model_config = ConfigDict(
        json_schema_extra={
            "title": "Place Bid",
            "description": "Raise the lot's price; must beat it by the minimum increment",
        }
    )


class SellLotInput(BaseModel):
    """Close a lot as SOLD."""

    team_id: Optional[str] = Field(default=None, description="Winner (current leader if omitted)")
    final_price: Optional[Decimal] = Field(
        default=None,
        gt=0,
        decimal_places=2,
        description="Hammer price (current price if omitted)",
    )
