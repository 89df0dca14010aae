"""
Runtime settings for Gavel.

Values come from ``GAVEL_*`` environment variables, optionally loaded from a
``.env`` file. Every field has a default, so an empty environment is valid.
"""

import os
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from .rules.validator import IncrementRules


ENV_PREFIX = "GAVEL_"


class AuctionSettings(BaseModel):
    """Tunable auction constants and server options."""

    increment_threshold: Decimal = Field(
        default=Decimal("5"),
        gt=0,
        description="Price at which the minimum increment steps up",
    )
    low_increment: Decimal = Field(
        default=Decimal("0.2"),
        gt=0,
        description="Minimum increment below the threshold",
    )
    high_increment: Decimal = Field(
        default=Decimal("0.5"),
        gt=0,
        description="Minimum increment at or above the threshold",
    )
    lock_timeout: float = Field(
        default=2.0,
        gt=0,
        description="Seconds to wait for a lot or auction exclusion section",
    )
    max_bid_attempts: int = Field(
        default=3,
        ge=1,
        description="Attempts a bid gets before Contention is surfaced",
    )
    retry_backoff: float = Field(
        default=0.01,
        ge=0,
        description="Base delay between bid attempts (multiplied by attempt number)",
    )
    default_max_squad_size: int = Field(default=25, ge=1)
    host: str = "localhost"
    port: int = Field(default=8000, ge=1, le=65535)

    @model_validator(mode="after")
    def _increments_are_money(self) -> "AuctionSettings":
        for name in ("increment_threshold", "low_increment", "high_increment"):
            value = getattr(self, name)
            try:
                quantized = value.quantize(Decimal("0.01"))
            except InvalidOperation:
                raise ValueError(f"{name} is out of range")
            if value != quantized:
                raise ValueError(f"{name} supports at most two decimal places")
        return self

    def increment_rules(self) -> IncrementRules:
        return IncrementRules(
            threshold=self.increment_threshold,
            below=self.low_increment,
            at_or_above=self.high_increment,
        )

    @classmethod
    def from_env(
        cls,
        env_file: Optional[str] = None,
        environ: Optional[Dict[str, str]] = None,
    ) -> "AuctionSettings":
        """
        Build settings from the environment.

        Args:
            env_file: Optional path to a .env file (loaded without overriding
                variables that are already set)
            environ: Mapping to read instead of ``os.environ``

        Returns:
            AuctionSettings

        Raises:
            pydantic.ValidationError: a variable has an invalid value
        """
        if environ is None:
            load_dotenv(env_file)
            environ = dict(os.environ)

        values: Dict[str, Any] = {}
        for name in cls.model_fields:
            raw = environ.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is not None and raw.strip() != "":
                values[name] = raw.strip()
        return cls(**values)
