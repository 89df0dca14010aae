"""
Bid acceptance rules.

BidValidator is a pure decision function: no mutation, no I/O, no logging.
It runs inside the lot's exclusion section, against the lot state read
there, so its verdict is never based on a stale price.
"""

from dataclasses import dataclass
from decimal import Decimal

from ..core.errors import BidTooLow, IncrementTooSmall, InsufficientFunds, LotNotLive
from ..core.types import LotStatus


@dataclass(frozen=True)
class IncrementRules:
    """
    Price-tiered minimum increment: a step function with one breakpoint.

    Below ``threshold`` a bid must raise the price by at least ``below``;
    at or above it, by at least ``at_or_above``.
    """

    threshold: Decimal = Decimal("5")
    below: Decimal = Decimal("0.2")
    at_or_above: Decimal = Decimal("0.5")

    def min_increment(self, current_price: Decimal) -> Decimal:
        if current_price < self.threshold:
            return self.below
        return self.at_or_above


class BidValidator:
    """Decides whether a proposed bid is legal against a lot's current state."""

    def __init__(self, rules: IncrementRules = IncrementRules()):
        self.rules = rules

    def min_increment(self, current_price: Decimal) -> Decimal:
        return self.rules.min_increment(current_price)

    def minimum_bid(self, current_price: Decimal) -> Decimal:
        """Smallest amount that would be accepted at ``current_price``."""
        return current_price + self.min_increment(current_price)

    def validate(
        self,
        status: LotStatus,
        current_price: Decimal,
        purse: Decimal,
        amount: Decimal,
    ) -> Decimal:
        """
        Check a proposed bid.

        Checks run in a fixed order, so a bid that is both too low and
        unaffordable is reported as BidTooLow.

        Args:
            status: Lot status
            current_price: Lot's current price
            purse: Bidding team's purse (gross, never reduced by prior wins)
            amount: Proposed bid amount

        Returns:
            The increment over the current price

        Raises:
            LotNotLive: lot is not accepting bids
            BidTooLow: amount does not exceed the current price
            IncrementTooSmall: raise is below the tiered minimum
            InsufficientFunds: purse is below the amount
        """
        if status != LotStatus.LIVE:
            raise LotNotLive(
                f"Bidding is not open for this lot (status {status.value})",
                status=status.value,
            )

        if amount <= current_price:
            raise BidTooLow(current_price, amount)

        increment = amount - current_price
        min_increment = self.min_increment(current_price)
        if increment < min_increment:
            raise IncrementTooSmall(current_price, amount, min_increment)

        if purse < amount:
            raise InsufficientFunds(purse, amount)

        return increment
