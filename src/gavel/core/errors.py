"""
Error taxonomy for the auction core.

Every failure the core reports is a business failure, never a crash:
- Construction errors (InvalidInput)
- Lifecycle errors (InvalidTransition, AuctionNotLive, LotAlreadyLive, LotNotLive)
- Bid rejections (BidTooLow, IncrementTooSmall, InsufficientFunds)
- Lookup and concurrency errors (NotFound, Contention)

Each error carries a stable ``code`` and a ``context`` dict so transports can
render a precise message without parsing strings.
"""

from decimal import Decimal
from typing import Any, Dict, Optional, Type


class AuctionError(Exception):
    """Base class for all auction business failures."""

    code = "auction_error"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = context

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for transmission (Decimals become strings)."""
        return {
            "code": self.code,
            "message": self.message,
            "context": {
                key: str(value) if isinstance(value, Decimal) else value
                for key, value in self.context.items()
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuctionError":
        """
        Rebuild an error from its serialized form.

        The concrete subclass is picked by ``code``; unknown codes fall back
        to AuctionError itself.
        """
        error_cls = ERRORS_BY_CODE.get(data.get("code", ""), AuctionError)
        error = error_cls.__new__(error_cls)
        AuctionError.__init__(
            error, data.get("message", ""), **(data.get("context") or {})
        )
        return error


class InvalidInput(AuctionError):
    code = "invalid_input"


class InvalidTransition(AuctionError):
    code = "invalid_transition"


class AuctionNotLive(AuctionError):
    code = "auction_not_live"


class LotAlreadyLive(AuctionError):
    code = "lot_already_live"


class LotNotLive(AuctionError):
    code = "lot_not_live"


class BidRejected(AuctionError):
    """A bid that failed validation. Nothing was recorded."""

    code = "bid_rejected"


class BidTooLow(BidRejected):
    code = "bid_too_low"

    def __init__(self, current_price: Decimal, amount: Decimal):
        super().__init__(
            f"Bid {amount} must be higher than current price {current_price}",
            current_price=current_price,
            amount=amount,
        )


class IncrementTooSmall(BidRejected):
    code = "increment_too_small"

    def __init__(
        self, current_price: Decimal, amount: Decimal, min_increment: Decimal
    ):
        super().__init__(
            f"Minimum increment is {min_increment} (next legal bid is "
            f"{current_price + min_increment})",
            current_price=current_price,
            amount=amount,
            min_increment=min_increment,
            minimum_amount=current_price + min_increment,
        )


class InsufficientFunds(BidRejected):
    code = "insufficient_funds"

    def __init__(self, purse: Decimal, amount: Decimal):
        super().__init__(
            f"Insufficient purse for this bid: purse {purse}, bid {amount}",
            purse=purse,
            amount=amount,
            shortfall=amount - purse,
        )


class NotFound(AuctionError):
    code = "not_found"

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind} {entity_id} not found", kind=kind, id=entity_id)


class Contention(AuctionError):
    """The exclusion section for a lot or auction could not be entered in time."""

    code = "contention"

    def __init__(
        self,
        resource: str,
        key: str,
        timeout: Optional[float] = None,
        reason: str = "lock wait timed out",
    ):
        super().__init__(
            f"Could not enter {resource} {key}: {reason}",
            resource=resource,
            key=key,
            timeout=timeout,
            reason=reason,
        )


ERRORS_BY_CODE: Dict[str, Type[AuctionError]] = {
    error_cls.code: error_cls
    for error_cls in (
        AuctionError,
        InvalidInput,
        InvalidTransition,
        AuctionNotLive,
        LotAlreadyLive,
        LotNotLive,
        BidRejected,
        BidTooLow,
        IncrementTooSmall,
        InsufficientFunds,
        NotFound,
        Contention,
    )
}
