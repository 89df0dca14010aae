"""Bid acceptance rules."""

from .validator import BidValidator, IncrementRules

__all__ = ["BidValidator", "IncrementRules"]
