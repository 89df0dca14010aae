"""
Gavel Client - remote side of a live auction.

Provides calls for tools and bidders to:
- Register teams and players
- Run auctions and lots
- Place bids
"""

from .client import GavelClient

__all__ = [
    "GavelClient",
]
