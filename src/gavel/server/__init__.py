"""
Gavel Server - HTTP transport for live auctions.

Maps JSON requests onto AuctionCoordinator operations.
"""

from .app import create_app
from .server import GavelServer

__all__ = [
    "GavelServer",
    "create_app",
]
