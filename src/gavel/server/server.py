"""
GavelServer - serves an AuctionCoordinator over HTTP.
"""

import logging
from typing import Optional

import uvicorn

from .app import create_app
from ..config import AuctionSettings
from ..coordinators.auction import AuctionCoordinator
from ..state.store import AuctionStore


logger = logging.getLogger(__name__)


class GavelServer:
    """
    Gavel Server - HTTP front for one auction coordinator.

    Architecture:
    1. Receives a JSON request (create/start/close, place bid, queries)
    2. The FastAPI app validates it and calls the AuctionCoordinator
    3. AuctionError kinds come back as JSON error payloads
    """

    def __init__(
        self,
        settings: Optional[AuctionSettings] = None,
        store: Optional[AuctionStore] = None,
        coordinator: Optional[AuctionCoordinator] = None,
    ):
        """
        Initialize GavelServer.

        Args:
            settings: Auction and server settings (read from the environment if None)
            store: Storage collaborator (in-memory if None)
            coordinator: Pre-built coordinator (overrides settings/store)
        """
        self.settings = settings or AuctionSettings.from_env()
        self.coordinator = coordinator or AuctionCoordinator(
            store=store, settings=self.settings
        )
        self.host = self.settings.host
        self.port = self.settings.port
        self.url = f"http://{self.host}:{self.port}"

        self.app = create_app(self.coordinator)

        logger.info(f"[GavelServer] Initialized server at {self.url}")

    def run(self, **kwargs):
        """
        Run the HTTP server.

        This blocks until the server is stopped (Ctrl+C).

        Args:
            **kwargs: Additional arguments to pass to uvicorn.run()
        """
        logger.info(f"[GavelServer] Starting server at {self.url}")
        logger.info(
            f"[GavelServer] Increments: {self.settings.low_increment} below "
            f"{self.settings.increment_threshold}, {self.settings.high_increment} above"
        )

        uvicorn.run(
            self.app,
            host=self.host,
            port=self.port,
            **kwargs,
        )
