"""
Gavel Client - async HTTP client for a Gavel server.

Used by bidding tools and admin scripts. Error payloads from the server are
re-raised as the matching AuctionError subclass, so callers handle
``BidTooLow`` the same way in-process or over HTTP.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

import httpx

from ..core.errors import AuctionError

logger = logging.getLogger(__name__)

Money = Union[Decimal, int, str]


class GavelClient:
    """
    Thin async wrapper over the Gavel HTTP API.

    Basic Usage:
        async with GavelClient("http://localhost:8000") as client:
            auction = await client.create_auction()
            await client.start_auction(auction["auction_id"])
            ...
            bid = await client.place_bid(lot_id, team_id, "2.20")
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        httpx_client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize Gavel client.

        Args:
            base_url: Server URL
            httpx_client: Optional shared httpx client (created if None)
        """
        self.base_url = base_url.rstrip("/")
        self._owns_client = httpx_client is None
        self._httpx_client = httpx_client or httpx.AsyncClient(
            base_url=self.base_url, timeout=30
        )

    async def __aenter__(self) -> "GavelClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        """Close the underlying httpx client if this client created it."""
        if self._owns_client:
            await self._httpx_client.aclose()

    async def _request(
        self, method: str, path: str, json: Optional[Dict[str, Any]] = None, **kwargs
    ) -> Any:
        response = await self._httpx_client.request(method, path, json=json, **kwargs)
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = None
            if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
                error = AuctionError.from_dict(payload["error"])
                logger.debug(f"[GavelClient] {method} {path} failed: {error.code}")
                raise error
            response.raise_for_status()
        return response.json()

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    async def create_team(
        self, name: str, purse: Money, max_squad_size: Optional[int] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": name, "purse": str(purse)}
        if max_squad_size is not None:
            body["max_squad_size"] = max_squad_size
        return await self._request("POST", "/teams", json=body)

    async def list_teams(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/teams")

    async def get_team(self, team_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/teams/{team_id}")

    async def create_player(
        self, name: str, category: str, base_price: Money
    ) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/players",
            json={"name": name, "category": category, "base_price": str(base_price)},
        )

    async def list_players(self) -> List[Dict[str, Any]]:
        return await self._request("GET", "/players")

    async def get_player(self, player_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/players/{player_id}")

    # ========================================================================
    # AUCTIONS AND LOTS
    # ========================================================================

    async def create_auction(self) -> Dict[str, Any]:
        return await self._request("POST", "/auctions")

    async def get_auction(self, auction_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/auctions/{auction_id}")

    async def start_auction(self, auction_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/auctions/{auction_id}/start")

    async def finish_auction(self, auction_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/auctions/{auction_id}/finish")

    async def create_lot(
        self, auction_id: str, player_id: str, base_price: Optional[Money] = None
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {"player_id": player_id}
        if base_price is not None:
            body["base_price"] = str(base_price)
        return await self._request("POST", f"/auctions/{auction_id}/lots", json=body)

    async def list_lots(self, auction_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/auctions/{auction_id}/lots")

    async def get_live_lot(self, auction_id: str) -> Optional[Dict[str, Any]]:
        return await self._request("GET", f"/auctions/{auction_id}/live-lot")

    async def get_lot(self, lot_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/lots/{lot_id}")

    async def start_lot(self, lot_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/lots/{lot_id}/start")

    async def close_lot(self, lot_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/lots/{lot_id}/close")

    async def mark_sold(
        self,
        lot_id: str,
        team_id: Optional[str] = None,
        final_price: Optional[Money] = None,
    ) -> Dict[str, Any]:
        """Close a lot as SOLD (defaults to the current leader and price)."""
        body: Dict[str, Any] = {}
        if team_id is not None:
            body["team_id"] = team_id
        if final_price is not None:
            body["final_price"] = str(final_price)
        return await self._request("POST", f"/lots/{lot_id}/sold", json=body)

    async def mark_unsold(self, lot_id: str) -> Dict[str, Any]:
        return await self._request("POST", f"/lots/{lot_id}/unsold")

    # ========================================================================
    # BIDDING
    # ========================================================================

    async def place_bid(self, lot_id: str, team_id: str, amount: Money) -> Dict[str, Any]:
        """
        Place a bid.

        Raises:
            BidTooLow, IncrementTooSmall, InsufficientFunds, LotNotLive,
            NotFound, Contention: as reported by the server
        """
        return await self._request(
            "POST",
            f"/lots/{lot_id}/bids",
            json={"team_id": team_id, "amount": str(amount)},
        )

    async def list_bids(self, lot_id: str) -> List[Dict[str, Any]]:
        return await self._request("GET", f"/lots/{lot_id}/bids")

    async def get_events(
        self, auction_id: str, event_type: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        params = {"event_type": event_type} if event_type else None
        return await self._request("GET", f"/auctions/{auction_id}/events", params=params)
