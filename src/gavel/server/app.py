"""
HTTP surface for the auction coordinator.

Maps JSON requests onto AuctionCoordinator operations and AuctionError kinds
onto HTTP responses:
- NotFound -> 404
- Contention -> 409
- every other AuctionError -> 400

Authentication and role checks are left to a fronting gateway; the bidding
team is always named explicitly in the request body.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .models import (
    CreateLotInput,
    CreatePlayerInput,
    CreateTeamInput,
    PlaceBidInput,
    SellLotInput,
)
from ..coordinators.auction import AuctionCoordinator
from ..core.errors import AuctionError, Contention, NotFound
from ..core.types import Lot, LotStatus
from ..state.events import EventType

logger = logging.getLogger(__name__)


def error_status(error: AuctionError) -> int:
    if isinstance(error, NotFound):
        return 404
    if isinstance(error, Contention):
        return 409
    return 400


def create_app(coordinator: Optional[AuctionCoordinator] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        coordinator: Coordinator to serve (a fresh in-memory one if None)

    Returns:
        FastAPI app; the coordinator is available as ``app.state.coordinator``
    """
    coordinator = coordinator or AuctionCoordinator()

    app = FastAPI(title="Gavel Live Auction API")
    app.state.coordinator = coordinator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AuctionError)
    async def handle_auction_error(request: Request, exc: AuctionError):
        logger.debug(f"[GavelAPI] {request.method} {request.url.path} -> {exc.code}: {exc.message}")
        return JSONResponse(status_code=error_status(exc), content={"error": exc.to_dict()})

    def lot_view(lot: Lot) -> Dict[str, Any]:
        data = lot.to_dict()
        data["minimum_bid"] = (
            str(coordinator.minimum_bid(lot)) if lot.status == LotStatus.LIVE else None
        )
        return data

    @app.get("/")
    async def read_root():
        return {"message": "Gavel Live Auction API is running"}

    # Teams and players

    @app.post("/teams", status_code=201)
    async def create_team(payload: CreateTeamInput):
        team = await coordinator.create_team(
            payload.name, payload.purse, payload.max_squad_size
        )
        return team.to_dict()

    @app.get("/teams")
    async def list_teams():
        return [t.to_dict() for t in await coordinator.list_teams()]

    @app.get("/teams/{team_id}")
    async def get_team(team_id: str):
        return (await coordinator.get_team(team_id)).to_dict()

    @app.post("/players", status_code=201)
    async def create_player(payload: CreatePlayerInput):
        player = await coordinator.create_player(
            payload.name, payload.category, payload.base_price
        )
        return player.to_dict()

    @app.get("/players")
    async def list_players():
        return [p.to_dict() for p in await coordinator.list_players()]

    @app.get("/players/{player_id}")
    async def get_player(player_id: str):
        return (await coordinator.get_player(player_id)).to_dict()

    # Auctions

    @app.post("/auctions", status_code=201)
    async def create_auction():
        return (await coordinator.create_auction()).to_dict()

    @app.get("/auctions/{auction_id}")
    async def get_auction(auction_id: str):
        return (await coordinator.get_auction(auction_id)).to_dict()

    @app.post("/auctions/{auction_id}/start")
    async def start_auction(auction_id: str):
        return (await coordinator.start_auction(auction_id)).to_dict()

    @app.post("/auctions/{auction_id}/finish")
    async def finish_auction(auction_id: str):
        return (await coordinator.finish_auction(auction_id)).to_dict()

    @app.get("/auctions/{auction_id}/lots")
    async def list_lots(auction_id: str):
        return [lot_view(lot) for lot in await coordinator.list_lots(auction_id)]

    @app.get("/auctions/{auction_id}/live-lot")
    async def get_live_lot(auction_id: str):
        lot = await coordinator.get_live_lot(auction_id)
        return lot_view(lot) if lot else None

    @app.post("/auctions/{auction_id}/lots", status_code=201)
    async def create_lot(auction_id: str, payload: CreateLotInput):
        lot = await coordinator.create_lot(auction_id, payload.player_id, payload.base_price)
        return lot_view(lot)

    @app.get("/auctions/{auction_id}/events")
    async def get_events(
        auction_id: str,
        event_type: Optional[EventType] = None,
        lot_id: Optional[str] = None,
    ):
        events = await coordinator.get_events(auction_id, event_type=event_type, lot_id=lot_id)
        return [e.to_dict() for e in events]

    # Lots and bids

    @app.get("/lots/{lot_id}")
    async def get_lot(lot_id: str):
        return lot_view(await coordinator.get_lot(lot_id))

    @app.post("/lots/{lot_id}/start")
    async def start_lot(lot_id: str):
        return lot_view(await coordinator.start_lot(lot_id))

    @app.post("/lots/{lot_id}/close")
    async def close_lot(lot_id: str):
        return lot_view(await coordinator.close_lot(lot_id))

    @app.post("/lots/{lot_id}/sold")
    async def mark_sold(lot_id: str, payload: Optional[SellLotInput] = None):
        payload = payload or SellLotInput()
        lot = await coordinator.mark_sold(lot_id, payload.team_id, payload.final_price)
        return lot_view(lot)

    @app.post("/lots/{lot_id}/unsold")
    async def mark_unsold(lot_id: str):
        return lot_view(await coordinator.mark_unsold(lot_id))

    @app.get("/lots/{lot_id}/bids")
    async def list_bids(lot_id: str):
        return [b.to_dict() for b in await coordinator.list_bids(lot_id)]

    @app.post("/lots/{lot_id}/bids", status_code=201)
    async def place_bid(lot_id: str, payload: PlaceBidInput):
        bid = await coordinator.submit_bid(lot_id, payload.team_id, payload.amount)
        return bid.to_dict()

    return app
