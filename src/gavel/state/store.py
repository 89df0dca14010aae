"""
Storage collaborator for auction records.

The core only talks to the AuctionStore protocol. InMemoryStore is the
reference implementation:
- Records are handed out as private copies (callers mutate freely)
- Saves are compare-and-set on the record's ``version``
- Bids and events are append-only
"""

import asyncio
import copy
import logging
from datetime import datetime
from typing import Dict, List, Optional, Protocol

from .events import Event, EventType
from ..core.errors import Contention, InvalidInput, NotFound
from ..core.types import Auction, Bid, Lot, Player, Team


logger = logging.getLogger(__name__)


class AuctionStore(Protocol):
    """
    Durable storage the coordinator depends on.

    Implementations must make ``save_lot`` and ``commit_bid`` atomic per lot
    and reject stale versions with Contention.
    """

    async def add_auction(self, auction: Auction) -> Auction: ...

    async def get_auction(self, auction_id: str) -> Auction: ...

    async def save_auction(self, auction: Auction) -> Auction: ...

    async def add_team(self, team: Team) -> Team: ...

    async def get_team(self, team_id: str) -> Team: ...

    async def list_teams(self) -> List[Team]: ...

    async def add_player(self, player: Player) -> Player: ...

    async def get_player(self, player_id: str) -> Player: ...

    async def save_player(self, player: Player) -> Player: ...

    async def list_players(self) -> List[Player]: ...

    async def add_lot(self, lot: Lot) -> Lot: ...

    async def get_lot(self, lot_id: str) -> Lot: ...

    async def save_lot(self, lot: Lot) -> Lot: ...

    async def list_lots(self, auction_id: str) -> List[Lot]: ...

    async def commit_bid(self, lot: Lot, bid: Bid) -> Bid: ...

    async def list_bids(self, lot_id: str) -> List[Bid]: ...

    async def append_event(self, event: Event) -> Event: ...

    async def get_events(
        self,
        auction_id: str,
        event_type: Optional[EventType] = None,
        lot_id: Optional[str] = None,
        after: Optional[datetime] = None,
    ) -> List[Event]: ...


class InMemoryStore:
    """
    In-process AuctionStore.

    Every call yields to the event loop first (``latency`` seconds, 0 by
    default), so concurrent callers interleave the way they would against
    a real database.
    """

    def __init__(self, latency: float = 0.0):
        """
        Initialize store.

        Args:
            latency: Simulated I/O delay per call, in seconds
        """
        self.latency = latency

        self._auctions: Dict[str, Auction] = {}
        self._teams: Dict[str, Team] = {}
        self._players: Dict[str, Player] = {}
        self._lots: Dict[str, Lot] = {}

        # Lot ids per auction, in creation order
        self._lots_by_auction: Dict[str, List[str]] = {}

        # Append-only logs
        self._bids: Dict[str, List[Bid]] = {}
        self._events: Dict[str, List[Event]] = {}

    async def _io(self):
        await asyncio.sleep(self.latency)

    # ========================================================================
    # AUCTIONS
    # ========================================================================

    async def add_auction(self, auction: Auction) -> Auction:
        await self._io()
        self._auctions[auction.auction_id] = copy.deepcopy(auction)
        self._lots_by_auction.setdefault(auction.auction_id, [])
        self._events.setdefault(auction.auction_id, [])
        return auction

    async def get_auction(self, auction_id: str) -> Auction:
        await self._io()
        auction = self._auctions.get(auction_id)
        if auction is None:
            raise NotFound("Auction", auction_id)
        return copy.deepcopy(auction)

    async def save_auction(self, auction: Auction) -> Auction:
        await self._io()
        stored = self._auctions.get(auction.auction_id)
        if stored is None:
            raise NotFound("Auction", auction.auction_id)
        self._check_version("auction", auction.auction_id, stored.version, auction.version)
        auction.version += 1
        self._auctions[auction.auction_id] = copy.deepcopy(auction)
        return auction

    # ========================================================================
    # TEAMS AND PLAYERS
    # ========================================================================

    async def add_team(self, team: Team) -> Team:
        await self._io()
        # Name uniqueness is a store constraint, checked atomically with the insert
        if any(t.name == team.name for t in self._teams.values()):
            raise InvalidInput(
                "Team with this name already exists", field="name", value=team.name
            )
        self._teams[team.team_id] = copy.deepcopy(team)
        return team

    async def get_team(self, team_id: str) -> Team:
        await self._io()
        team = self._teams.get(team_id)
        if team is None:
            raise NotFound("Team", team_id)
        return copy.deepcopy(team)

    async def list_teams(self) -> List[Team]:
        await self._io()
        return [copy.deepcopy(t) for t in self._teams.values()]

    async def add_player(self, player: Player) -> Player:
        await self._io()
        self._players[player.player_id] = copy.deepcopy(player)
        return player

    async def get_player(self, player_id: str) -> Player:
        await self._io()
        player = self._players.get(player_id)
        if player is None:
            raise NotFound("Player", player_id)
        return copy.deepcopy(player)

    async def save_player(self, player: Player) -> Player:
        await self._io()
        if player.player_id not in self._players:
            raise NotFound("Player", player.player_id)
        self._players[player.player_id] = copy.deepcopy(player)
        return player

    async def list_players(self) -> List[Player]:
        await self._io()
        return [copy.deepcopy(p) for p in self._players.values()]

    # ========================================================================
    # LOTS AND BIDS
    # ========================================================================

    async def add_lot(self, lot: Lot) -> Lot:
        await self._io()
        if lot.auction_id not in self._auctions:
            raise NotFound("Auction", lot.auction_id)
        self._lots[lot.lot_id] = copy.deepcopy(lot)
        self._lots_by_auction[lot.auction_id].append(lot.lot_id)
        self._bids[lot.lot_id] = []
        return lot

    async def get_lot(self, lot_id: str) -> Lot:
        await self._io()
        lot = self._lots.get(lot_id)
        if lot is None:
            raise NotFound("Lot", lot_id)
        return copy.deepcopy(lot)

    async def save_lot(self, lot: Lot) -> Lot:
        await self._io()
        self._put_lot(lot)
        return lot

    async def list_lots(self, auction_id: str) -> List[Lot]:
        await self._io()
        if auction_id not in self._auctions:
            raise NotFound("Auction", auction_id)
        return [
            copy.deepcopy(self._lots[lot_id])
            for lot_id in self._lots_by_auction[auction_id]
        ]

    async def commit_bid(self, lot: Lot, bid: Bid) -> Bid:
        """Save the advanced lot and append its bid as one atomic write."""
        await self._io()
        self._put_lot(lot)
        self._bids[lot.lot_id].append(bid)
        return bid

    async def list_bids(self, lot_id: str) -> List[Bid]:
        await self._io()
        if lot_id not in self._lots:
            raise NotFound("Lot", lot_id)
        return list(self._bids[lot_id])

    def _put_lot(self, lot: Lot):
        stored = self._lots.get(lot.lot_id)
        if stored is None:
            raise NotFound("Lot", lot.lot_id)
        self._check_version("lot", lot.lot_id, stored.version, lot.version)
        lot.version += 1
        self._lots[lot.lot_id] = copy.deepcopy(lot)

    @staticmethod
    def _check_version(resource: str, key: str, stored: int, expected: int):
        if stored != expected:
            logger.debug(
                f"[InMemoryStore] Stale {resource} {key}: "
                f"version {expected}, stored {stored}"
            )
            raise Contention(resource, key, reason="stale version")

    # ========================================================================
    # EVENT LOG
    # ========================================================================

    async def append_event(self, event: Event) -> Event:
        await self._io()
        self._events.setdefault(event.auction_id, []).append(event)
        return event

    async def get_events(
        self,
        auction_id: str,
        event_type: Optional[EventType] = None,
        lot_id: Optional[str] = None,
        after: Optional[datetime] = None,
    ) -> List[Event]:
        """
        Get events for an auction with optional filters.

        Args:
            auction_id: Auction ID
            event_type: Filter by event type
            lot_id: Filter by lot
            after: Filter events after timestamp

        Returns:
            List of events in append order
        """
        await self._io()
        if auction_id not in self._auctions:
            raise NotFound("Auction", auction_id)
        events = self._events.get(auction_id, [])

        if event_type:
            events = [e for e in events if e.event_type == event_type]

        if lot_id:
            events = [e for e in events if e.lot_id == lot_id]

        if after:
            events = [e for e in events if e.timestamp > after]

        return list(events)
