"""
Auction Coordinator.

The single entry point transports and administrative tools call. It owns the
exclusion sections:
- Auction-scoped section: auction transitions, lot creation, lot start/close
- Lot-scoped section: bids (through BidSequencer) and lot close

Lock order is always auction -> lot, so the two tables never deadlock.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Union

from .locks import KeyedLocks
from .sequencer import BidSequencer
from ..config import AuctionSettings
from ..core.errors import InvalidTransition
from ..core.types import (
    Auction,
    Bid,
    Lot,
    LotStatus,
    MoneyLike,
    Player,
    PlayerCategory,
    PlayerStatus,
    Team,
    to_money,
)
from ..rules.validator import BidValidator
from ..state.events import Event, EventType
from ..state.machines import AuctionStateMachine, LotStateMachine
from ..state.store import AuctionStore, InMemoryStore

logger = logging.getLogger(__name__)


class AuctionCoordinator:
    """
    Drives auctions and lots forward and accepts bids.

    Uses the store for:
    - Auction, lot, team, player and bid records
    - Event logging (audit trail)
    """

    def __init__(
        self,
        store: Optional[AuctionStore] = None,
        settings: Optional[AuctionSettings] = None,
    ):
        """
        Initialize auction coordinator.

        Args:
            store: Storage collaborator (in-memory store if None)
            settings: Auction settings (defaults if None)
        """
        self.store = store if store is not None else InMemoryStore()
        self.settings = settings or AuctionSettings()

        self.validator = BidValidator(self.settings.increment_rules())
        self.auction_locks = KeyedLocks("auction", self.settings.lock_timeout)
        self.lot_locks = KeyedLocks("lot", self.settings.lock_timeout)
        self.sequencer = BidSequencer(
            store=self.store,
            validator=self.validator,
            lot_locks=self.lot_locks,
            max_attempts=self.settings.max_bid_attempts,
            retry_backoff=self.settings.retry_backoff,
        )

    # ========================================================================
    # ADMINISTRATION
    # ========================================================================

    async def create_team(
        self, name: str, purse: MoneyLike, max_squad_size: Optional[int] = None
    ) -> Team:
        if max_squad_size is None:
            max_squad_size = self.settings.default_max_squad_size
        team = Team.create(name, purse, max_squad_size)
        await self.store.add_team(team)
        logger.info(f"[AuctionCoordinator] Registered team {team.name} ({team.team_id})")
        return team

    async def create_player(
        self,
        name: str,
        category: Union[PlayerCategory, str],
        base_price: MoneyLike,
    ) -> Player:
        player = Player.create(name, category, base_price)
        await self.store.add_player(player)
        logger.info(f"[AuctionCoordinator] Added player {player.name} ({player.player_id})")
        return player

    async def get_team(self, team_id: str) -> Team:
        return await self.store.get_team(team_id)

    async def list_teams(self) -> List[Team]:
        return await self.store.list_teams()

    async def get_player(self, player_id: str) -> Player:
        return await self.store.get_player(player_id)

    async def list_players(self) -> List[Player]:
        return await self.store.list_players()

    # ========================================================================
    # AUCTION LIFECYCLE
    # ========================================================================

    async def create_auction(self) -> Auction:
        """Create a new auction in CREATED state."""
        auction = Auction.create()
        await self.store.add_auction(auction)
        await self._emit(auction.auction_id, EventType.AUCTION_CREATED)
        logger.info(f"[AuctionCoordinator] Created auction {auction.auction_id}")
        return auction

    async def start_auction(self, auction_id: str) -> Auction:
        """CREATED -> LIVE."""
        async with self.auction_locks.hold(auction_id):
            auction = await self.store.get_auction(auction_id)
            AuctionStateMachine.start(auction)
            await self.store.save_auction(auction)
            await self._emit(auction_id, EventType.AUCTION_STARTED)

        logger.info(f"[AuctionCoordinator] Started auction {auction_id}")
        return auction

    async def finish_auction(self, auction_id: str) -> Auction:
        """
        LIVE -> FINISHED.

        Refused while one of the auction's lots is still LIVE; close it first.
        """
        async with self.auction_locks.hold(auction_id):
            auction = await self.store.get_auction(auction_id)
            live = [
                lot
                for lot in await self.store.list_lots(auction_id)
                if lot.status == LotStatus.LIVE
            ]
            if live:
                raise InvalidTransition(
                    "Cannot finish an auction while a lot is LIVE",
                    auction_id=auction_id,
                    live_lot_id=live[0].lot_id,
                )
            AuctionStateMachine.finish(auction)
            await self.store.save_auction(auction)
            await self._emit(auction_id, EventType.AUCTION_FINISHED)

        logger.info(f"[AuctionCoordinator] Finished auction {auction_id}")
        return auction

    async def get_auction(self, auction_id: str) -> Auction:
        return await self.store.get_auction(auction_id)

    # ========================================================================
    # LOT LIFECYCLE
    # ========================================================================

    async def create_lot(
        self,
        auction_id: str,
        player_id: str,
        base_price: Optional[MoneyLike] = None,
    ) -> Lot:
        """
        Put a player up in an auction.

        Args:
            auction_id: Owning auction (must not be FINISHED)
            player_id: Catalog player
            base_price: Opening price (defaults to the player's base price)
        """
        async with self.auction_locks.hold(auction_id):
            auction = await self.store.get_auction(auction_id)
            player = await self.store.get_player(player_id)
            price = player.base_price if base_price is None else base_price
            lot = LotStateMachine.create(auction, player, price)
            await self.store.add_lot(lot)
            await self._emit(
                auction_id,
                EventType.LOT_CREATED,
                lot_id=lot.lot_id,
                data={"player_id": player_id, "base_price": str(lot.base_price)},
            )

        logger.info(
            f"[AuctionCoordinator] Created lot {lot.lot_id} for {player.name} "
            f"at {lot.base_price}"
        )
        return lot

    async def start_lot(self, lot_id: str) -> Lot:
        """
        NOT_STARTED -> LIVE.

        The sibling check and the status write happen inside the auction's
        section, so two lots of one auction can never both go LIVE.
        """
        lot = await self.store.get_lot(lot_id)
        auction_id = lot.auction_id

        async with self.auction_locks.hold(auction_id):
            async with self.lot_locks.hold(lot_id):
                lot = await self.store.get_lot(lot_id)
                auction = await self.store.get_auction(auction_id)
                siblings = await self.store.list_lots(auction_id)
                LotStateMachine.start(lot, auction, siblings)
                await self.store.save_lot(lot)
                await self._emit(
                    auction_id,
                    EventType.LOT_STARTED,
                    lot_id=lot_id,
                    data={"base_price": str(lot.base_price)},
                )

        logger.info(f"[AuctionCoordinator] Lot {lot_id} is LIVE in auction {auction_id}")
        return lot

    async def mark_sold(
        self,
        lot_id: str,
        team_id: Optional[str] = None,
        final_price: Optional[MoneyLike] = None,
    ) -> Lot:
        """
        LIVE -> SOLD.

        Args:
            lot_id: Lot to close
            team_id: Winning team (defaults to the current leader)
            final_price: Hammer price (defaults to the current price)
        """
        return await self._close(lot_id, sold=True, team_id=team_id, final_price=final_price)

    async def mark_unsold(self, lot_id: str) -> Lot:
        """LIVE -> UNSOLD."""
        return await self._close(lot_id, sold=False)

    async def close_lot(self, lot_id: str) -> Lot:
        """Sell to the current leader if any bid was accepted, else mark UNSOLD."""
        return await self._close(lot_id, sold=None)

    async def _close(
        self,
        lot_id: str,
        sold: Optional[bool],
        team_id: Optional[str] = None,
        final_price: Optional[MoneyLike] = None,
    ) -> Lot:
        lot = await self.store.get_lot(lot_id)
        auction_id = lot.auction_id

        async with self.auction_locks.hold(auction_id):
            async with self.lot_locks.hold(lot_id):
                lot = await self.store.get_lot(lot_id)
                player = await self.store.get_player(lot.player_id)
                if sold is None:
                    sold = lot.current_highest_bid_team_id is not None

                if sold:
                    winner = team_id or lot.current_highest_bid_team_id
                    if winner is None:
                        raise InvalidTransition(
                            "Lot has no bids; name a winning team or mark it unsold",
                            lot_id=lot_id,
                        )
                    await self.store.get_team(winner)
                    price = lot.current_price if final_price is None else to_money(
                        final_price, "final_price"
                    )
                    LotStateMachine.mark_sold(lot, winner, price)
                    event_type = EventType.LOT_SOLD
                    data = {"team_id": winner, "final_price": str(price)}
                    player_status = PlayerStatus.SOLD
                else:
                    LotStateMachine.mark_unsold(lot)
                    event_type = EventType.LOT_UNSOLD
                    data = {"last_price": str(lot.current_price)}
                    player_status = PlayerStatus.UNSOLD

                await self.store.save_lot(lot)
                player.status = player_status
                await self.store.save_player(player)
                await self._emit(auction_id, event_type, lot_id=lot_id, data=data)

        logger.info(f"[AuctionCoordinator] Lot {lot_id} closed as {lot.status.value}")
        return lot

    async def get_lot(self, lot_id: str) -> Lot:
        return await self.store.get_lot(lot_id)

    async def list_lots(self, auction_id: str) -> List[Lot]:
        return await self.store.list_lots(auction_id)

    async def get_live_lot(self, auction_id: str) -> Optional[Lot]:
        """The auction's LIVE lot, or None between lots."""
        for lot in await self.store.list_lots(auction_id):
            if lot.status == LotStatus.LIVE:
                return lot
        return None

    # ========================================================================
    # BIDDING
    # ========================================================================

    async def submit_bid(self, lot_id: str, team_id: str, amount: MoneyLike) -> Bid:
        """Submit a bid; see BidSequencer.submit_bid."""
        return await self.sequencer.submit_bid(lot_id, team_id, amount)

    async def list_bids(self, lot_id: str) -> List[Bid]:
        """Accepted bids of a lot in acceptance order."""
        bids = await self.store.list_bids(lot_id)
        return sorted(bids, key=lambda b: b.sequence)

    def minimum_bid(self, lot: Lot) -> Decimal:
        """Smallest amount the validator would accept on ``lot`` right now."""
        return self.validator.minimum_bid(lot.current_price)

    # ========================================================================
    # EVENTS
    # ========================================================================

    async def get_events(
        self,
        auction_id: str,
        event_type: Optional[EventType] = None,
        lot_id: Optional[str] = None,
    ) -> List[Event]:
        return await self.store.get_events(auction_id, event_type=event_type, lot_id=lot_id)

    async def _emit(
        self,
        auction_id: str,
        event_type: EventType,
        lot_id: Optional[str] = None,
        data: Optional[dict] = None,
    ) -> Event:
        event = Event.create(
            auction_id=auction_id,
            event_type=event_type,
            lot_id=lot_id,
            data=data,
        )
        return await self.store.append_event(event)
