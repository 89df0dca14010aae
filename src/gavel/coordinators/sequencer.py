"""
Bid Sequencer.

Serializes every bid addressed to the same lot so that
"read price -> validate -> write price + append bid" is one indivisible step.
Bids on different lots never contend.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional, Set

from .locks import KeyedLocks
from ..core.errors import BidRejected, Contention
from ..core.types import Bid, MoneyLike, to_money
from ..rules.validator import BidValidator
from ..state.events import Event, EventType
from ..state.machines import LotStateMachine
from ..state.store import AuctionStore

logger = logging.getLogger(__name__)


class BidSequencer:
    """
    Per-lot exclusion section around bid validation and commit.

    Each attempt:
    1. Enters the lot's section (bounded wait)
    2. Re-reads the lot and team from the store
    3. Runs BidValidator against that fresh state
    4. Commits the advanced lot and the new Bid together

    Contention (lock timeout or a stale lot version at commit) is retried up
    to ``max_attempts`` times; every other error surfaces immediately.
    """

    def __init__(
        self,
        store: AuctionStore,
        validator: BidValidator,
        lot_locks: KeyedLocks,
        max_attempts: int = 3,
        retry_backoff: float = 0.01,
    ):
        """
        Initialize bid sequencer.

        Args:
            store: Storage collaborator
            validator: Bid acceptance rules
            lot_locks: Lock table keyed by lot id (shared with the coordinator)
            max_attempts: Attempts before Contention is surfaced
            retry_backoff: Base delay between attempts, in seconds
        """
        self.store = store
        self.validator = validator
        self.lot_locks = lot_locks
        self.max_attempts = max_attempts
        self.retry_backoff = retry_backoff

        # Attempts outlive cancelled callers; keep them referenced until done
        self._in_flight: Set[asyncio.Task] = set()

    def _forget(self, task: asyncio.Task):
        self._in_flight.discard(task)
        if not task.cancelled() and task.exception() is not None:
            # Marks the outcome retrieved when the caller has gone away
            logger.debug(f"[BidSequencer] Attempt ended with {task.exception()!r}")

    async def submit_bid(self, lot_id: str, team_id: str, amount: MoneyLike) -> Bid:
        """
        Submit a bid on a LIVE lot.

        Args:
            lot_id: Lot being bid on
            team_id: Bidding team (explicit, never taken from ambient context)
            amount: Proposed price

        Returns:
            The accepted Bid

        Raises:
            InvalidInput: amount is not a valid money value
            NotFound: lot or team does not exist
            LotNotLive, BidTooLow, IncrementTooSmall, InsufficientFunds:
                bid rejected, nothing recorded
            Contention: retry budget exhausted
        """
        value = to_money(amount)
        last_error: Optional[Contention] = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                # Waiting for the section is cancellable and leaves no trace
                await self.lot_locks.acquire(lot_id)
                # Once inside, the attempt commits or aborts on its own even
                # if the caller is cancelled; it releases the section itself.
                task = asyncio.ensure_future(self._attempt(lot_id, team_id, value))
                self._in_flight.add(task)
                task.add_done_callback(self._forget)
                return await asyncio.shield(task)
            except Contention as e:
                last_error = e
                logger.warning(
                    f"[BidSequencer] Contention on lot {lot_id} "
                    f"(attempt {attempt}/{self.max_attempts}): {e.message}"
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_backoff * attempt)

        raise last_error

    async def _attempt(self, lot_id: str, team_id: str, amount: Decimal) -> Bid:
        try:
            return await self._commit(lot_id, team_id, amount)
        finally:
            self.lot_locks.release(lot_id)

    async def _commit(self, lot_id: str, team_id: str, amount: Decimal) -> Bid:
        lot = await self.store.get_lot(lot_id)
        team = await self.store.get_team(team_id)

        try:
            self.validator.validate(lot.status, lot.current_price, team.purse, amount)
        except BidRejected as e:
            logger.debug(
                f"[BidSequencer] Rejected {amount} from {team_id} on lot {lot_id}: {e.code}"
            )
            raise

        previous_price = lot.current_price
        LotStateMachine.apply_accepted_bid(lot, team.team_id, amount)
        bid = Bid.create(
            lot_id=lot.lot_id,
            team_id=team.team_id,
            amount=amount,
            sequence=lot.bid_count,
        )
        await self.store.commit_bid(lot, bid)

        await self.store.append_event(
            Event.create(
                auction_id=lot.auction_id,
                event_type=EventType.BID_ACCEPTED,
                lot_id=lot.lot_id,
                data={
                    "bid_id": bid.bid_id,
                    "team_id": bid.team_id,
                    "amount": str(bid.amount),
                    "previous_price": str(previous_price),
                    "sequence": bid.sequence,
                },
            )
        )

        logger.debug(
            f"[BidSequencer] Accepted bid #{bid.sequence} on lot {lot_id}: "
            f"{previous_price} -> {amount} by {team_id}"
        )
        return bid
