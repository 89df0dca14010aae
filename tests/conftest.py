from decimal import Decimal

import pytest
import pytest_asyncio

from gavel.config import AuctionSettings
from gavel.coordinators.auction import AuctionCoordinator
from gavel.state.store import InMemoryStore


@pytest.fixture
def settings() -> AuctionSettings:
    return AuctionSettings(lock_timeout=1.0, max_bid_attempts=3, retry_backoff=0)


@pytest.fixture
def store() -> InMemoryStore:
    # Non-zero latency makes concurrent callers interleave inside sections
    return InMemoryStore(latency=0.001)


@pytest.fixture
def coordinator(store: InMemoryStore, settings: AuctionSettings) -> AuctionCoordinator:
    return AuctionCoordinator(store=store, settings=settings)


@pytest_asyncio.fixture
async def live_auction(coordinator: AuctionCoordinator):
    auction = await coordinator.create_auction()
    await coordinator.start_auction(auction.auction_id)
    return auction


@pytest_asyncio.fixture
async def live_lot(coordinator: AuctionCoordinator, live_auction):
    """A LIVE lot with base price 2.00."""
    player = await coordinator.create_player("V. Kohli", "BAT", Decimal("2.00"))
    lot = await coordinator.create_lot(live_auction.auction_id, player.player_id)
    return await coordinator.start_lot(lot.lot_id)


@pytest_asyncio.fixture
async def teams(coordinator: AuctionCoordinator):
    """Teams A and B with purse 100, team C with purse 2.50."""
    return {
        "A": await coordinator.create_team("Team A", "100"),
        "B": await coordinator.create_team("Team B", "100"),
        "C": await coordinator.create_team("Team C", "2.50"),
    }
