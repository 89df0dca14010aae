import asyncio

import httpx
import pytest
import pytest_asyncio

from gavel.client import GavelClient
from gavel.core.errors import (
    IncrementTooSmall,
    InsufficientFunds,
    LotAlreadyLive,
    LotNotLive,
    NotFound,
)
from gavel.server import create_app


@pytest_asyncio.fixture
async def client(coordinator):
    transport = httpx.ASGITransport(app=create_app(coordinator))
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        async with GavelClient("http://test", httpx_client=http) as gavel:
            yield gavel


@pytest_asyncio.fixture
async def live_lot_id(client):
    auction = await client.create_auction()
    await client.start_auction(auction["auction_id"])
    player = await client.create_player("S. Gill", "BAT", "2.00")
    lot = await client.create_lot(auction["auction_id"], player["player_id"])
    started = await client.start_lot(lot["lot_id"])
    assert started["status"] == "LIVE"
    return started["lot_id"]


@pytest.mark.asyncio
async def test_root(client) -> None:
    response = await client._httpx_client.get("/")
    assert response.status_code == 200
    assert "running" in response.json()["message"]


@pytest.mark.asyncio
async def test_full_lot_over_http(client) -> None:
    rich = await client.create_team("Mumbai", "100.00")
    poor = await client.create_team("Delhi", "2.50")
    assert rich["purse"] == "100.00"
    assert {t["name"] for t in await client.list_teams()} == {"Mumbai", "Delhi"}

    auction = await client.create_auction()
    auction_id = auction["auction_id"]
    assert auction["status"] == "CREATED"
    assert (await client.start_auction(auction_id))["status"] == "LIVE"

    player = await client.create_player("R. Jadeja", "AR", "2.00")
    lot = await client.create_lot(auction_id, player["player_id"])
    assert lot["base_price"] == "2.00"
    assert lot["minimum_bid"] is None
    assert await client.get_live_lot(auction_id) is None

    lot = await client.start_lot(lot["lot_id"])
    lot_id = lot["lot_id"]
    assert lot["minimum_bid"] == "2.20"
    assert (await client.get_live_lot(auction_id))["lot_id"] == lot_id

    bid = await client.place_bid(lot_id, rich["team_id"], "2.20")
    assert bid["amount"] == "2.20"
    assert bid["sequence"] == 1
    await client.place_bid(lot_id, poor["team_id"], "2.40")
    await client.place_bid(lot_id, rich["team_id"], "2.60")

    with pytest.raises(InsufficientFunds):
        await client.place_bid(lot_id, poor["team_id"], "2.90")

    current = await client.get_lot(lot_id)
    assert current["current_price"] == "2.60"
    assert current["current_highest_bid_team_id"] == rich["team_id"]
    assert current["minimum_bid"] == "2.80"
    assert [b["amount"] for b in await client.list_bids(lot_id)] == ["2.20", "2.40", "2.60"]

    closed = await client.close_lot(lot_id)
    assert closed["status"] == "SOLD"
    assert closed["minimum_bid"] is None

    with pytest.raises(LotNotLive):
        await client.place_bid(lot_id, rich["team_id"], "3.00")

    players = await client.list_players()
    assert players[0]["status"] == "SOLD"

    finished = await client.finish_auction(auction_id)
    assert finished["status"] == "FINISHED"

    sold_events = await client.get_events(auction_id, event_type="lot_sold")
    assert len(sold_events) == 1
    assert sold_events[0]["data"]["team_id"] == rich["team_id"]

    all_types = [e["event_type"] for e in await client.get_events(auction_id)]
    assert all_types[0] == "auction_created"
    assert all_types[-1] == "auction_finished"
    assert all_types.count("bid_accepted") == 3


@pytest.mark.asyncio
async def test_rejection_is_rebuilt_as_typed_error(client, live_lot_id) -> None:
    team = await client.create_team("Punjab", "100.00")

    with pytest.raises(IncrementTooSmall) as exc:
        await client.place_bid(live_lot_id, team["team_id"], "2.10")

    assert exc.value.context["minimum_amount"] == "2.20"
    assert exc.value.context["min_increment"] == "0.2"
    assert (await client.get_lot(live_lot_id))["bid_count"] == 0


@pytest.mark.asyncio
async def test_status_codes(client, live_lot_id) -> None:
    http = client._httpx_client

    missing = await http.get("/lots/lot-missing")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "not_found"

    lot = await client.get_lot(live_lot_id)
    player = await client.create_player("K. Rahul", "WKB", "3.00")
    second = await client.create_lot(lot["auction_id"], player["player_id"])

    conflict = await http.post(f"/lots/{second['lot_id']}/start")
    assert conflict.status_code == 400
    assert conflict.json()["error"]["code"] == "lot_already_live"
    assert conflict.json()["error"]["context"]["live_lot_id"] == live_lot_id

    with pytest.raises(LotAlreadyLive):
        await client.start_lot(second["lot_id"])


@pytest.mark.asyncio
async def test_missing_entities_raise_not_found(client, live_lot_id) -> None:
    with pytest.raises(NotFound):
        await client.get_auction("auc-missing")
    with pytest.raises(NotFound):
        await client.place_bid(live_lot_id, "team-missing", "2.20")


@pytest.mark.asyncio
async def test_malformed_request_is_rejected_before_the_core(client, live_lot_id) -> None:
    team = await client.create_team("Rajasthan", "100.00")

    # Three decimal places never reach the validator
    with pytest.raises(httpx.HTTPStatusError) as exc:
        await client.place_bid(live_lot_id, team["team_id"], "2.205")
    assert exc.value.response.status_code == 422

    with pytest.raises(httpx.HTTPStatusError):
        await client.create_player("Nobody", "KEEPER", "2.00")


@pytest.mark.asyncio
async def test_mark_sold_and_unsold_endpoints(client, live_lot_id) -> None:
    http = client._httpx_client

    # No bids: selling needs a winner
    refused = await http.post(f"/lots/{live_lot_id}/sold")
    assert refused.status_code == 400
    assert refused.json()["error"]["code"] == "invalid_transition"

    unsold = await client.mark_unsold(live_lot_id)
    assert unsold["status"] == "UNSOLD"
    assert unsold["current_price"] == "2.00"


@pytest.mark.asyncio
async def test_concurrent_bids_over_http(client, live_lot_id) -> None:
    teams = [await client.create_team(f"Team {i}", "100.00") for i in range(4)]
    amounts = ["2.20", "2.40", "2.60", "2.80"]

    results = await asyncio.gather(
        *(
            client.place_bid(live_lot_id, team["team_id"], amount)
            for team, amount in zip(teams, amounts)
        ),
        return_exceptions=True,
    )

    accepted = [r for r in results if isinstance(r, dict)]
    assert accepted
    lot = await client.get_lot(live_lot_id)
    assert lot["bid_count"] == len(accepted)
    assert lot["current_price"] == max(r["amount"] for r in accepted)
    assert [b["sequence"] for b in await client.list_bids(live_lot_id)] == list(
        range(1, len(accepted) + 1)
    )


@pytest.mark.asyncio
async def test_client_lookups_and_explicit_sale(client, live_lot_id) -> None:
    leader = await client.create_team("Gujarat", "100.00")
    buyer = await client.create_team("Lucknow", "100.00")
    assert (await client.get_team(buyer["team_id"]))["name"] == "Lucknow"

    lot = await client.get_lot(live_lot_id)
    player = await client.get_player(lot["player_id"])
    assert player["name"] == "S. Gill"
    assert player["status"] == "AVAILABLE"

    await client.place_bid(live_lot_id, leader["team_id"], "2.20")
    sold = await client.mark_sold(live_lot_id, buyer["team_id"], "3.00")

    assert sold["status"] == "SOLD"
    events = await client.get_events(lot["auction_id"], event_type="lot_sold")
    assert events[0]["data"] == {"team_id": buyer["team_id"], "final_price": "3.00"}
    assert (await client.get_player(lot["player_id"]))["status"] == "SOLD"

    with pytest.raises(NotFound):
        await client.get_team("team-missing")
