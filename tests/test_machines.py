from decimal import Decimal

import pytest

from gavel.core.errors import (
    AuctionNotLive,
    InvalidInput,
    InvalidTransition,
    LotAlreadyLive,
    LotNotLive,
)
from gavel.core.types import (
    Auction,
    AuctionStatus,
    Bid,
    LotStatus,
    Player,
    PlayerCategory,
    to_money,
)
from gavel.state.machines import AuctionStateMachine, LotStateMachine


def make_player() -> Player:
    return Player.create("J. Bumrah", PlayerCategory.BOWL, "1.50")


def live_auction() -> Auction:
    auction = Auction.create()
    AuctionStateMachine.start(auction)
    return auction


def test_auction_moves_forward_only() -> None:
    auction = Auction.create()
    assert auction.status == AuctionStatus.CREATED

    with pytest.raises(InvalidTransition):
        AuctionStateMachine.finish(auction)

    AuctionStateMachine.start(auction)
    assert auction.status == AuctionStatus.LIVE
    with pytest.raises(InvalidTransition):
        AuctionStateMachine.start(auction)

    AuctionStateMachine.finish(auction)
    assert auction.status == AuctionStatus.FINISHED
    with pytest.raises(InvalidTransition):
        AuctionStateMachine.start(auction)
    with pytest.raises(InvalidTransition):
        AuctionStateMachine.finish(auction)


def test_lot_create_initial_state() -> None:
    auction = Auction.create()
    player = make_player()
    lot = LotStateMachine.create(auction, player, "2.00")

    assert lot.auction_id == auction.auction_id
    assert lot.player_id == player.player_id
    assert lot.status == LotStatus.NOT_STARTED
    assert lot.current_price == lot.base_price == Decimal("2.00")
    assert lot.current_highest_bid_team_id is None


@pytest.mark.parametrize("price", ["0", "-1.00", "2.005", "abc"])
def test_lot_create_rejects_bad_base_price(price: str) -> None:
    with pytest.raises(InvalidInput):
        LotStateMachine.create(Auction.create(), make_player(), price)


def test_lot_create_rejected_in_finished_auction() -> None:
    auction = live_auction()
    AuctionStateMachine.finish(auction)
    with pytest.raises(InvalidTransition):
        LotStateMachine.create(auction, make_player(), "2.00")


def test_lot_start_requires_live_auction() -> None:
    auction = Auction.create()
    lot = LotStateMachine.create(auction, make_player(), "2.00")
    with pytest.raises(AuctionNotLive):
        LotStateMachine.start(lot, auction, [lot])
    assert lot.status == LotStatus.NOT_STARTED


def test_lot_start_refuses_second_live_lot() -> None:
    auction = live_auction()
    first = LotStateMachine.create(auction, make_player(), "2.00")
    second = LotStateMachine.create(auction, make_player(), "3.00")

    LotStateMachine.start(first, auction, [first, second])
    with pytest.raises(LotAlreadyLive) as exc:
        LotStateMachine.start(second, auction, [first, second])
    assert exc.value.context["live_lot_id"] == first.lot_id

    # Restarting the LIVE lot is a transition error, not a sibling conflict
    with pytest.raises(InvalidTransition):
        LotStateMachine.start(first, auction, [first, second])


def test_lot_bid_sold_and_terminal_states() -> None:
    auction = live_auction()
    lot = LotStateMachine.create(auction, make_player(), "2.00")

    with pytest.raises(LotNotLive):
        LotStateMachine.apply_accepted_bid(lot, "team-a", Decimal("2.20"))

    LotStateMachine.start(lot, auction, [lot])
    LotStateMachine.apply_accepted_bid(lot, "team-a", Decimal("2.20"))
    assert lot.current_price == Decimal("2.20")
    assert lot.current_highest_bid_team_id == "team-a"
    assert lot.bid_count == 1

    with pytest.raises(InvalidInput):
        LotStateMachine.mark_sold(lot, "team-a", Decimal("2.00"))

    LotStateMachine.mark_sold(lot, "team-a", Decimal("2.20"))
    assert lot.status == LotStatus.SOLD

    with pytest.raises(LotNotLive):
        LotStateMachine.mark_unsold(lot)
    with pytest.raises(LotNotLive):
        LotStateMachine.apply_accepted_bid(lot, "team-b", Decimal("3.00"))


def test_mark_unsold() -> None:
    auction = live_auction()
    lot = LotStateMachine.create(auction, make_player(), "2.00")
    with pytest.raises(LotNotLive):
        LotStateMachine.mark_unsold(lot)
    LotStateMachine.start(lot, auction, [lot])
    LotStateMachine.mark_unsold(lot)
    assert lot.status == LotStatus.UNSOLD
    assert lot.current_price == Decimal("2.00")


def test_replay_rebuilds_price_and_leader() -> None:
    auction = live_auction()
    lot = LotStateMachine.create(auction, make_player(), "2.00")
    assert LotStateMachine.replay(lot, []) == (Decimal("2.00"), None)

    bids = [
        Bid.create(lot.lot_id, "team-b", Decimal("2.60"), sequence=2),
        Bid.create(lot.lot_id, "team-a", Decimal("2.20"), sequence=1),
    ]
    assert LotStateMachine.replay(lot, bids) == (Decimal("2.60"), "team-b")


def test_to_money() -> None:
    assert to_money(2.2) == Decimal("2.20")
    assert to_money("6") == Decimal("6.00")
    for bad in ("1.001", "nan", "Infinity", True, None):
        with pytest.raises(InvalidInput):
            to_money(bad)
