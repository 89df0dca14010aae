"""
Auction and lot state machines.

Both machines mutate the record they are handed and nothing else. Records
come from the store as private copies, so a transition that raises leaves
the stored state untouched, and a transition that succeeds is only visible
once the caller saves the record.
"""

from decimal import Decimal
from typing import Iterable, Optional, Tuple

from ..core.errors import (
    AuctionNotLive,
    InvalidInput,
    InvalidTransition,
    LotAlreadyLive,
    LotNotLive,
)
from ..core.types import (
    Auction,
    AuctionStatus,
    Bid,
    Lot,
    LotStatus,
    MoneyLike,
    Player,
    new_id,
    to_money,
)


class AuctionStateMachine:
    """CREATED -> LIVE -> FINISHED, forward only."""

    @staticmethod
    def start(auction: Auction) -> Auction:
        if auction.status != AuctionStatus.CREATED:
            raise InvalidTransition(
                "Only CREATED auctions can be started",
                auction_id=auction.auction_id,
                status=auction.status.value,
            )
        auction.status = AuctionStatus.LIVE
        return auction

    @staticmethod
    def finish(auction: Auction) -> Auction:
        if auction.status != AuctionStatus.LIVE:
            raise InvalidTransition(
                "Only LIVE auctions can be finished",
                auction_id=auction.auction_id,
                status=auction.status.value,
            )
        auction.status = AuctionStatus.FINISHED
        return auction

    @staticmethod
    def require_open(auction: Auction):
        """A FINISHED auction accepts no further lot operations."""
        if auction.status == AuctionStatus.FINISHED:
            raise InvalidTransition(
                "Auction is finished",
                auction_id=auction.auction_id,
                status=auction.status.value,
            )


class LotStateMachine:
    """NOT_STARTED -> LIVE -> {SOLD, UNSOLD}; SOLD and UNSOLD are terminal."""

    @staticmethod
    def create(auction: Auction, player: Player, base_price: MoneyLike) -> Lot:
        price = to_money(base_price, "base_price")
        if price <= 0:
            raise InvalidInput(
                "Base price must be greater than zero", field="base_price", value=price
            )
        AuctionStateMachine.require_open(auction)
        return Lot(
            lot_id=new_id("lot"),
            auction_id=auction.auction_id,
            player_id=player.player_id,
            base_price=price,
            current_price=price,
        )

    @staticmethod
    def start(lot: Lot, auction: Auction, siblings: Iterable[Lot]) -> Lot:
        """
        Open bidding on a lot.

        ``siblings`` must be the auction's lots as read inside the auction's
        exclusion section; the lot itself may appear among them.
        """
        if lot.status != LotStatus.NOT_STARTED:
            raise InvalidTransition(
                "Lot cannot be started",
                lot_id=lot.lot_id,
                status=lot.status.value,
            )
        if auction.status != AuctionStatus.LIVE:
            raise AuctionNotLive(
                "Auction is not LIVE",
                auction_id=auction.auction_id,
                status=auction.status.value,
            )
        for other in siblings:
            if other.lot_id != lot.lot_id and other.status == LotStatus.LIVE:
                raise LotAlreadyLive(
                    "Another lot is already being auctioned",
                    auction_id=auction.auction_id,
                    live_lot_id=other.lot_id,
                )
        lot.status = LotStatus.LIVE
        return lot

    @staticmethod
    def _require_live(lot: Lot, action: str):
        if lot.status != LotStatus.LIVE:
            raise LotNotLive(
                f"Only a LIVE lot can be {action}",
                lot_id=lot.lot_id,
                status=lot.status.value,
            )

    @staticmethod
    def apply_accepted_bid(lot: Lot, team_id: str, amount: Decimal) -> Lot:
        """Record a validated bid as the lot's new price and leader."""
        LotStateMachine._require_live(lot, "bid on")
        lot.current_price = amount
        lot.current_highest_bid_team_id = team_id
        lot.bid_count += 1
        return lot

    @staticmethod
    def mark_sold(lot: Lot, winning_team_id: str, final_price: Decimal) -> Lot:
        LotStateMachine._require_live(lot, "sold")
        if final_price < lot.current_price:
            raise InvalidInput(
                "Final price cannot be below the current price",
                field="final_price",
                value=final_price,
                current_price=lot.current_price,
            )
        lot.current_highest_bid_team_id = winning_team_id
        lot.current_price = final_price
        lot.status = LotStatus.SOLD
        return lot

    @staticmethod
    def mark_unsold(lot: Lot) -> Lot:
        LotStateMachine._require_live(lot, "unsold")
        lot.status = LotStatus.UNSOLD
        return lot

    @staticmethod
    def replay(lot: Lot, bids: Iterable[Bid]) -> Tuple[Decimal, Optional[str]]:
        """
        Rebuild (current price, leader) from a lot's accepted bids.

        Bids are applied in sequence order; the result must equal the lot's
        stored price and leader while it is LIVE.
        """
        price, leader = lot.base_price, None
        for bid in sorted(bids, key=lambda b: b.sequence):
            price, leader = bid.amount, bid.team_id
        return price, leader
