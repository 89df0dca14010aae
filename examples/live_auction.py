"""
Simple Live Auction Example

This demonstrates a live sequential-bidding auction where:
- 4 teams bid against each other on 3 players, one lot at a time
- Every team fires its bids concurrently; the per-lot sequencer orders them
- Low bids and bids a team cannot afford are rejected without a trace
- Each lot is closed as SOLD to the leader, or UNSOLD if nobody bid

Run with --serve to expose the same coordinator over HTTP instead.
"""

import asyncio
import argparse
import logging
import random
from decimal import Decimal

from gavel import AuctionCoordinator, AuctionSettings
from gavel.core.errors import BidRejected, Contention
from gavel.core.types import PlayerCategory
from gavel.server import GavelServer
from gavel.state.store import InMemoryStore

logging.basicConfig(level=logging.WARNING, format="%(message)s")
logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

# Only show user-facing logs
logging.getLogger("gavel.coordinators.auction").setLevel(logging.INFO)
logging.getLogger("gavel.coordinators.sequencer").setLevel(logging.WARNING)
logging.getLogger("gavel.state.store").setLevel(logging.WARNING)


TEAMS = [
    ("Chennai", "12.00"),
    ("Mumbai", "9.00"),
    ("Kolkata", "6.50"),
    ("Hyderabad", "3.00"),
]

PLAYERS = [
    ("V. Kohli", PlayerCategory.BAT, "2.00"),
    ("J. Bumrah", PlayerCategory.BOWL, "1.50"),
    ("H. Pandya", PlayerCategory.AR, "4.80"),
]


def print_event_log(events, label: str):
    """Print formatted event log."""
    print(f"\n{label} EVENTS ({len(events)}):")
    for i, event in enumerate(events, 1):
        timestamp = event.timestamp.strftime("%H:%M:%S.%f")[:-3]
        event_info = f"  {i}. [{timestamp}] {event.event_type.value}"
        if event.lot_id:
            event_info += f" (lot: {event.lot_id})"
        if "amount" in event.data:
            event_info += f" - {event.data['amount']} by {event.data['team_id']}"
        elif "final_price" in event.data:
            event_info += f" - sold for {event.data['final_price']} to {event.data['team_id']}"
        print(event_info)
    print()


async def bidder(coordinator: AuctionCoordinator, lot_id: str, team_id: str, name: str, rounds: int):
    """Keep raising by the minimum increment, with a little jitter, until rejected."""
    for _ in range(rounds):
        await asyncio.sleep(random.uniform(0, 0.01))
        lot = await coordinator.get_lot(lot_id)
        if lot.current_highest_bid_team_id == team_id:
            continue

        amount = coordinator.minimum_bid(lot)
        try:
            await coordinator.submit_bid(lot_id, team_id, amount)
            logger.info(f"  {name:<10} bid {amount}")
        except BidRejected as e:
            # Beaten to it, or out of money
            logger.info(f"  {name:<10} rejected at {amount}: {e.code}")
            if e.code == "insufficient_funds":
                return
        except Contention as e:
            logger.info(f"  {name:<10} gave up: {e.message}")
            return


async def run_auction(rounds: int, show_events: bool):
    """Run one auction to completion with concurrent bidders."""
    settings = AuctionSettings.from_env()
    coordinator = AuctionCoordinator(store=InMemoryStore(latency=0.001), settings=settings)

    teams = [await coordinator.create_team(name, purse) for name, purse in TEAMS]
    players = [
        await coordinator.create_player(name, category, price)
        for name, category, price in PLAYERS
    ]

    auction = await coordinator.create_auction()
    await coordinator.start_auction(auction.auction_id)

    for player in players:
        lot = await coordinator.create_lot(auction.auction_id, player.player_id)
        await coordinator.start_lot(lot.lot_id)
        logger.info(f"\n{player.name} ({player.category.value}) opens at {lot.base_price}")

        await asyncio.gather(
            *(
                bidder(coordinator, lot.lot_id, team.team_id, team.name, rounds)
                for team in teams
            )
        )

        closed = await coordinator.close_lot(lot.lot_id)
        if closed.current_highest_bid_team_id:
            winner = next(
                t.name for t in teams if t.team_id == closed.current_highest_bid_team_id
            )
            logger.info(f"  SOLD to {winner} for {closed.current_price} after {closed.bid_count} bids")
        else:
            logger.info("  UNSOLD")

    await coordinator.finish_auction(auction.auction_id)

    print("\n" + "=" * 60)
    print("FINAL RESULTS")
    print("=" * 60)
    total = Decimal("0")
    for lot in await coordinator.list_lots(auction.auction_id):
        player = await coordinator.get_player(lot.player_id)
        print(f"  {player.name:<12} {lot.status.value:<7} {lot.current_price}")
        if lot.current_highest_bid_team_id:
            total += lot.current_price
    print(f"  Total spent: {total}")

    if show_events:
        print_event_log(await coordinator.get_events(auction.auction_id), "AUCTION")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Live Auction Example")
    parser.add_argument(
        "--rounds",
        type=int,
        default=6,
        help="Bid attempts per team per lot",
    )
    parser.add_argument(
        "--show-events",
        action="store_true",
        help="Show the full event log after the auction",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Run the HTTP server instead of the in-process demo",
    )
    args = parser.parse_args()

    if args.serve:
        logging.getLogger("gavel").setLevel(logging.INFO)
        GavelServer().run()
    else:
        asyncio.run(run_auction(args.rounds, args.show_events))
