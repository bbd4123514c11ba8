"""CLI tool for journal maintenance.

Usage:
    python -m tradejournal.cli recompute
    python -m tradejournal.cli stats [ticker_id]
"""

import asyncio
import json
import sys

from sqlmodel import Session, select

from tradejournal.database import engine, create_db_and_tables
from tradejournal.models.ticker import Ticker
from tradejournal.models.trade import Trade
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.services.trade_stats import StatsOptions, compute_statistics
from tradejournal.services.trade_writer import recompute_all_trades
from tradejournal.utils.logging import setup_logging


def recompute():
    """Re-derive every trade and rebuild every ticker rollup."""
    create_db_and_tables()

    with Session(engine) as session:
        recompute_all_trades(session)
        ticker_ids = session.exec(select(Ticker.id)).all()

    rollup = TickerRollup(engine)

    async def _rebuild():
        for ticker_id in sorted(ticker_ids):
            await rollup.notify(ticker_id)

    asyncio.run(_rebuild())
    print(f"Recomputed trades for {len(ticker_ids)} tickers.")


def stats(ticker_id: int | None = None):
    """Print the statistics snapshot for closed and partial trades."""
    create_db_and_tables()

    with Session(engine) as session:
        trades = session.exec(select(Trade)).all()
        snapshot = compute_statistics(trades, StatsOptions(ticker_id=ticker_id))

    print(json.dumps(snapshot.to_dict(), indent=2))


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m tradejournal.cli <command>")
        print("Commands: recompute, stats [ticker_id]")
        sys.exit(1)

    setup_logging()
    command = sys.argv[1]
    if command == "recompute":
        recompute()
    elif command == "stats":
        ticker_id = None
        if len(sys.argv) > 2:
            if not sys.argv[2].isdigit():
                print(f"Invalid ticker id: {sys.argv[2]}")
                sys.exit(1)
            ticker_id = int(sys.argv[2])
        stats(ticker_id)
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
