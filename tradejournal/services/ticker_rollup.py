"""Denormalized per-ticker counters: trades, P/L, charts and chart tags.

Recomputed from the trade and chart tables after every write. One instance per
application; recomputations for the same ticker are serialized by a per-ticker
lock owned by the instance, and the database work runs in a worker thread.
"""

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlmodel import Session, select

from tradejournal.models.chart import Chart
from tradejournal.models.ticker import Ticker
from tradejournal.models.trade import Trade
from tradejournal.services.chart_measurements import collect_tags

logger = logging.getLogger(__name__)


class TickerRollup:
    def __init__(self, engine):
        self._engine = engine
        self._locks: dict[int, asyncio.Lock] = {}
        self._locks_guard = asyncio.Lock()

    async def _get_lock(self, ticker_id: int) -> asyncio.Lock:
        async with self._locks_guard:
            lock = self._locks.get(ticker_id)
            if lock is None:
                lock = asyncio.Lock()
                self._locks[ticker_id] = lock
            return lock

    def is_busy(self, ticker_id: int) -> bool:
        """True while a recomputation for this ticker is in flight."""
        lock = self._locks.get(ticker_id)
        return lock is not None and lock.locked()

    async def recompute(self, ticker_id: int) -> Ticker | None:
        """Rebuild every counter for one ticker. Returns None if it no longer exists."""
        lock = await self._get_lock(ticker_id)
        if self.is_busy(ticker_id):
            logger.info(f"[ticker_{ticker_id}] Rollup in flight, waiting")
        async with lock:
            return await asyncio.to_thread(self._recompute_once, ticker_id)

    def _recompute_once(self, ticker_id: int) -> Ticker | None:
        with Session(self._engine) as session:
            ticker = session.get(Ticker, ticker_id)
            if ticker is None:
                logger.warning(f"[ticker_{ticker_id}] Rollup skipped, ticker not found")
                return None

            count, total = session.exec(
                select(
                    func.count(Trade.id),
                    func.coalesce(func.sum(Trade.profit_loss_amount), 0.0),
                ).where(Trade.ticker_id == ticker_id)
            ).one()
            chart_tags = session.exec(
                select(Chart.tags).where(Chart.ticker_id == ticker_id)
            ).all()

            ticker.trades_count = int(count)
            ticker.profit_loss = round(float(total), 2)
            ticker.charts_count = len(chart_tags)
            ticker.tags = collect_tags(chart_tags)
            ticker.updated_at = datetime.now(timezone.utc)
            session.add(ticker)
            session.commit()
            session.refresh(ticker)

            logger.info(
                f"[{ticker.symbol}] Rollup: trades={ticker.trades_count} "
                f"P/L=${ticker.profit_loss:.2f} charts={ticker.charts_count}"
            )
            return ticker

    async def notify(self, ticker_id: int | None):
        """Best-effort recomputation after a trade or chart write. Never raises."""
        if ticker_id is None:
            return
        try:
            await self.recompute(ticker_id)
        except Exception as e:
            logger.error(f"[ticker_{ticker_id}] Rollup failed: {e}", exc_info=True)
