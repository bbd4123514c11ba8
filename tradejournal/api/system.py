"""System API: health check and full recomputation."""

import logging

from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from tradejournal.api.deps import get_ticker_rollup
from tradejournal.database import get_session
from tradejournal.models.ticker import Ticker
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.services.trade_writer import recompute_all_trades

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/system", tags=["system"])


@router.get("/health")
def health_check():
    return {"status": "ok"}


@router.post("/recompute")
async def recompute(
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    """Re-derive every trade, then rebuild the rollup of every ticker."""
    trades_count = recompute_all_trades(session)
    ticker_ids = session.exec(select(Ticker.id)).all()
    for ticker_id in sorted(ticker_ids):
        await rollup.notify(ticker_id)
    return {"status": "ok", "trades": trades_count, "tickers": len(ticker_ids)}
