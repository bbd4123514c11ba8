"""Trade journal API: CRUD, live price refresh and portfolio statistics."""

import logging
from datetime import datetime, time
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError
from sqlalchemy import func
from sqlmodel import Session, select

from tradejournal.api.deps import get_ticker_rollup
from tradejournal.config import settings
from tradejournal.database import get_session
from tradejournal.models.ticker import Ticker
from tradejournal.models.trade import Trade
from tradejournal.schemas.stats import StatsQuery
from tradejournal.schemas.trade import PriceUpdate, TradeCreate, TradeRead, TradeUpdate
from tradejournal.services.preferences import get_preference
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.services.trade_metrics import TradeValidationError
from tradejournal.services.trade_stats import compute_statistics
from tradejournal.services.trade_writer import apply_derived_fields
from tradejournal.utils.constants import STATUS_CLOSED, STATUS_FILTERS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _child_records(data: TradeCreate | TradeUpdate) -> dict:
    """Exit and stop records as JSON-ready dicts for the JSON columns."""
    records = {}
    if "exits" in data.model_fields_set or isinstance(data, TradeCreate):
        records["exits"] = [e.model_dump(mode="json") for e in (data.exits or [])]
    if "modified_stops" in data.model_fields_set or isinstance(data, TradeCreate):
        records["modified_stops"] = [s.model_dump(mode="json") for s in (data.modified_stops or [])]
    return records


def _derive(trade: Trade):
    try:
        apply_derived_fields(trade)
    except TradeValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get("", response_model=list[TradeRead])
def list_trades(
    status: str | None = None,
    ticker_id: int | None = None,
    limit: int = 50,
    offset: int = 0,
    session: Session = Depends(get_session),
):
    stmt = select(Trade).order_by(Trade.entry_date.desc())  # type: ignore[attr-defined]
    if status is not None:
        stmt = stmt.where(Trade.status == status)
    if ticker_id is not None:
        stmt = stmt.where(Trade.ticker_id == ticker_id)
    stmt = stmt.offset(offset).limit(limit)
    return session.exec(stmt).all()


@router.get("/stats")
def trade_stats(
    query: Annotated[StatsQuery, Query()],
    session: Session = Depends(get_session),
):
    """Performance statistics over trades that finished inside the window."""
    options = query.to_options()

    # Coarse SQL filter; compute_statistics re-applies the exact rules
    finished = func.coalesce(Trade.completion_date, Trade.entry_date)
    stmt = select(Trade).where(Trade.status.in_(STATUS_FILTERS[options.status_filter]))  # type: ignore[attr-defined]
    if options.ticker_id is not None:
        stmt = stmt.where(Trade.ticker_id == options.ticker_id)
    if options.start_date is not None:
        stmt = stmt.where(finished >= datetime.combine(options.start_date, time.min))
    if options.end_date is not None:
        stmt = stmt.where(finished <= datetime.combine(options.end_date, time.max))
    stmt = stmt.order_by(finished.desc()).limit(settings.stats_max_trades)

    trades = session.exec(stmt).all()
    if len(trades) >= settings.stats_max_trades:
        logger.warning(f"Stats request hit the {settings.stats_max_trades} trade cap")

    snapshot = compute_statistics(trades, options)
    return snapshot.to_dict()


@router.post("", response_model=TradeRead, status_code=201)
async def create_trade(
    data: TradeCreate,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    if not session.get(Ticker, data.ticker_id):
        raise HTTPException(status_code=404, detail="Ticker not found")

    payload = {**data.model_dump(), **_child_records(data)}
    pref = get_preference(session)
    trade = Trade(**payload, target_position_size=pref.target_position_size)
    _derive(trade)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    logger.info(f"Trade {trade.id} created: status={trade.status} P/L=${trade.profit_loss_amount:.2f}")

    await rollup.notify(trade.ticker_id)
    return trade


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(trade_id: int, session: Session = Depends(get_session)):
    trade = session.get(Trade, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@router.put("/{trade_id}", response_model=TradeRead)
async def update_trade(
    trade_id: int,
    data: TradeUpdate,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    trade = session.get(Trade, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")

    update_data = {**data.model_dump(exclude_unset=True), **_child_records(data)}
    if "exits" in update_data and "status" not in update_data:
        # Status follows the new ledger, not the previously derived value
        update_data["status"] = None

    # Validate full merged trade so partial updates cannot bypass cross-field rules.
    merged = {**trade.model_dump(), **update_data}
    try:
        TradeCreate.model_validate(merged)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    if "ticker_id" in update_data and not session.get(Ticker, update_data["ticker_id"]):
        raise HTTPException(status_code=404, detail="Ticker not found")

    previous_ticker_id = trade.ticker_id
    for key, value in update_data.items():
        setattr(trade, key, value)
    _derive(trade)

    session.add(trade)
    session.commit()
    session.refresh(trade)

    await rollup.notify(trade.ticker_id)
    if previous_ticker_id != trade.ticker_id:
        await rollup.notify(previous_ticker_id)
    return trade


@router.post("/{trade_id}/price", response_model=TradeRead)
def refresh_current_price(
    trade_id: int,
    data: PriceUpdate,
    session: Session = Depends(get_session),
):
    """Recompute the live (unrealized) metrics at an externally supplied price."""
    trade = session.get(Trade, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")
    if trade.status == STATUS_CLOSED:
        raise HTTPException(status_code=409, detail="Trade is closed; current metrics only apply to live positions")

    trade.current_price = data.current_price
    _derive(trade)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    return trade


@router.delete("/{trade_id}", status_code=204)
async def delete_trade(
    trade_id: int,
    session: Session = Depends(get_session),
    rollup: TickerRollup = Depends(get_ticker_rollup),
):
    trade = session.get(Trade, trade_id)
    if not trade:
        raise HTTPException(status_code=404, detail="Trade not found")

    ticker_id = trade.ticker_id
    session.delete(trade)
    session.commit()
    await rollup.notify(ticker_id)
