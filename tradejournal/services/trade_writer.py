"""Glue between Trade rows and the metrics calculator."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, select

from tradejournal.models.trade import Trade
from tradejournal.services.trade_metrics import derive_trade_fields

logger = logging.getLogger(__name__)

# Columns the calculator reads
TRADE_INPUT_FIELDS = (
    "direction",
    "entry_date",
    "entry_price",
    "shares",
    "initial_stop_loss",
    "target_position_size",
    "status",
    "current_price",
    "exits",
    "modified_stops",
)

# Columns the calculator owns
TRADE_DERIVED_FIELDS = (
    "status",
    "completion_date",
    "position_size",
    "risk_amount",
    "risk_percent",
    "days_held",
    "profit_loss_amount",
    "profit_loss_percent",
    "r_ratio",
    "normalization_factor",
    "normalized_metrics",
    "current_metrics",
)


def apply_derived_fields(trade: Trade, now: datetime | None = None) -> Trade:
    """Recompute every derived column of `trade` in place."""
    inputs = {name: getattr(trade, name) for name in TRADE_INPUT_FIELDS}
    derived = derive_trade_fields(inputs, now=now)
    for name in TRADE_DERIVED_FIELDS:
        setattr(trade, name, derived[name])
    trade.updated_at = datetime.now(timezone.utc)
    return trade


def recompute_all_trades(session: Session, now: datetime | None = None) -> int:
    """Re-derive every stored trade. Returns how many were rewritten."""
    trades = session.exec(select(Trade)).all()
    ticker_ids: set[int] = set()
    for trade in trades:
        apply_derived_fields(trade, now=now)
        session.add(trade)
        ticker_ids.add(trade.ticker_id)
    session.commit()
    logger.info(f"Recomputed {len(trades)} trades across {len(ticker_ids)} tickers")
    return len(trades)
