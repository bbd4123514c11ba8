"""Portfolio statistics over a set of trades.

All functions are pure computation with no I/O or database access. Trades can be
Trade rows, dicts or any object exposing the per-trade derived fields.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, asdict
from datetime import date, datetime, time, timezone

from tradejournal.services.exit_ledger import resolve_exit_ledger
from tradejournal.utils.constants import STATUS_FILTER_CLOSED_AND_PARTIAL, STATUS_FILTERS
from tradejournal.utils.numbers import parse_datetime, to_float


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class PerformanceStats:
    """One battery of statistics. Every ratio with a zero denominator is 0."""
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    break_even_trades: int = 0
    batting_average: float = 0.0
    average_win_percent: float = 0.0
    average_loss_percent: float = 0.0
    win_loss_ratio: float = 0.0
    adjusted_win_loss_ratio: float = 0.0
    average_r_ratio: float = 0.0
    profit_factor: float = 0.0
    expectancy: float = 0.0
    average_days_held_winners: float = 0.0
    average_days_held_losers: float = 0.0
    max_gain_percent: float = 0.0
    max_loss_percent: float = 0.0
    max_gain_loss_ratio: float = 0.0
    total_profit_loss: float = 0.0
    total_profit_loss_percent: float = 0.0


@dataclass
class StatisticsSnapshot(PerformanceStats):
    """Raw statistics plus the same battery computed on normalized metrics."""
    normalized: PerformanceStats = field(default_factory=PerformanceStats)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class StatsOptions:
    status_filter: str = STATUS_FILTER_CLOSED_AND_PARTIAL
    ticker_id: int | None = None
    start_date: datetime | date | None = None
    end_date: datetime | date | None = None


@dataclass(frozen=True)
class _Sample:
    """The handful of numbers one trade contributes to a statistics battery."""
    percent: float
    amount: float
    r_ratio: float
    days_held: float
    invested: float


# ---------------------------------------------------------------------------
# Field access
# ---------------------------------------------------------------------------

def _get(trade, name: str, default=None):
    if isinstance(trade, Mapping):
        return trade.get(name, default)
    return getattr(trade, name, default)


def completion_date(trade) -> datetime | None:
    """Latest exit date, falling back to the entry date."""
    stored = parse_datetime(_get(trade, "completion_date"))
    if stored is not None:
        return stored
    ledger = resolve_exit_ledger(_get(trade, "exits"), _get(trade, "shares"))
    if ledger.completion_date is not None:
        return ledger.completion_date
    return parse_datetime(_get(trade, "entry_date"))


def _raw_sample(trade) -> _Sample:
    return _Sample(
        percent=to_float(_get(trade, "profit_loss_percent")),
        amount=to_float(_get(trade, "profit_loss_amount")),
        r_ratio=to_float(_get(trade, "r_ratio")),
        days_held=to_float(_get(trade, "days_held")),
        invested=to_float(_get(trade, "entry_price")) * to_float(_get(trade, "shares")),
    )


def _normalized_sample(trade) -> _Sample | None:
    normalized = _get(trade, "normalized_metrics")
    if not normalized:
        return None

    factor = to_float(_get(trade, "normalization_factor"))
    position_size = to_float(_get(trade, "position_size"))
    if not position_size:
        position_size = to_float(_get(trade, "entry_price")) * to_float(_get(trade, "shares"))

    return _Sample(
        percent=to_float(_get(normalized, "profit_loss_percent")),
        amount=to_float(_get(normalized, "profit_loss_amount")),
        r_ratio=to_float(_get(normalized, "r_ratio")),
        days_held=to_float(_get(trade, "days_held")),
        # Estimated normalized investment: what the trade would have cost at target size
        invested=position_size / factor if factor > 0 else 0.0,
    )


# ---------------------------------------------------------------------------
# Reduction
# ---------------------------------------------------------------------------

def _mean(values: list[float]) -> float:
    if not values:
        return 0.0
    return math.fsum(values) / len(values)


def _ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def _reduce(samples: list[_Sample]) -> PerformanceStats:
    stats = PerformanceStats(total_trades=len(samples))
    if not samples:
        return stats

    winners = [s for s in samples if s.percent > 0]
    losers = [s for s in samples if s.percent < 0]

    stats.winning_trades = len(winners)
    stats.losing_trades = len(losers)
    stats.break_even_trades = len(samples) - len(winners) - len(losers)

    stats.batting_average = len(winners) / len(samples) * 100
    win_rate = stats.batting_average / 100

    stats.average_win_percent = _mean([s.percent for s in winners])
    stats.average_loss_percent = _mean([s.percent for s in losers])
    stats.win_loss_ratio = abs(_ratio(stats.average_win_percent, stats.average_loss_percent))

    if stats.batting_average < 100 and stats.average_loss_percent != 0:
        stats.adjusted_win_loss_ratio = (win_rate * stats.average_win_percent) / (
            (1 - win_rate) * abs(stats.average_loss_percent)
        )

    stats.average_r_ratio = _mean([s.r_ratio for s in samples])

    gross_wins = math.fsum(s.amount for s in winners)
    gross_losses = abs(math.fsum(s.amount for s in losers))
    stats.profit_factor = _ratio(gross_wins, gross_losses)

    stats.expectancy = (
        win_rate * stats.average_win_percent
        + (1 - win_rate) * stats.average_loss_percent
    )

    stats.average_days_held_winners = _mean([s.days_held for s in winners])
    stats.average_days_held_losers = _mean([s.days_held for s in losers])

    stats.max_gain_percent = max((s.percent for s in winners), default=0.0)
    stats.max_loss_percent = min((s.percent for s in losers), default=0.0)
    stats.max_gain_loss_ratio = abs(_ratio(stats.max_gain_percent, stats.max_loss_percent))

    stats.total_profit_loss = math.fsum(s.amount for s in samples)
    invested = math.fsum(s.invested for s in samples)
    stats.total_profit_loss_percent = _ratio(stats.total_profit_loss, invested) * 100

    return stats


def summarize_trades(trades: Iterable) -> StatisticsSnapshot:
    """Reduce a trade set into a statistics snapshot. Never mutates its input."""
    trades = list(trades)
    raw = _reduce([_raw_sample(t) for t in trades])
    normalized_samples = [s for s in (_normalized_sample(t) for t in trades) if s is not None]
    return StatisticsSnapshot(**asdict(raw), normalized=_reduce(normalized_samples))


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def _window_start(value) -> datetime | None:
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    return parse_datetime(value)


def _window_end(value) -> datetime | None:
    # A bare date covers the whole day
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.max, tzinfo=timezone.utc)
    return parse_datetime(value)


def filter_trades(trades: Iterable, options: StatsOptions) -> list:
    """Apply status, ticker and completion-date filters."""
    statuses = STATUS_FILTERS.get(options.status_filter)
    if statuses is None:
        raise ValueError(f"Unknown status filter: {options.status_filter}")

    start = _window_start(options.start_date)
    end = _window_end(options.end_date)

    selected = []
    for trade in trades:
        if _get(trade, "status") not in statuses:
            continue
        if options.ticker_id is not None and _get(trade, "ticker_id") != options.ticker_id:
            continue
        if start is not None or end is not None:
            finished = completion_date(trade)
            if finished is None:
                continue
            if start is not None and finished < start:
                continue
            if end is not None and finished > end:
                continue
        selected.append(trade)
    return selected


def compute_statistics(trades: Iterable, options: StatsOptions | None = None) -> StatisticsSnapshot:
    """Filter a trade set and summarize it."""
    return summarize_trades(filter_trades(trades, options or StatsOptions()))
