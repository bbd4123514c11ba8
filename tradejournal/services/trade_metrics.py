"""Per-trade derived metrics: risk, realized and unrealized P/L, R-multiples, normalization.

All functions are pure computation with no I/O or database access.
Required inputs are validated once by TradeInputs.from_mapping; past that
point every secondary figure degrades to 0 instead of raising.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from tradejournal.services.exit_ledger import ExitLedger, resolve_exit_ledger
from tradejournal.services.trade_status import derive_status
from tradejournal.utils.constants import DIRECTIONS, STATUS_CLOSED
from tradejournal.utils.numbers import parse_datetime, to_float, to_optional_float

SECONDS_PER_DAY = 24 * 60 * 60


class TradeValidationError(ValueError):
    """Raised when entry price, shares or entry date are missing or malformed."""


# ---------------------------------------------------------------------------
# Input value object
# ---------------------------------------------------------------------------

@dataclass
class TradeInputs:
    """The user-entered part of a trade, parsed once at the boundary."""
    entry_price: float
    shares: float
    entry_date: datetime
    direction: str = "long"
    initial_stop_loss: float = 0.0
    target_position_size: float | None = None
    status: str | None = None
    current_price: float | None = None
    exits: list[Any] = field(default_factory=list)
    modified_stops: list[Any] = field(default_factory=list)

    @property
    def sign(self) -> int:
        return -1 if self.direction == "short" else 1

    @classmethod
    def from_mapping(cls, data: Mapping) -> "TradeInputs":
        errors = []

        entry_price = to_optional_float(data.get("entry_price"))
        if entry_price is None or entry_price <= 0:
            errors.append("entry_price must be a positive number")

        shares = to_optional_float(data.get("shares"))
        if shares is None or shares <= 0:
            errors.append("shares must be a positive number")

        entry_date = parse_datetime(data.get("entry_date"))
        if entry_date is None:
            errors.append("entry_date is required")

        if errors:
            raise TradeValidationError("; ".join(errors))

        direction = str(data.get("direction") or "long").strip().lower()
        if direction not in DIRECTIONS:
            direction = "long"

        current_price = to_optional_float(data.get("current_price"))
        if current_price is not None and current_price <= 0:
            current_price = None

        return cls(
            entry_price=entry_price,
            shares=shares,
            entry_date=entry_date,
            direction=direction,
            initial_stop_loss=to_float(data.get("initial_stop_loss")),
            target_position_size=to_optional_float(data.get("target_position_size")),
            status=data.get("status"),
            current_price=current_price,
            exits=list(data.get("exits") or []),
            modified_stops=list(data.get("modified_stops") or []),
        )


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class NormalizedMetrics:
    """Realized results rescaled to the target position size."""
    profit_loss_amount: float
    profit_loss_percent: float
    r_ratio: float

    def to_dict(self) -> dict:
        return {
            "profit_loss_amount": round(self.profit_loss_amount, 2),
            "profit_loss_percent": round(self.profit_loss_percent, 2),
            "r_ratio": round(self.r_ratio, 4),
        }


@dataclass
class CurrentMetrics:
    """Live view of an open or partially closed trade at an external price."""
    current_price: float
    remaining_shares: float
    active_stop: float
    profit_loss_amount: float
    profit_loss_percent: float
    r_ratio: float
    risk_amount: float
    risk_percent: float
    break_even_shares: float
    last_updated: datetime

    def to_dict(self) -> dict:
        return {
            "current_price": self.current_price,
            "remaining_shares": self.remaining_shares,
            "active_stop": self.active_stop,
            "profit_loss_amount": round(self.profit_loss_amount, 2),
            "profit_loss_percent": round(self.profit_loss_percent, 2),
            "r_ratio": round(self.r_ratio, 4),
            "risk_amount": round(self.risk_amount, 2),
            "risk_percent": round(self.risk_percent, 2),
            "break_even_shares": self.break_even_shares,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass
class TradeMetrics:
    status: str
    exited_shares: float
    completion_date: datetime | None
    position_size: float
    risk_amount: float
    risk_percent: float
    days_held: int
    profit_loss_amount: float
    profit_loss_percent: float
    r_ratio: float
    normalization_factor: float | None = None
    normalized_metrics: NormalizedMetrics | None = None
    current_metrics: CurrentMetrics | None = None

    def to_fields(self) -> dict:
        """Rounded values, keyed by Trade column name."""
        return {
            "status": self.status,
            "completion_date": self.completion_date,
            "position_size": self.position_size,
            "risk_amount": round(self.risk_amount, 2),
            "risk_percent": round(self.risk_percent, 2),
            "days_held": self.days_held,
            "profit_loss_amount": round(self.profit_loss_amount, 2),
            "profit_loss_percent": round(self.profit_loss_percent, 2),
            "r_ratio": round(self.r_ratio, 4),
            "normalization_factor": (
                round(self.normalization_factor, 4)
                if self.normalization_factor is not None else None
            ),
            "normalized_metrics": (
                self.normalized_metrics.to_dict() if self.normalized_metrics else None
            ),
            "current_metrics": (
                self.current_metrics.to_dict() if self.current_metrics else None
            ),
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def compute_days_held(entry_date: datetime, end_date: datetime) -> int:
    """Whole days between two instants, rounded up."""
    seconds = abs((end_date - entry_date).total_seconds())
    return max(math.ceil(seconds / SECONDS_PER_DAY), 0)


def active_stop_price(initial_stop_loss: float, modified_stops: list) -> float:
    """Latest modified stop by date, falling back to the initial stop."""
    candidates = []
    for index, record in enumerate(modified_stops or []):
        if isinstance(record, Mapping):
            price, when = record.get("price"), record.get("date")
        else:
            price, when = getattr(record, "price", None), getattr(record, "date", None)
        price = to_float(price)
        if price <= 0:
            continue
        when = parse_datetime(when)
        candidates.append((when is not None, when or datetime.min.replace(tzinfo=timezone.utc), index, price))

    if not candidates:
        return initial_stop_loss
    return max(candidates)[3]


def realized_profit_loss(inputs: TradeInputs, ledger: ExitLedger) -> float:
    """Running realized P/L across every exit recorded so far."""
    return sum(
        inputs.sign * (fill.price - inputs.entry_price) * fill.shares
        for fill in ledger.fills
    )


def break_even_shares(
    sign: int,
    entry_price: float,
    realized: float,
    remaining: float,
    current_price: float,
    stop_price: float,
) -> float:
    """Shares to sell at `current_price` so that stopping out the rest nets zero.

    Solves realized + sign*(current - entry)*x + sign*(stop - entry)*(remaining - x) = 0
    for x, rounded up to a whole share and clamped to [0, remaining].
    """
    if remaining <= 0 or current_price == stop_price:
        return 0.0
    shares = -(realized + sign * (stop_price - entry_price) * remaining) / (
        sign * (current_price - stop_price)
    )
    if shares <= 0:
        return 0.0
    return float(min(math.ceil(shares - 1e-9), remaining))


def compute_current_metrics(
    inputs: TradeInputs,
    ledger: ExitLedger,
    position_size: float,
    realized: float,
    risk_amount: float,
    now: datetime,
) -> CurrentMetrics | None:
    """Unrealized figures for the unexited shares. None without a current price."""
    if inputs.current_price is None:
        return None

    price = inputs.current_price
    remaining = ledger.remaining_shares
    stop = active_stop_price(inputs.initial_stop_loss, inputs.modified_stops)

    unrealized = inputs.sign * (price - inputs.entry_price) * remaining
    current_risk = abs(inputs.entry_price - stop) * remaining

    return CurrentMetrics(
        current_price=price,
        remaining_shares=remaining,
        active_stop=stop,
        profit_loss_amount=unrealized,
        profit_loss_percent=_safe_div(unrealized, position_size) * 100,
        r_ratio=_safe_div(unrealized, risk_amount),
        risk_amount=current_risk,
        risk_percent=_safe_div(current_risk, position_size) * 100,
        break_even_shares=break_even_shares(
            inputs.sign, inputs.entry_price, realized, remaining, price, stop
        ),
        last_updated=now,
    )


# ---------------------------------------------------------------------------
# Main entry points
# ---------------------------------------------------------------------------

def calculate_trade_metrics(inputs: TradeInputs, now: datetime | None = None) -> TradeMetrics:
    """Compute every derived field of a trade from its current inputs.

    Idempotent for fixed inputs and `now`; `now` only matters for days held
    on trades that are not closed and for the current-metrics timestamp.
    """
    now = parse_datetime(now) or datetime.now(timezone.utc)

    ledger = resolve_exit_ledger(inputs.exits, inputs.shares)
    status = derive_status(inputs.shares, ledger.exited_shares, inputs.status)

    position_size = round(inputs.entry_price * inputs.shares, 2)
    risk_amount = abs(inputs.entry_price - inputs.initial_stop_loss) * inputs.shares
    risk_percent = _safe_div(risk_amount, position_size) * 100

    realized = realized_profit_loss(inputs, ledger)
    realized_percent = _safe_div(realized, position_size) * 100
    r_ratio = _safe_div(realized, risk_amount)

    if status == STATUS_CLOSED and ledger.completion_date is not None:
        end_date = ledger.completion_date
    else:
        end_date = now
    days_held = compute_days_held(inputs.entry_date, end_date)

    normalization_factor = None
    normalized = None
    target = inputs.target_position_size
    if target is not None and target > 0 and position_size > 0:
        normalization_factor = position_size / target
        normalized = NormalizedMetrics(
            profit_loss_amount=realized / normalization_factor,
            profit_loss_percent=realized_percent,
            r_ratio=r_ratio,
        )

    current = None
    if status != STATUS_CLOSED:
        current = compute_current_metrics(
            inputs, ledger, position_size, realized, risk_amount, now
        )

    return TradeMetrics(
        status=status,
        exited_shares=ledger.exited_shares,
        completion_date=ledger.completion_date,
        position_size=position_size,
        risk_amount=risk_amount,
        risk_percent=risk_percent,
        days_held=days_held,
        profit_loss_amount=realized,
        profit_loss_percent=realized_percent,
        r_ratio=r_ratio,
        normalization_factor=normalization_factor,
        normalized_metrics=normalized,
        current_metrics=current,
    )


def derive_trade_fields(trade_input: Mapping, now: datetime | None = None) -> dict:
    """Return `trade_input` with every calculator-owned field (re)populated.

    Raises TradeValidationError only when entry price, shares or entry date
    are absent or not numeric.
    """
    inputs = TradeInputs.from_mapping(trade_input)
    metrics = calculate_trade_metrics(inputs, now=now)
    return {**trade_input, **metrics.to_fields()}
