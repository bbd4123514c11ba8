"""Exit ledger resolution: how much of a position has been sold, and when it finished."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime

from tradejournal.utils.numbers import to_float, parse_datetime


@dataclass(frozen=True)
class ExitFill:
    """One parsed exit record. Malformed numerics are already coerced to 0."""
    price: float
    shares: float
    date: datetime | None
    reason: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class ExitLedger:
    total_shares: float
    exited_shares: float
    completion_date: datetime | None
    fills: list[ExitFill] = field(default_factory=list)

    @property
    def remaining_shares(self) -> float:
        return max(self.total_shares - self.exited_shares, 0.0)

    @property
    def has_exits(self) -> bool:
        return self.exited_shares > 0


def _read(record, name: str):
    if isinstance(record, Mapping):
        return record.get(name)
    return getattr(record, name, None)


def parse_exit(record) -> ExitFill:
    """Parse a raw exit (dict or object) without ever raising."""
    reason = _read(record, "reason")
    notes = _read(record, "notes")
    return ExitFill(
        price=to_float(_read(record, "price")),
        shares=max(to_float(_read(record, "shares")), 0.0),
        date=parse_datetime(_read(record, "date")),
        reason=str(reason) if reason is not None else None,
        notes=str(notes) if notes is not None else None,
    )


def resolve_exit_ledger(exits: Iterable | None, total_shares) -> ExitLedger:
    """Sum exited shares and find the latest exit date.

    Fills are returned ordered by date (undated fills keep insertion order, last).
    """
    fills = [parse_exit(record) for record in (exits or [])]
    exited = sum(f.shares for f in fills)
    dates = [f.date for f in fills if f.date is not None]
    ordered = sorted(
        enumerate(fills),
        key=lambda pair: (pair[1].date is None, pair[1].date or datetime.min, pair[0]),
    )
    return ExitLedger(
        total_shares=to_float(total_shares),
        exited_shares=exited,
        completion_date=max(dates) if dates else None,
        fills=[f for _, f in ordered],
    )
