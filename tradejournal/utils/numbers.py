"""Defensive coercion helpers shared by the calculator and the aggregator."""

import math
from datetime import date, datetime, time, timezone


def to_float(value, default: float = 0.0) -> float:
    """Coerce a possibly-string numeric to float. Non-numeric, NaN and inf give `default`."""
    if value is None or isinstance(value, bool):
        return default
    try:
        result = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(result) or math.isinf(result):
        return default
    return result


def to_optional_float(value) -> float | None:
    """Like to_float, but keeps "absent" distinguishable from zero."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    result = to_float(value, default=math.nan)
    return None if math.isnan(result) else result


def parse_datetime(value) -> datetime | None:
    """Parse a datetime, date or ISO string into an aware UTC datetime.

    Naive values are treated as UTC. Returns None when the value cannot be parsed.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)
