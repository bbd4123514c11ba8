"""Shared enumerations for trades, exits and charts."""

DIRECTIONS = ["long", "short"]

STATUS_OPEN = "open"
STATUS_PARTIAL = "partial"
STATUS_CLOSED = "closed"
TRADE_STATUSES = [STATUS_OPEN, STATUS_PARTIAL, STATUS_CLOSED]

# Exit reasons, value -> label
EXIT_REASONS: dict[str, str] = {
    "strength": "Strength / Target Reached",
    "stop": "Stop Loss Hit",
    "backstop": "Backstop",
    "violation": "Violation",
    "technical": "Technical Exit",
    "fundamental": "Fundamental Change",
    "other": "Other",
}

# Older journals recorded "target" before it was folded into "strength"
EXIT_REASON_ALIASES: dict[str, str] = {"target": "strength"}

STATUS_FILTER_CLOSED_ONLY = "closed-only"
STATUS_FILTER_CLOSED_AND_PARTIAL = "closed-and-partial"
STATUS_FILTERS: dict[str, list[str]] = {
    STATUS_FILTER_CLOSED_ONLY: [STATUS_CLOSED],
    STATUS_FILTER_CLOSED_AND_PARTIAL: [STATUS_CLOSED, STATUS_PARTIAL],
}

# Stats page presets: timeframe -> days back from today
TIMEFRAME_DAYS: dict[str, int] = {
    "week": 7,
    "month": 30,
    "year": 365,
    "all": 3650,
}

# Chart timeframes, value -> label
CHART_TIMEFRAMES: dict[str, str] = {
    "daily": "Daily",
    "weekly": "Weekly",
    "monthly": "Monthly",
    "intraday": "Intraday",
    "other": "Other",
}
