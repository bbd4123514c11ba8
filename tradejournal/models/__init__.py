"""Database models."""

from tradejournal.models.ticker import Ticker
from tradejournal.models.trade import Trade
from tradejournal.models.chart import Chart
from tradejournal.models.preference import Preference

__all__ = [
    "Ticker",
    "Trade",
    "Chart",
    "Preference",
]
