"""Shared API dependencies."""

from fastapi import Request

from tradejournal.services.ticker_rollup import TickerRollup


def get_ticker_rollup(request: Request) -> TickerRollup:
    """The application's rollup service, created at startup."""
    return request.app.state.ticker_rollup
