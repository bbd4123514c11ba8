"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tradejournal.config import settings
from tradejournal.database import create_db_and_tables, engine
from tradejournal.services.ticker_rollup import TickerRollup
from tradejournal.utils.logging import setup_logging
from tradejournal.api import tickers, trades, charts, preferences, system


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    app.state.ticker_rollup = TickerRollup(engine)
    yield


app = FastAPI(
    title="Trade Journal",
    description="Trading journal with per-trade metrics and portfolio statistics",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(tickers.router)
app.include_router(trades.router)
app.include_router(charts.router)
app.include_router(preferences.router)
app.include_router(system.router)
