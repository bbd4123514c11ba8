"""Ticker model: an instrument trades are logged against, with rollup counters."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class Ticker(SQLModel, table=True):
    __tablename__ = "ticker"

    id: int | None = Field(default=None, primary_key=True)
    symbol: str = Field(unique=True, index=True)  # e.g. "AAPL"
    name: str
    description: str | None = None
    sector: str | None = None

    # Maintained by TickerRollup, never edited by hand
    trades_count: int = 0
    profit_loss: float = 0.0
    charts_count: int = 0
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))  # union of chart tags

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
