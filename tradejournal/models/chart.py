"""Chart model: an annotated chart observation logged against a ticker."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class Chart(SQLModel, table=True):
    __tablename__ = "chart"

    id: int | None = Field(default=None, primary_key=True)
    ticker_id: int = Field(foreign_key="ticker.id", index=True)

    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    timeframe: str = Field(default="daily", index=True)  # see CHART_TIMEFRAMES
    notes: str | None = None
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    # [{"name", "start_price", "end_price", "percentage_change"}], change derived on write
    measurements: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
