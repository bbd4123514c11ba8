"""Trade model: one journaled position plus its calculator-owned fields."""

from datetime import datetime, timezone
from typing import Any

from sqlmodel import SQLModel, Field, Column
from sqlalchemy import JSON


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: int | None = Field(default=None, primary_key=True)
    ticker_id: int = Field(foreign_key="ticker.id", index=True)

    # Entry inputs
    direction: str = "long"  # "long" or "short"
    entry_date: datetime
    entry_price: float
    shares: float
    initial_stop_loss: float = 0.0
    target_position_size: float | None = None  # Captured once at creation

    # Mutable inputs
    modified_stops: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    exits: list[dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    notes: str | None = None
    current_price: float | None = None

    # Derived by services.trade_metrics
    status: str = Field(default="open", index=True)  # "open", "partial", "closed"
    completion_date: datetime | None = Field(default=None, index=True)
    position_size: float = 0.0
    risk_amount: float = 0.0
    risk_percent: float = 0.0
    days_held: int = 0
    profit_loss_amount: float = 0.0
    profit_loss_percent: float = 0.0
    r_ratio: float = 0.0
    normalization_factor: float | None = None
    normalized_metrics: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    current_metrics: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
