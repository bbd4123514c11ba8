"""Pydantic schemas for Trade API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from tradejournal.utils.constants import (
    DIRECTIONS,
    EXIT_REASON_ALIASES,
    EXIT_REASONS,
    TRADE_STATUSES,
)


class ExitRecord(BaseModel):
    price: float = Field(gt=0)
    shares: float = Field(gt=0)
    date: datetime
    reason: str | None = None
    notes: str | None = None

    @field_validator("reason")
    @classmethod
    def _validate_reason(cls, value: str | None) -> str | None:
        if value is None:
            return None
        reason = EXIT_REASON_ALIASES.get(value.strip().lower(), value.strip().lower())
        if reason not in EXIT_REASONS:
            allowed = ", ".join(EXIT_REASONS)
            raise ValueError(f"must be one of: {allowed}")
        return reason


class StopModification(BaseModel):
    price: float = Field(gt=0)
    date: datetime
    notes: str | None = None


def _check_direction(value: str) -> str:
    direction = value.strip().lower()
    if direction not in DIRECTIONS:
        raise ValueError(f"must be one of: {', '.join(DIRECTIONS)}")
    return direction


def _check_status(value: str) -> str:
    if value not in TRADE_STATUSES:
        raise ValueError(f"must be one of: {', '.join(TRADE_STATUSES)}")
    return value


def _check_exit_total(exits: list[ExitRecord] | None, shares: float | None):
    if not exits or shares is None:
        return
    exited = sum(e.shares for e in exits)
    if exited > shares:
        raise ValueError(f"exits total {exited:g} shares but the trade only has {shares:g}")


class TradeCreate(BaseModel):
    ticker_id: int
    direction: str = "long"
    entry_date: datetime
    entry_price: float = Field(gt=0)
    shares: float = Field(gt=0)
    initial_stop_loss: float = Field(ge=0)
    modified_stops: list[StopModification] = []
    exits: list[ExitRecord] = []
    status: str | None = None
    notes: str | None = None
    current_price: float | None = Field(default=None, gt=0)

    @field_validator("direction")
    @classmethod
    def _validate_direction(cls, value: str) -> str:
        return _check_direction(value)

    @field_validator("status")
    @classmethod
    def _validate_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_status(value)

    @model_validator(mode="after")
    def _validate_exits(self):
        _check_exit_total(self.exits, self.shares)
        return self


class TradeUpdate(BaseModel):
    """Partial update. Target position size is deliberately not editable."""
    ticker_id: int | None = None
    direction: str | None = None
    entry_date: datetime | None = None
    entry_price: float | None = Field(default=None, gt=0)
    shares: float | None = Field(default=None, gt=0)
    initial_stop_loss: float | None = Field(default=None, ge=0)
    modified_stops: list[StopModification] | None = None
    exits: list[ExitRecord] | None = None
    status: str | None = None
    notes: str | None = None
    current_price: float | None = Field(default=None, gt=0)

    @field_validator("direction")
    @classmethod
    def _validate_optional_direction(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_direction(value)

    @field_validator("status")
    @classmethod
    def _validate_optional_status(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_status(value)

    @model_validator(mode="after")
    def _validate_optional_exits(self):
        _check_exit_total(self.exits, self.shares)
        return self


class PriceUpdate(BaseModel):
    current_price: float = Field(gt=0)


class TradeRead(BaseModel):
    id: int
    ticker_id: int
    direction: str
    entry_date: datetime
    entry_price: float
    shares: float
    initial_stop_loss: float
    target_position_size: float | None
    modified_stops: list[dict[str, Any]]
    exits: list[dict[str, Any]]
    notes: str | None
    current_price: float | None
    status: str
    completion_date: datetime | None
    position_size: float
    risk_amount: float
    risk_percent: float
    days_held: int
    profit_loss_amount: float
    profit_loss_percent: float
    r_ratio: float
    normalization_factor: float | None
    normalized_metrics: dict[str, Any] | None
    current_metrics: dict[str, Any] | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
