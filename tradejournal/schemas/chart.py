"""Pydantic schemas for Chart API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from tradejournal.utils.constants import CHART_TIMEFRAMES


class MeasurementInput(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    start_price: float
    end_price: float


def _check_timeframe(value: str) -> str:
    timeframe = value.strip().lower()
    if timeframe not in CHART_TIMEFRAMES:
        raise ValueError(f"must be one of: {', '.join(CHART_TIMEFRAMES)}")
    return timeframe


def _clean_tags(tags: list[str]) -> list[str]:
    """Strip, drop blanks and de-duplicate, keeping first-seen order."""
    cleaned = []
    for tag in tags:
        text = tag.strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


class ChartCreate(BaseModel):
    ticker_id: int
    timestamp: datetime | None = None  # defaults to now
    timeframe: str = "daily"
    notes: str | None = None
    tags: list[str] = []
    measurements: list[MeasurementInput] = []

    @field_validator("timeframe")
    @classmethod
    def _validate_timeframe(cls, value: str) -> str:
        return _check_timeframe(value)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: list[str]) -> list[str]:
        return _clean_tags(value)


class ChartUpdate(BaseModel):
    ticker_id: int | None = None
    timestamp: datetime | None = None
    timeframe: str | None = None
    notes: str | None = None
    tags: list[str] | None = None
    measurements: list[MeasurementInput] | None = None

    @field_validator("timeframe")
    @classmethod
    def _validate_optional_timeframe(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_timeframe(value)

    @field_validator("tags")
    @classmethod
    def _validate_optional_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return _clean_tags(value)


class ChartRead(BaseModel):
    id: int
    ticker_id: int
    timestamp: datetime
    timeframe: str
    notes: str | None
    tags: list[str]
    measurements: list[dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
