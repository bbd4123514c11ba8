"""Pydantic schemas for Ticker API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


def _clean_symbol(value: str) -> str:
    symbol = value.strip().upper()
    if not symbol:
        raise ValueError("must not be empty")
    return symbol


class TickerCreate(BaseModel):
    symbol: str = Field(min_length=1, max_length=16)
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    sector: str | None = Field(default=None, max_length=120)

    @field_validator("symbol")
    @classmethod
    def _normalize_symbol(cls, value: str) -> str:
        return _clean_symbol(value)

    @field_validator("name")
    @classmethod
    def _trim_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class TickerUpdate(BaseModel):
    symbol: str | None = Field(default=None, min_length=1, max_length=16)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    sector: str | None = Field(default=None, max_length=120)

    @field_validator("symbol")
    @classmethod
    def _normalize_optional_symbol(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _clean_symbol(value)


class TickerRead(BaseModel):
    id: int
    symbol: str
    name: str
    description: str | None
    sector: str | None
    trades_count: int
    profit_loss: float
    charts_count: int
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
