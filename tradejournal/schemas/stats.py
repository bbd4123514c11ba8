"""Pydantic schemas for the statistics endpoint."""

from datetime import date, datetime, timedelta, timezone

from pydantic import BaseModel, field_validator, model_validator

from tradejournal.services.trade_stats import StatsOptions
from tradejournal.utils.constants import (
    STATUS_FILTER_CLOSED_AND_PARTIAL,
    STATUS_FILTERS,
    TIMEFRAME_DAYS,
)


class StatsQuery(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    ticker_id: int | None = None
    status_filter: str = STATUS_FILTER_CLOSED_AND_PARTIAL
    timeframe: str | None = None  # "week", "month", "year", "all"; explicit dates win

    @field_validator("status_filter")
    @classmethod
    def _validate_status_filter(cls, value: str) -> str:
        if value not in STATUS_FILTERS:
            raise ValueError(f"must be one of: {', '.join(STATUS_FILTERS)}")
        return value

    @field_validator("timeframe")
    @classmethod
    def _validate_timeframe(cls, value: str | None) -> str | None:
        if value is None or value == "custom":
            return None
        if value not in TIMEFRAME_DAYS:
            raise ValueError(f"must be one of: {', '.join(TIMEFRAME_DAYS)}, custom")
        return value

    @model_validator(mode="after")
    def _validate_window(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self

    def to_options(self, today: date | None = None) -> StatsOptions:
        start, end = self.start_date, self.end_date
        if self.timeframe and start is None and end is None:
            today = today or datetime.now(timezone.utc).date()
            start = today - timedelta(days=TIMEFRAME_DAYS[self.timeframe])
            end = today
        return StatsOptions(
            status_filter=self.status_filter,
            ticker_id=self.ticker_id,
            start_date=start,
            end_date=end,
        )
