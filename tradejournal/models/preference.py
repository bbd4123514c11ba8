"""Preference model: single-row journal preferences."""

from datetime import datetime, timezone
from sqlmodel import SQLModel, Field


class Preference(SQLModel, table=True):
    __tablename__ = "preference"

    id: int | None = Field(default=None, primary_key=True)
    target_position_size: float = 10000.0  # Standard size trades are normalized against
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
