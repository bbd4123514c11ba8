"""Pydantic schemas for Preference API."""

from datetime import datetime

from pydantic import BaseModel, Field


class PreferenceUpdate(BaseModel):
    target_position_size: float = Field(gt=0)


class PreferenceRead(BaseModel):
    target_position_size: float
    updated_at: datetime

    model_config = {"from_attributes": True}
