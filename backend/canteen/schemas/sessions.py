"""Meal session schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from canteen.core.exceptions import InvalidTimeFormat
from canteen.services.ordering_window import parse_clock


def validate_clock(value: Optional[str]) -> Optional[str]:
    """Reject time-of-day strings the ordering window cannot evaluate."""
    if value is None:
        return value
    try:
        parse_clock(value)
    except InvalidTimeFormat as e:
        raise ValueError(str(e)) from e
    return value.strip()


class MealSessionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    start_time: str
    end_time: str
    order_cutoff_minutes_before: int = Field(0, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, v):
        return validate_clock(v)


class MealSessionUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    order_cutoff_minutes_before: Optional[int] = Field(None, ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def check_times(cls, v):
        return validate_clock(v)


class MealSessionResponse(BaseModel):
    id: int
    name: str
    description: str
    start_time: str
    end_time: str
    order_cutoff_minutes_before: int
    created_at: datetime

    model_config = {"from_attributes": True}


class OrderingWindowResponse(BaseModel):
    """Ordering state of a session at the current store time."""

    session_id: Optional[int] = None
    is_active: bool
    minutes_remaining: int
    label: str
    cutoff_time: str
    spans_midnight: bool
