from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


class SlotConfigWrite(BaseModel):
    start_date: date | None = None
    end_date: date | None = None
    max_bikes_per_day: int = 0
    max_bikes_per_order: int | None = None


class SlotConfigRead(BaseModel):
    id: str
    start_date: date
    end_date: date | None = None
    max_bikes_per_day: int
    max_bikes_per_order: int | None = None
    effective_max_bikes_per_order: int
    created_at: datetime

    model_config = {"from_attributes": True}


class SlotAvailabilityRead(BaseModel):
    date: date
    max_bikes_per_day: int
    booked: int
    available: int
    is_available: bool
    max_bikes_per_order: int

    model_config = {"from_attributes": True}
