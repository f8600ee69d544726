from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_availability
from app.schemas import SlotAvailabilityRead
from app.services.availability import SlotAvailabilityCalculator

router = APIRouter(prefix="/api/slots", tags=["slots"])


@router.get("/availability", response_model=SlotAvailabilityRead)
async def availability(
    day: date = Query(alias="date"),
    calculator: SlotAvailabilityCalculator = Depends(get_availability),
):
    return await calculator.availability(day)


@router.get("/availability/range", response_model=list[SlotAvailabilityRead])
async def availability_range(
    start: date | None = None,
    end: date | None = None,
    calculator: SlotAvailabilityCalculator = Depends(get_availability),
):
    return await calculator.availability_range(start, end)


@router.get("/availability/next", response_model=list[SlotAvailabilityRead])
async def availability_next(
    days: int = Query(default=7, gt=0),
    calculator: SlotAvailabilityCalculator = Depends(get_availability),
):
    return await calculator.next_days(days)
