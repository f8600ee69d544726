"""Per-day pickup availability and the booking locks that guard it."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, asdict
from datetime import date, timedelta
from weakref import WeakValueDictionary

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.services.errors import ValidationError
from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAvailability:
    date: date
    max_bikes_per_day: int
    booked: int
    available: int
    is_available: bool
    max_bikes_per_order: int

    @classmethod
    def build(cls, day: date, config, booked: int) -> "SlotAvailability":
        available = max(0, config.max_bikes_per_day - booked)
        return cls(
            date=day,
            max_bikes_per_day=config.max_bikes_per_day,
            booked=booked,
            available=available,
            is_available=available > 0,
            max_bikes_per_order=config.effective_max_bikes_per_order,
        )

    def to_dict(self) -> dict:
        return asdict(self)


class SlotAvailabilityCalculator:
    """Read-only view of capacity. Nothing here reserves a slot."""

    def __init__(self, db: AsyncSession, store: SlotConfigStore, max_range_days: int = 366):
        self.db = db
        self.store = store
        self.max_range_days = max_range_days

    async def availability(self, day: date) -> SlotAvailability:
        config = await self.store.resolve(day)
        booked = await crud.count_booked_bicycles(self.db, day)
        return SlotAvailability.build(day, config, booked)

    async def availability_range(self, start: date | None = None, end: date | None = None) -> list[SlotAvailability]:
        start = start or self.store.today()
        end = end or _add_month(start)
        if end < start:
            raise ValidationError(["end date cannot be before start date"])
        if (end - start).days + 1 > self.max_range_days:
            raise ValidationError([f"date range cannot exceed {self.max_range_days} days"])

        booked = await crud.booked_bicycles_by_date(self.db, start, end)
        configs = await crud.find_configs_in_range(self.db, start, end)

        days = []
        uncovered = 0
        day = start
        while day <= end:
            config = self.store.resolve_from(configs, day)
            if isinstance(config, DefaultSlotConfig):
                uncovered += 1
            days.append(SlotAvailability.build(day, config, booked.get(day, 0)))
            day += timedelta(days=1)

        if uncovered:
            logger.warning("%d day(s) in %s..%s have no slot config, using default capacity", uncovered, start, end)
        return days

    async def next_days(self, days: int, start: date | None = None) -> list[SlotAvailability]:
        if days <= 0:
            raise ValidationError(["days must be greater than 0"])
        start = start or self.store.today()
        return await self.availability_range(start, start + timedelta(days=days - 1))

    async def is_within_max_bikes_per_order(self, day: date, count: int) -> bool:
        config = await self.store.resolve(day)
        return count <= config.effective_max_bikes_per_order

    async def has_capacity(self, day: date, count: int) -> bool:
        slot = await self.availability(day)
        return slot.available >= count


def _add_month(day: date) -> date:
    """Same day next month, clamped to the month's last day."""
    year, month = (day.year + 1, 1) if day.month == 12 else (day.year, day.month + 1)
    for dom in (day.day, 30, 29, 28):
        try:
            return date(year, month, dom)
        except ValueError:
            continue
    return date(year, month, 28)


# ── Booking locks ────────────────────────────────────────

class BookingLocks:
    """One asyncio.Lock per pickup date.

    Capacity re-check and insert for a date run while holding its lock, so
    two requests in the same process cannot both take the last slot.
    Separate worker processes do not share these locks. A date's lock is
    released once no request holds it.
    """

    def __init__(self):
        self._locks: WeakValueDictionary[date, asyncio.Lock] = WeakValueDictionary()

    def for_date(self, day: date) -> asyncio.Lock:
        lock = self._locks.get(day)
        if lock is None:
            lock = self._locks[day] = asyncio.Lock()
        return lock

    def __len__(self) -> int:
        return len(self._locks)


booking_locks = BookingLocks()
