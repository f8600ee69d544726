import gc
import logging
from datetime import date

import pytest

from app.models import OrderStatus, OrderKind
from app.services.availability import SlotAvailabilityCalculator, BookingLocks
from app.services.errors import ValidationError
from app.services.slot_configs import SlotConfigData

from tests.conftest import book


@pytest.fixture
def calculator(db, store):
    return SlotAvailabilityCalculator(db, store, max_range_days=366)


async def test_availability_uses_default_when_uncovered(calculator, caplog):
    with caplog.at_level(logging.WARNING):
        slot = await calculator.availability(date(2024, 3, 1))
    assert slot.max_bikes_per_day == 5
    assert slot.max_bikes_per_order == 3
    assert slot.booked == 0
    assert slot.available == 5
    assert slot.is_available is True
    assert "2024-03-01" in caplog.text


async def test_exact_boundary_capacity(db, seeded, store, calculator):
    await store.create(SlotConfigData(start_date=date(2024, 1, 1), max_bikes_per_day=5))
    day = date(2024, 3, 1)
    await book(db, seeded, day, 4)

    slot = await calculator.availability(day)
    assert slot.booked == 4
    assert slot.available == 1
    assert await calculator.has_capacity(day, 2) is False
    assert await calculator.has_capacity(day, 1) is True


async def test_cancelled_orders_free_their_slots(db, seeded, calculator):
    day = date(2024, 3, 1)
    await book(db, seeded, day, 2)
    await book(db, seeded, day, 3, status=OrderStatus.CANCELLED)
    slot = await calculator.availability(day)
    assert slot.booked == 2
    assert slot.available == 3


async def test_service_and_transport_orders_share_capacity(db, seeded, calculator):
    day = date(2024, 3, 1)
    await book(db, seeded, day, 2, kind=OrderKind.TRANSPORT)
    await book(db, seeded, day, 2, kind=OrderKind.SERVICE)
    slot = await calculator.availability(day)
    assert slot.booked == 4


async def test_available_never_negative(db, seeded, calculator):
    day = date(2024, 3, 1)
    await book(db, seeded, day, 7)
    slot = await calculator.availability(day)
    assert slot.booked == 7
    assert slot.available == 0
    assert slot.is_available is False


async def test_max_bikes_per_order(store, calculator):
    await store.create(SlotConfigData(start_date=date(2024, 2, 1), end_date=date(2024, 2, 29),
                                      max_bikes_per_day=10, max_bikes_per_order=2))
    await store.create(SlotConfigData(start_date=date(2024, 3, 1), end_date=date(2024, 3, 31),
                                      max_bikes_per_day=4))
    assert await calculator.is_within_max_bikes_per_order(date(2024, 2, 5), 2) is True
    assert await calculator.is_within_max_bikes_per_order(date(2024, 2, 5), 3) is False
    # null per-order limit means the daily limit applies
    assert await calculator.is_within_max_bikes_per_order(date(2024, 3, 5), 4) is True
    assert await calculator.is_within_max_bikes_per_order(date(2024, 3, 5), 5) is False


async def test_range_applies_each_days_config(db, seeded, store, calculator):
    await store.create(SlotConfigData(start_date=date(2024, 2, 1), end_date=date(2024, 2, 2), max_bikes_per_day=2))
    await store.create(SlotConfigData(start_date=date(2024, 2, 3), max_bikes_per_day=8, max_bikes_per_order=4))
    await book(db, seeded, date(2024, 2, 2), 3)
    await book(db, seeded, date(2024, 2, 3), 1)

    days = await calculator.availability_range(date(2024, 1, 31), date(2024, 2, 3))
    assert [d.date for d in days] == [date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2), date(2024, 2, 3)]
    assert [d.max_bikes_per_day for d in days] == [5, 2, 2, 8]
    assert [d.booked for d in days] == [0, 0, 3, 1]
    assert [d.available for d in days] == [5, 2, 0, 7]
    assert days[3].max_bikes_per_order == 4


async def test_range_matches_single_day_queries(db, seeded, store, calculator):
    await store.create(SlotConfigData(start_date=date(2024, 1, 10), end_date=date(2024, 1, 12), max_bikes_per_day=3))
    await book(db, seeded, date(2024, 1, 11), 2)
    days = await calculator.availability_range(date(2024, 1, 9), date(2024, 1, 13))
    for slot in days:
        assert slot == await calculator.availability(slot.date)
        assert slot.available == max(0, slot.max_bikes_per_day - slot.booked)


async def test_range_defaults_to_one_month(calculator):
    days = await calculator.availability_range(date(2024, 1, 31))
    assert days[0].date == date(2024, 1, 31)
    assert days[-1].date == date(2024, 2, 29)


async def test_range_rejects_reversed_and_oversized(calculator):
    with pytest.raises(ValidationError):
        await calculator.availability_range(date(2024, 2, 1), date(2024, 1, 1))
    with pytest.raises(ValidationError):
        await calculator.availability_range(date(2024, 1, 1), date(2025, 6, 1))


async def test_next_days(calculator):
    days = await calculator.next_days(3, date(2024, 5, 1))
    assert [d.date for d in days] == [date(2024, 5, 1), date(2024, 5, 2), date(2024, 5, 3)]
    with pytest.raises(ValidationError):
        await calculator.next_days(0)


def test_booking_locks_are_per_date():
    locks = BookingLocks()
    assert locks.for_date(date(2024, 1, 1)) is locks.for_date(date(2024, 1, 1))
    assert locks.for_date(date(2024, 1, 1)) is not locks.for_date(date(2024, 1, 2))


async def test_booking_lock_dropped_once_released():
    locks = BookingLocks()
    lock = locks.for_date(date(2024, 1, 1))
    async with lock:
        assert locks.for_date(date(2024, 1, 1)) is lock
    assert len(locks) == 1

    del lock
    gc.collect()
    assert len(locks) == 0
