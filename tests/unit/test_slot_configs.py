import asyncio
import logging
from datetime import date
from itertools import combinations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.db import crud
from app.models import Base

from app.services.errors import ValidationError, ConflictError, NotFoundError
from app.services.slot_configs import SlotConfigData, SlotConfigStore, DefaultSlotConfig, ranges_overlap

from tests.conftest import TODAY


def cfg(start, end=None, per_day=5, per_order=None):
    return SlotConfigData(start_date=start, end_date=end, max_bikes_per_day=per_day, max_bikes_per_order=per_order)


# ── Overlap rule ─────────────────────────────────────────

def test_ranges_overlap_closed_ranges():
    assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 10), date(2024, 1, 10), date(2024, 1, 20))
    assert not ranges_overlap(date(2024, 1, 1), date(2024, 1, 9), date(2024, 1, 10), date(2024, 1, 20))


def test_ranges_overlap_open_ended():
    assert ranges_overlap(date(2024, 1, 1), None, date(2030, 1, 1), date(2030, 2, 1))
    assert ranges_overlap(date(2024, 5, 1), date(2024, 6, 1), date(2024, 1, 1), None)
    assert not ranges_overlap(date(2024, 1, 1), date(2024, 3, 1), date(2024, 3, 2), None)


# ── Create ───────────────────────────────────────────────

async def test_create_valid_config(store):
    config = await store.create(cfg(date(2024, 2, 1), date(2024, 2, 29), per_day=8, per_order=4))
    assert config.id is not None
    assert config.max_bikes_per_day == 8
    assert config.effective_max_bikes_per_order == 4


async def test_per_order_defaults_to_per_day(store):
    config = await store.create(cfg(date(2024, 2, 1), per_day=6))
    assert config.max_bikes_per_order is None
    assert config.effective_max_bikes_per_order == 6


async def test_create_collects_all_violations(store):
    with pytest.raises(ValidationError) as exc:
        await store.create(cfg(date(2023, 12, 1), date(2023, 11, 1), per_day=0, per_order=-1))
    violations = exc.value.violations
    assert "max_bikes_per_day must be greater than 0" in violations
    assert "max_bikes_per_order must be greater than 0" in violations
    assert "end_date cannot be before start_date" in violations
    assert "start_date cannot be in the past" in violations


async def test_create_requires_start_date(store):
    with pytest.raises(ValidationError) as exc:
        await store.create(cfg(None))
    assert exc.value.violations == ["start_date is required"]


async def test_per_order_cannot_exceed_per_day(store):
    with pytest.raises(ValidationError) as exc:
        await store.create(cfg(date(2024, 2, 1), per_day=2, per_order=3))
    assert exc.value.violations == ["max_bikes_per_order cannot exceed max_bikes_per_day"]


async def test_conflict_names_existing_open_ended_config(store):
    a = await store.create(cfg(date(2024, 1, 1), None, per_day=5, per_order=3))
    with pytest.raises(ConflictError) as exc:
        await store.create(cfg(date(2024, 1, 1), date(2024, 6, 1), per_day=2))
    assert [c.id for c in exc.value.overlapping] == [a.id]
    assert exc.value.to_dict()["overlapping"][0]["id"] == a.id


async def test_adjacent_ranges_do_not_conflict(store):
    await store.create(cfg(date(2024, 1, 1), date(2024, 1, 31)))
    second = await store.create(cfg(date(2024, 2, 1), date(2024, 2, 29)))
    assert second.start_date == date(2024, 2, 1)


async def test_persisted_configs_never_overlap(store):
    attempts = [
        cfg(date(2024, 1, 1), date(2024, 1, 31)),
        cfg(date(2024, 1, 15), date(2024, 2, 15)),
        cfg(date(2024, 2, 1), None),
        cfg(date(2024, 3, 1), date(2024, 3, 31)),
        cfg(date(2024, 1, 31), date(2024, 2, 1)),
    ]
    for data in attempts:
        try:
            await store.create(data)
        except ConflictError:
            pass

    configs = await store.list_all()
    assert len(configs) == 2
    for c1, c2 in combinations(configs, 2):
        assert not ranges_overlap(c1.start_date, c1.end_date, c2.start_date, c2.end_date)


# ── Update / delete ──────────────────────────────────────

async def test_update_excludes_itself_from_overlap_scan(store):
    config = await store.create(cfg(date(2024, 1, 1), date(2024, 1, 31)))
    updated = await store.update(config.id, cfg(date(2024, 1, 1), date(2024, 2, 15), per_day=7))
    assert updated.end_date == date(2024, 2, 15)
    assert updated.max_bikes_per_day == 7


async def test_update_conflicts_with_other_config(store):
    first = await store.create(cfg(date(2024, 1, 1), date(2024, 1, 31)))
    second = await store.create(cfg(date(2024, 2, 1), date(2024, 2, 29)))
    with pytest.raises(ConflictError) as exc:
        await store.update(second.id, cfg(date(2024, 1, 20), date(2024, 2, 29)))
    assert [c.id for c in exc.value.overlapping] == [first.id]


async def test_update_validates(store):
    config = await store.create(cfg(date(2024, 1, 1)))
    with pytest.raises(ValidationError):
        await store.update(config.id, cfg(date(2024, 1, 1), per_day=0))


async def test_update_missing_config(store):
    with pytest.raises(NotFoundError):
        await store.update("01MISSING", cfg(date(2024, 1, 1)))


async def test_delete(store):
    config = await store.create(cfg(date(2024, 1, 1)))
    await store.delete(config.id)
    assert await store.list_all() == []
    with pytest.raises(NotFoundError):
        await store.delete(config.id)


# ── Resolve ──────────────────────────────────────────────

async def test_resolve_returns_covering_config(store):
    config = await store.create(cfg(date(2024, 2, 1), date(2024, 2, 29), per_day=9))
    resolved = await store.resolve(date(2024, 2, 10))
    assert resolved.id == config.id


async def test_resolve_falls_back_to_default_and_logs(store, caplog):
    await store.create(cfg(date(2024, 2, 1), date(2024, 2, 29), per_day=9))
    with caplog.at_level(logging.WARNING, logger="app.services.slot_configs"):
        resolved = await store.resolve(date(2024, 3, 1))
    assert resolved == DefaultSlotConfig(5, 3)
    assert "2024-03-01" in caplog.text


# ── Listings ─────────────────────────────────────────────

async def test_active_and_future_listings(store):
    current = await store.create(cfg(TODAY, date(2024, 1, 31)))
    upcoming = await store.create(cfg(date(2024, 3, 1), None))
    assert [c.id for c in await store.list_active()] == [current.id]
    assert [c.id for c in await store.list_future()] == [upcoming.id]


async def test_initialize_default_only_when_empty(store):
    config = await store.initialize_default()
    assert config.start_date == TODAY
    assert config.end_date is None
    assert config.max_bikes_per_day == 5
    assert config.max_bikes_per_order == 3

    assert await store.initialize_default() is None
    assert len(await store.list_all()) == 1


# ── Concurrency ──────────────────────────────────────────

async def test_concurrent_creates_cannot_persist_overlapping_configs(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'slots.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    sessions = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    lock = asyncio.Lock()

    async def create(data):
        async with sessions() as db:
            store = SlotConfigStore(db, DefaultSlotConfig(5, 3), today=lambda: TODAY, lock=lock)
            return await store.create(data)

    results = await asyncio.gather(
        create(cfg(date(2024, 2, 1))),
        create(cfg(date(2024, 3, 1), date(2024, 4, 1))),
        return_exceptions=True,
    )
    assert sum(1 for r in results if isinstance(r, ConflictError)) == 1

    async with sessions() as db:
        assert await crud.count_slot_configs(db) == 1
    await engine.dispose()
