"""Administrator-defined pickup capacity per date range.

Ranges never overlap; a missing end date means the config is open-ended.
Dates that no config covers fall back to the default handed in at
construction, which comes from the ``slots`` section of the settings.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import SlotsConfig
from app.db import crud
from app.models import SlotConfig
from app.services.errors import ValidationError, ConflictError, NotFoundError

logger = logging.getLogger(__name__)

# Serializes overlap scan and write across requests in this process
config_write_lock = asyncio.Lock()


@dataclass(frozen=True)
class DefaultSlotConfig:
    max_bikes_per_day: int
    max_bikes_per_order: int

    @classmethod
    def from_settings(cls, slots: SlotsConfig) -> "DefaultSlotConfig":
        return cls(slots.default_max_bikes_per_day, slots.default_max_bikes_per_order)

    @property
    def effective_max_bikes_per_order(self) -> int:
        return self.max_bikes_per_order


@dataclass
class SlotConfigData:
    start_date: date | None
    end_date: date | None = None
    max_bikes_per_day: int = 0
    max_bikes_per_order: int | None = None


def ranges_overlap(s1: date, e1: date | None, s2: date, e2: date | None) -> bool:
    """[s1, e1] and [s2, e2] share a day; None ends are unbounded."""
    return (e2 is None or s1 <= e2) and (e1 is None or s2 <= e1)


class SlotConfigStore:
    def __init__(
        self,
        db: AsyncSession,
        default: DefaultSlotConfig,
        today: Callable[[], date] = date.today,
        lock: asyncio.Lock | None = None,
    ):
        self.db = db
        self.default = default
        self.today = today
        self.lock = lock or config_write_lock

    # ── Validation ───────────────────────────────────────

    def _validate(self, data: SlotConfigData) -> None:
        violations = []
        if data.start_date is None:
            violations.append("start_date is required")
        if data.max_bikes_per_day is None or data.max_bikes_per_day <= 0:
            violations.append("max_bikes_per_day must be greater than 0")
        if data.max_bikes_per_order is not None:
            if data.max_bikes_per_order <= 0:
                violations.append("max_bikes_per_order must be greater than 0")
            elif data.max_bikes_per_day and data.max_bikes_per_order > data.max_bikes_per_day:
                violations.append("max_bikes_per_order cannot exceed max_bikes_per_day")
        if data.start_date is not None:
            if data.end_date is not None and data.end_date < data.start_date:
                violations.append("end_date cannot be before start_date")
            if data.start_date < self.today():
                violations.append("start_date cannot be in the past")
        if violations:
            logger.warning("Rejected slot config: %s", "; ".join(violations))
            raise ValidationError(violations)

    async def _check_overlap(self, data: SlotConfigData, exclude_id: str | None = None) -> None:
        overlapping = await crud.find_overlapping_configs(
            self.db, data.start_date, data.end_date, exclude_id=exclude_id
        )
        if overlapping:
            logger.warning(
                "Slot config %s..%s overlaps %s",
                data.start_date, data.end_date or "open", [c.id for c in overlapping],
            )
            raise ConflictError(overlapping)

    # ── Commands ─────────────────────────────────────────

    async def create(self, data: SlotConfigData) -> SlotConfig:
        self._validate(data)
        async with self.lock:
            await self._check_overlap(data)
            config = SlotConfig(
                start_date=data.start_date,
                end_date=data.end_date,
                max_bikes_per_day=data.max_bikes_per_day,
                max_bikes_per_order=data.max_bikes_per_order,
            )
            self.db.add(config)
            await self.db.commit()
        await self.db.refresh(config)
        logger.info(
            "Created slot config %s (%s..%s, %d/day)",
            config.id, config.start_date, config.end_date or "open", config.max_bikes_per_day,
        )
        return config

    async def update(self, config_id: str, data: SlotConfigData) -> SlotConfig:
        config = await self.get(config_id)
        self._validate(data)
        async with self.lock:
            await self._check_overlap(data, exclude_id=config_id)
            config.start_date = data.start_date
            config.end_date = data.end_date
            config.max_bikes_per_day = data.max_bikes_per_day
            config.max_bikes_per_order = data.max_bikes_per_order
            await self.db.commit()
        await self.db.refresh(config)
        logger.info("Updated slot config %s", config.id)
        return config

    async def delete(self, config_id: str) -> None:
        config = await self.get(config_id)
        await self.db.delete(config)
        await self.db.commit()
        logger.info("Deleted slot config %s", config_id)

    async def initialize_default(self) -> SlotConfig | None:
        """Seed an open-ended config from today when none exist yet."""
        if await crud.count_slot_configs(self.db) > 0:
            return None
        config = SlotConfig(
            start_date=self.today(),
            end_date=None,
            max_bikes_per_day=self.default.max_bikes_per_day,
            max_bikes_per_order=self.default.max_bikes_per_order,
        )
        self.db.add(config)
        await self.db.commit()
        await self.db.refresh(config)
        logger.info("Initialized default slot config %s from %s", config.id, config.start_date)
        return config

    # ── Queries ──────────────────────────────────────────

    async def get(self, config_id: str) -> SlotConfig:
        config = await crud.get_slot_config(self.db, config_id)
        if config is None:
            raise NotFoundError(f"Slot config {config_id} not found")
        return config

    async def list_all(self) -> list[SlotConfig]:
        return await crud.list_slot_configs(self.db)

    async def list_active(self) -> list[SlotConfig]:
        return await crud.list_active_configs(self.db, self.today())

    async def list_future(self) -> list[SlotConfig]:
        return await crud.list_future_configs(self.db, self.today())

    async def resolve(self, day: date) -> SlotConfig | DefaultSlotConfig:
        config = await crud.find_config_for_date(self.db, day)
        if config is None:
            logger.warning("No slot config covers %s, using default capacity", day)
            return self.default
        return config

    def resolve_from(self, configs: list[SlotConfig], day: date) -> SlotConfig | DefaultSlotConfig:
        """Resolve against preloaded configs; latest start wins. Does not log."""
        matches = [c for c in configs if c.covers(day)]
        if not matches:
            return self.default
        return max(matches, key=lambda c: c.start_date)
