"""FastAPI dependency providers for the caller, DB sessions and services."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.db.engine import get_db
from app.models import ClientRole
from app.services.actor import Actor
from app.services.notifications import Notifier
from app.services.order_factory import OrderFactory
from app.services.order_management import OrderManager
from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig
from app.services.availability import SlotAvailabilityCalculator
from app.services.pricing import PriceCalculator


@lru_cache
def get_settings_dep() -> Settings:
    return get_settings()


# ── Caller identity (set by the upstream gateway) ────────

async def require_actor(
    x_client_id: str | None = Header(default=None),
    x_client_role: str | None = Header(default=None),
) -> Actor:
    if not x_client_id:
        raise HTTPException(401, "Authentication required")
    try:
        role = ClientRole(x_client_role or ClientRole.CLIENT.value)
    except ValueError:
        raise HTTPException(401, f"Unknown role: {x_client_role}")
    return Actor(client_id=x_client_id, role=role)


async def require_admin(actor: Actor = Depends(require_actor)) -> Actor:
    if not actor.is_admin:
        raise HTTPException(403, "Insufficient permissions")
    return actor


# ── Services ─────────────────────────────────────────────

def get_slot_store(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> SlotConfigStore:
    return SlotConfigStore(db, DefaultSlotConfig.from_settings(settings.slots))


def get_availability(
    db: AsyncSession = Depends(get_db),
    store: SlotConfigStore = Depends(get_slot_store),
    settings: Settings = Depends(get_settings_dep),
) -> SlotAvailabilityCalculator:
    return SlotAvailabilityCalculator(db, store, settings.slots.max_range_days)


def get_notifier(settings: Settings = Depends(get_settings_dep)) -> Notifier:
    return Notifier(settings.email)


def get_order_factory(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
    store: SlotConfigStore = Depends(get_slot_store),
    notifier: Notifier = Depends(get_notifier),
) -> OrderFactory:
    return OrderFactory(db, settings, store, notifier)


def get_order_manager(
    db: AsyncSession = Depends(get_db),
    store: SlotConfigStore = Depends(get_slot_store),
) -> OrderManager:
    return OrderManager(db, store)


def get_price_calculator(settings: Settings = Depends(get_settings_dep)) -> PriceCalculator:
    return PriceCalculator(settings.pricing, settings.orders.own_service_id)
