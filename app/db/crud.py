"""Query helpers shared by the services.

Helpers that create standalone reference rows commit immediately; order
rows are written by the services inside their own transaction.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import (
    Client, Address, Bicycle, BikeService, ServicePackage, SlotConfig,
    Order, OrderStatus, ClientKind, ClientRole,
)


# ── Clients ───────────────────────────────────────────────

async def get_client(db: AsyncSession, client_id: str) -> Client | None:
    return await db.get(Client, client_id)


async def get_client_by_email(db: AsyncSession, email: str) -> Client | None:
    result = await db.execute(select(Client).where(func.lower(Client.email) == email.strip().lower()))
    return result.scalars().first()


async def create_client(
    db: AsyncSession, email: str, kind: ClientKind = ClientKind.REGISTERED,
    phone: str = "", role: ClientRole = ClientRole.CLIENT,
    first_name: str = "", last_name: str = "",
) -> Client:
    client = Client(
        email=email, kind=kind, phone=phone, role=role,
        first_name=first_name, last_name=last_name,
    )
    db.add(client)
    await db.commit()
    await db.refresh(client)
    return client


# ── Addresses & bicycles ─────────────────────────────────

async def get_address(db: AsyncSession, address_id: str) -> Address | None:
    return await db.get(Address, address_id)


async def create_address(
    db: AsyncSession, owner_id: str, street: str, building: str, city: str,
    apartment: str | None = None, postal_code: str | None = None,
    latitude: float | None = None, longitude: float | None = None,
) -> Address:
    address = Address(
        owner_id=owner_id, street=street, building=building, city=city,
        apartment=apartment, postal_code=postal_code,
        latitude=latitude, longitude=longitude,
    )
    db.add(address)
    await db.commit()
    await db.refresh(address)
    return address


async def get_bicycle(db: AsyncSession, bicycle_id: str) -> Bicycle | None:
    return await db.get(Bicycle, bicycle_id)


async def create_bicycle(db: AsyncSession, owner_id: str, brand: str, model: str = "", type: str = "") -> Bicycle:
    bike = Bicycle(owner_id=owner_id, brand=brand, model=model, type=type)
    db.add(bike)
    await db.commit()
    await db.refresh(bike)
    return bike


# ── Catalogue ─────────────────────────────────────────────

async def get_bike_service(db: AsyncSession, service_id: int) -> BikeService | None:
    return await db.get(BikeService, service_id)


async def create_bike_service(db: AsyncSession, name: str, id: int | None = None, **fields) -> BikeService:
    service = BikeService(id=id, name=name, **fields)
    db.add(service)
    await db.commit()
    await db.refresh(service)
    return service


async def get_service_package(db: AsyncSession, package_id: int) -> ServicePackage | None:
    return await db.get(ServicePackage, package_id)


async def get_service_package_by_code(db: AsyncSession, code: str) -> ServicePackage | None:
    result = await db.execute(select(ServicePackage).where(ServicePackage.code == code))
    return result.scalars().first()


async def create_service_package(
    db: AsyncSession, code: str, name: str, price: Decimal, active: bool = True,
) -> ServicePackage:
    package = ServicePackage(code=code, name=name, price=price, active=active)
    db.add(package)
    await db.commit()
    await db.refresh(package)
    return package


# ── Slot configs ─────────────────────────────────────────

async def list_slot_configs(db: AsyncSession) -> list[SlotConfig]:
    result = await db.execute(select(SlotConfig).order_by(SlotConfig.start_date))
    return list(result.scalars().all())


async def get_slot_config(db: AsyncSession, config_id: str) -> SlotConfig | None:
    return await db.get(SlotConfig, config_id)


async def count_slot_configs(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(SlotConfig))
    return result.scalar_one()


async def find_config_for_date(db: AsyncSession, day: date) -> SlotConfig | None:
    result = await db.execute(
        select(SlotConfig)
        .where(
            SlotConfig.start_date <= day,
            or_(SlotConfig.end_date.is_(None), SlotConfig.end_date >= day),
        )
        .order_by(SlotConfig.start_date.desc())
        .limit(1)
    )
    return result.scalars().first()


async def find_configs_in_range(db: AsyncSession, start: date, end: date) -> list[SlotConfig]:
    """Configs whose range touches [start, end], oldest first."""
    return await find_overlapping_configs(db, start, end)


async def find_overlapping_configs(
    db: AsyncSession, start: date, end: date | None, exclude_id: str | None = None,
) -> list[SlotConfig]:
    """Configs sharing at least one day with [start, end]; end=None is unbounded."""
    query = select(SlotConfig).where(or_(SlotConfig.end_date.is_(None), SlotConfig.end_date >= start))
    if end is not None:
        query = query.where(SlotConfig.start_date <= end)
    if exclude_id is not None:
        query = query.where(SlotConfig.id != exclude_id)
    result = await db.execute(query.order_by(SlotConfig.start_date))
    return list(result.scalars().all())


async def list_active_configs(db: AsyncSession, today: date) -> list[SlotConfig]:
    result = await db.execute(
        select(SlotConfig).where(
            SlotConfig.start_date <= today,
            or_(SlotConfig.end_date.is_(None), SlotConfig.end_date >= today),
        )
    )
    return list(result.scalars().all())


async def list_future_configs(db: AsyncSession, today: date) -> list[SlotConfig]:
    result = await db.execute(
        select(SlotConfig).where(SlotConfig.start_date > today).order_by(SlotConfig.start_date)
    )
    return list(result.scalars().all())


# ── Orders ───────────────────────────────────────────────

async def get_order(db: AsyncSession, order_id: str) -> Order | None:
    return await db.get(Order, order_id)


async def count_booked_bicycles(db: AsyncSession, day: date) -> int:
    """One order row is one bicycle; cancelled rows free their slot."""
    result = await db.execute(
        select(func.count(Order.id)).where(
            Order.pickup_date == day,
            Order.status != OrderStatus.CANCELLED,
        )
    )
    return result.scalar_one()


async def booked_bicycles_by_date(db: AsyncSession, start: date, end: date) -> dict[date, int]:
    result = await db.execute(
        select(Order.pickup_date, func.count(Order.id))
        .where(
            Order.pickup_date >= start,
            Order.pickup_date <= end,
            Order.status != OrderStatus.CANCELLED,
        )
        .group_by(Order.pickup_date)
    )
    return {day: count for day, count in result.all()}


async def list_orders_for_client(db: AsyncSession, client_id: str) -> list[Order]:
    result = await db.execute(
        select(Order).where(Order.client_id == client_id).order_by(Order.order_date.desc())
    )
    return list(result.scalars().all())
