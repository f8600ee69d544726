"""Shared fixtures: in-memory database, seeded catalogue, services on a fixed clock."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings
from app.db import crud
from app.models import (
    Base, Order, OrderKind, OrderStatus, TransportStatus, ClientRole,
)
from app.services.availability import BookingLocks
from app.services.order_factory import OrderFactory
from app.services.order_management import OrderManager
from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig

TODAY = date(2024, 1, 1)
OWN_SERVICE_ID = 1
EXTERNAL_SERVICE_ID = 2


class RecordingNotifier:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    def send_order_confirmation(self, to, order_ids, pickup_date, kind):
        if self.fail:
            raise RuntimeError("mail server down")
        self.sent.append((to, list(order_ids), pickup_date, kind))
        return True


@pytest_asyncio.fixture
async def db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def store(db):
    return SlotConfigStore(db, DefaultSlotConfig(5, 3), today=lambda: TODAY)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def factory(db, settings, store, notifier):
    return OrderFactory(db, settings, store, notifier, locks=BookingLocks())


@pytest.fixture
def manager(db, store):
    return OrderManager(db, store, locks=BookingLocks())


@pytest_asyncio.fixture
async def seeded(db):
    """Own service, one external shop, packages, a user with bikes and an address, an admin."""
    own = await crud.create_bike_service(
        db, name="Own workshop", id=OWN_SERVICE_ID,
        street="Warsztatowa", building="1", city="Krakow", postal_code="30-001",
    )
    external = await crud.create_bike_service(
        db, name="City Bikes", id=EXTERNAL_SERVICE_ID,
        street="Rowerowa", building="7", city="Krakow",
    )
    basic = await crud.create_service_package(db, "BASIC", "Basic service", Decimal("99.00"))
    retired = await crud.create_service_package(db, "LEGACY", "Old package", Decimal("49.00"), active=False)

    user = await crud.create_client(db, "anna@example.com", phone="500600700", first_name="Anna")
    other = await crud.create_client(db, "piotr@example.com", phone="500600701")
    admin = await crud.create_client(db, "admin@example.com", role=ClientRole.ADMIN)

    bikes = [
        await crud.create_bicycle(db, user.id, "Trek", "Marlin 5"),
        await crud.create_bicycle(db, user.id, "Giant", "Talon"),
        await crud.create_bicycle(db, user.id, "Kross", "Level"),
        await crud.create_bicycle(db, user.id, "Cube", "Aim"),
    ]
    other_bike = await crud.create_bicycle(db, other.id, "Merida", "Big Nine")
    address = await crud.create_address(db, user.id, "Dluga", "12", "Krakow", apartment="3")

    return SimpleNamespace(
        own=own, external=external, basic=basic, retired=retired,
        user=user, other=other, admin=admin,
        bikes=bikes, other_bike=other_bike, address=address,
    )


async def book(db, seeded, day: date, count: int, status: OrderStatus = OrderStatus.PENDING,
               kind: OrderKind = OrderKind.TRANSPORT) -> list[Order]:
    """Insert ``count`` order rows for ``day`` directly, bypassing capacity checks."""
    orders = [
        Order(
            kind=kind,
            status=status,
            transport_status=TransportStatus.PENDING,
            client=seeded.user,
            bicycle=seeded.bikes[0],
            service=None,
            pickup_date=day,
            pickup_street="Dluga",
            pickup_building="12",
            pickup_city="Krakow",
            target_service_id=EXTERNAL_SERVICE_ID,
            transport_price=Decimal("30.00"),
        )
        for _ in range(count)
    ]
    db.add_all(orders)
    await db.commit()
    return orders
