from datetime import date
from decimal import Decimal

from app.db import crud
from app.models import SlotConfig, OrderStatus, ClientKind

from tests.conftest import book


async def test_create_and_get_client(db):
    client = await crud.create_client(db, "Anna@Example.com", phone="500600700")
    assert client.id is not None
    assert client.kind == ClientKind.REGISTERED

    fetched = await crud.get_client(db, client.id)
    assert fetched.email == "Anna@Example.com"
    assert (await crud.get_client_by_email(db, "  anna@example.COM ")).id == client.id
    assert await crud.get_client_by_email(db, "nobody@example.com") is None


async def test_create_catalogue_rows(db):
    service = await crud.create_bike_service(db, name="Own workshop", id=1, city="Krakow")
    assert (await crud.get_bike_service(db, 1)).name == "Own workshop"
    assert service.city == "Krakow"

    package = await crud.create_service_package(db, "BASIC", "Basic", Decimal("99.00"))
    assert (await crud.get_service_package_by_code(db, "BASIC")).id == package.id
    assert await crud.get_service_package(db, 12345) is None


async def test_bicycles_and_addresses_keep_owner(db):
    client = await crud.create_client(db, "owner@example.com")
    bike = await crud.create_bicycle(db, client.id, "Trek")
    address = await crud.create_address(db, client.id, "Dluga", "12", "Krakow")
    assert (await crud.get_bicycle(db, bike.id)).owner_id == client.id
    assert (await crud.get_address(db, address.id)).owner_id == client.id


async def test_find_overlapping_configs(db):
    a = SlotConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), max_bikes_per_day=5)
    b = SlotConfig(start_date=date(2024, 3, 1), end_date=None, max_bikes_per_day=5)
    db.add_all([a, b])
    await db.commit()

    assert [c.id for c in await crud.find_overlapping_configs(db, date(2024, 1, 31), date(2024, 2, 28))] == [a.id]
    assert await crud.find_overlapping_configs(db, date(2024, 2, 1), date(2024, 2, 29)) == []
    assert [c.id for c in await crud.find_overlapping_configs(db, date(2025, 1, 1), None)] == [b.id]
    assert await crud.find_overlapping_configs(db, date(2024, 1, 1), None, exclude_id=a.id) == [b]
    assert await crud.count_slot_configs(db) == 2


async def test_find_config_for_date(db):
    config = SlotConfig(start_date=date(2024, 1, 1), end_date=date(2024, 1, 31), max_bikes_per_day=5)
    db.add(config)
    await db.commit()
    assert (await crud.find_config_for_date(db, date(2024, 1, 31))).id == config.id
    assert await crud.find_config_for_date(db, date(2024, 2, 1)) is None


async def test_booked_counts(db, seeded):
    await book(db, seeded, date(2024, 3, 1), 2)
    await book(db, seeded, date(2024, 3, 3), 1)
    await book(db, seeded, date(2024, 3, 3), 4, status=OrderStatus.CANCELLED)

    assert await crud.count_booked_bicycles(db, date(2024, 3, 1)) == 2
    assert await crud.count_booked_bicycles(db, date(2024, 3, 2)) == 0
    assert await crud.booked_bicycles_by_date(db, date(2024, 3, 1), date(2024, 3, 3)) == {
        date(2024, 3, 1): 2,
        date(2024, 3, 3): 1,
    }
