"""CLI for the bike transport service: bootstrap the database, inspect capacity."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import date
from decimal import Decimal

SAMPLE_PACKAGES = [
    ("BASIC", "Basic service", Decimal("99.00")),
    ("STANDARD", "Standard service", Decimal("199.00")),
    ("PREMIUM", "Premium service", Decimal("299.00")),
]


async def cmd_init_db(args):
    """Create all tables."""
    from app.db.engine import create_all

    await create_all()
    print("Database tables created")


async def cmd_seed_catalog(args):
    """Create the own-service entry and sample service packages if missing."""
    from app.config import get_settings
    from app.db.engine import async_session_factory, create_all
    from app.db import crud

    settings = get_settings()
    await create_all()

    async with async_session_factory() as db:
        own_id = settings.orders.own_service_id
        if await crud.get_bike_service(db, own_id) is None:
            await crud.create_bike_service(
                db, name=args.service_name, id=own_id,
                street=args.street, building=args.building, city=args.city,
            )
            print(f"Own service created (id={own_id})")
        else:
            print(f"Own service already exists (id={own_id})")

        for code, name, price in SAMPLE_PACKAGES:
            if await crud.get_service_package_by_code(db, code) is None:
                package = await crud.create_service_package(db, code, name, price)
                print(f"Package {code} created (id={package.id}, price={package.price})")


async def cmd_seed_slots(args):
    """Seed an open-ended default slot config when none exist."""
    from app.config import get_settings
    from app.db.engine import async_session_factory, create_all
    from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig

    settings = get_settings()
    await create_all()

    async with async_session_factory() as db:
        store = SlotConfigStore(db, DefaultSlotConfig.from_settings(settings.slots))
        config = await store.initialize_default()

    if config is None:
        print("Slot configs already exist, nothing to do")
    else:
        print(f"Default slot config created: from {config.start_date}, {config.max_bikes_per_day}/day")


async def cmd_availability(args):
    """Print pickup availability for a number of days."""
    from app.config import get_settings
    from app.db.engine import async_session_factory, create_all
    from app.services.availability import SlotAvailabilityCalculator
    from app.services.errors import ValidationError
    from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig

    settings = get_settings()
    await create_all()
    start = date.fromisoformat(args.date) if args.date else None

    async with async_session_factory() as db:
        store = SlotConfigStore(db, DefaultSlotConfig.from_settings(settings.slots))
        calculator = SlotAvailabilityCalculator(db, store, settings.slots.max_range_days)
        try:
            days = await calculator.next_days(args.days, start)
        except ValidationError as e:
            print(e)
            sys.exit(1)

    print(f"{'date':<12}{'max':>5}{'booked':>8}{'free':>6}{'per order':>11}")
    for slot in days:
        print(
            f"{slot.date.isoformat():<12}{slot.max_bikes_per_day:>5}{slot.booked:>8}"
            f"{slot.available:>6}{slot.max_bikes_per_order:>11}"
        )


def main():
    parser = argparse.ArgumentParser(description="Bike transport CLI")
    parser.add_argument("--log-level", default=None, help="Override log_level from config.yaml")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("init-db", help="Create database tables")

    sc = subparsers.add_parser("seed-catalog", help="Create own service and sample packages")
    sc.add_argument("--service-name", default="Own service", help="Name of the own service")
    sc.add_argument("--street", default="", help="Own service street")
    sc.add_argument("--building", default="", help="Own service building number")
    sc.add_argument("--city", default="", help="Own service city")

    subparsers.add_parser("seed-slots", help="Seed the default slot config")

    av = subparsers.add_parser("availability", help="Show pickup availability")
    av.add_argument("--date", default="", help="First day (YYYY-MM-DD), defaults to today")
    av.add_argument("--days", type=int, default=7, help="Number of days")

    args = parser.parse_args()
    if not args.command:
        parser.print_help()
        sys.exit(1)

    from app.config import get_settings
    logging.basicConfig(level=args.log_level or get_settings().log_level)

    if args.command == "init-db":
        asyncio.run(cmd_init_db(args))
    elif args.command == "seed-catalog":
        asyncio.run(cmd_seed_catalog(args))
    elif args.command == "seed-slots":
        asyncio.run(cmd_seed_slots(args))
    elif args.command == "availability":
        asyncio.run(cmd_availability(args))


if __name__ == "__main__":
    main()
