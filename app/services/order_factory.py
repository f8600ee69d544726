"""Turns one order request into one order row per bicycle.

A request comes from either a registered user or a guest, and asks for
either a transport-only order or a service order at our own shop. Every
rule violation is collected before anything is written; the capacity
check and the insert run under the pickup date's booking lock.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.db import crud
from app.models import (
    Order, ServiceDetails, Client, Bicycle, BikeService,
    OrderKind, OrderStatus, TransportStatus, ActorKind, ClientKind,
)
from app.models.base import utcnow, new_id
from app.schemas.order import OrderRequest, AddressInput
from app.services.actor import Actor
from app.services.availability import SlotAvailabilityCalculator, BookingLocks, booking_locks
from app.services.errors import ValidationError, NotFoundError, AuthorizationError
from app.services.notifications import Notifier
from app.services.pricing import PriceCalculator
from app.services.slot_configs import SlotConfigStore

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[A-Za-z0-9+_.-]+@(.+)$")
PHONE_RE = re.compile(r"^[0-9+\-\s()]{9,15}$")


@dataclass
class CreatedOrders:
    order_ids: list[str] = field(default_factory=list)
    order_kind: OrderKind = OrderKind.TRANSPORT
    guest_client_id: str | None = None
    order_count: int = field(init=False)

    def __post_init__(self):
        self.order_count = len(self.order_ids)


def resolve_actor_kind(request: OrderRequest) -> ActorKind | None:
    if request.user_id:
        return ActorKind.USER
    if request.email or request.phone:
        return ActorKind.GUEST
    return None


def resolve_order_kind(request: OrderRequest) -> OrderKind:
    return OrderKind.SERVICE if request.service_package_id is not None else OrderKind.TRANSPORT


def address_violations(address: AddressInput) -> list[str]:
    missing = [name for name in ("street", "building", "city") if not getattr(address, name).strip()]
    return [f"pickup address {name} is required" for name in missing]


class OrderFactory:
    def __init__(
        self,
        db: AsyncSession,
        settings: Settings,
        store: SlotConfigStore,
        notifier: Notifier | None = None,
        locks: BookingLocks = booking_locks,
        today: Callable[[], date] | None = None,
    ):
        self.db = db
        self.settings = settings
        self.own_service_id = settings.orders.own_service_id
        self.calculator = SlotAvailabilityCalculator(db, store, settings.slots.max_range_days)
        self.pricing = PriceCalculator(settings.pricing, self.own_service_id)
        self.notifier = notifier
        self.locks = locks
        self.today = today or store.today

    # ── Validation ───────────────────────────────────────

    def validate(self, request: OrderRequest) -> list[str]:
        """Every rule the request breaks, without touching the database."""
        violations = []
        actor_kind = resolve_actor_kind(request)
        kind = resolve_order_kind(request)
        target = self._target_service_id(request, kind)

        if actor_kind is None:
            violations.append("either user_id or guest contact details (email, phone) are required")
        elif actor_kind == ActorKind.GUEST:
            violations.extend(self._guest_violations(request, kind, target))
        else:
            violations.extend(self._user_violations(request, kind, target))

        for i, bike in enumerate(request.bicycles):
            if not bike.brand.strip():
                violations.append(f"bicycle {i + 1} needs a brand")
        if len(set(request.bicycle_ids)) != len(request.bicycle_ids):
            violations.append("bicycle_ids must not repeat")
        if self._bikes_count(request) == 0:
            violations.append("at least one bicycle is required")

        if request.pickup_date is None:
            violations.append("pickup_date is required")
        elif request.pickup_date < self.today():
            violations.append("pickup_date cannot be in the past")

        if request.transport_price is not None and request.transport_price < 0:
            violations.append("transport_price cannot be negative")
        return violations

    def _guest_violations(self, request: OrderRequest, kind: OrderKind, target: int | None) -> list[str]:
        violations = []
        if kind != OrderKind.SERVICE:
            violations.append("guest orders must be service orders")
        if target != self.own_service_id:
            violations.append("guest orders must be delivered to our own service")
        if request.bicycle_ids:
            violations.append("guests cannot reference existing bicycles")
        elif not request.bicycles:
            violations.append("guests must describe their bicycles")
        if request.pickup_address_id:
            violations.append("guests cannot reference a saved address")
        elif request.pickup_address is None:
            violations.append("guests must supply a pickup address")
        else:
            violations.extend(address_violations(request.pickup_address))
        if not request.email or not EMAIL_RE.match(request.email.strip()):
            violations.append("a valid email is required")
        if not request.phone or not PHONE_RE.match(request.phone.strip()):
            violations.append("a valid phone number is required")
        return violations

    def _user_violations(self, request: OrderRequest, kind: OrderKind, target: int | None) -> list[str]:
        violations = []
        if kind == OrderKind.TRANSPORT:
            if target is None:
                violations.append("target_service_id is required for transport orders")
            elif target == self.own_service_id:
                violations.append("transport-only orders cannot be delivered to our own service")
        elif target != self.own_service_id:
            violations.append("service orders must be delivered to our own service")
        if request.bicycle_ids and request.bicycles:
            violations.append("send either bicycle_ids or bicycles, not both")
        if request.pickup_address_id and request.pickup_address is not None:
            violations.append("send either pickup_address_id or pickup_address, not both")
        elif not request.pickup_address_id and request.pickup_address is None:
            violations.append("a pickup address is required")
        elif request.pickup_address is not None:
            violations.extend(address_violations(request.pickup_address))
        return violations

    async def capacity_violations(self, day: date, count: int) -> list[str]:
        violations = []
        if not await self.calculator.is_within_max_bikes_per_order(day, count):
            config = await self.calculator.store.resolve(day)
            violations.append(
                f"at most {config.effective_max_bikes_per_order} bicycles per order on {day.isoformat()}"
            )
        if not await self.calculator.has_capacity(day, count):
            slot = await self.calculator.availability(day)
            violations.append(f"only {slot.available} pickup slots left on {day.isoformat()}")
        return violations

    # ── Creation ─────────────────────────────────────────

    async def create(self, request: OrderRequest, actor: Actor | None = None) -> CreatedOrders:
        """Validate, resolve references and persist the whole batch or nothing.

        ``actor`` is the authenticated caller; None means a trusted internal
        caller (CLI, guest endpoint).
        """
        violations = self.validate(request)
        count = self._bikes_count(request)
        day = request.pickup_date
        if day is None or count == 0:
            logger.warning("Rejected order request: %s", "; ".join(violations))
            raise ValidationError(violations)

        async with self.locks.for_date(day):
            violations.extend(await self.capacity_violations(day, count))
            if violations:
                logger.warning("Rejected order request for %s: %s", day, "; ".join(violations))
                raise ValidationError(violations)

            # Lookups only; nothing is added to the session until all references resolve
            kind = resolve_order_kind(request)
            target_id = self._target_service_id(request, kind)
            if resolve_actor_kind(request) == ActorKind.GUEST:
                client = await self._guest_client(request)
            else:
                client = await self._registered_client(request, actor)
            target = await self._bike_service(target_id)
            package = await self._package(request.service_package_id) if kind == OrderKind.SERVICE else None
            bikes = await self._bicycles(request, client)
            pickup = await self._pickup_address(request, client)
            price = self.pricing.transport_price(count, request.transport_price, target_id)

            now = utcnow()
            orders = []
            for bike in bikes:
                order = Order(
                    kind=kind,
                    status=OrderStatus.PENDING,
                    transport_status=TransportStatus.PENDING,
                    order_date=now,
                    client=client,
                    bicycle=bike,
                    pickup_date=day,
                    target_service_id=target.id,
                    transport_price=price,
                    estimated_time=self.settings.orders.default_estimated_minutes,
                    transport_notes=request.transport_notes,
                    additional_notes=request.additional_notes,
                    service=None,
                    **pickup,
                    **_delivery_fields(target),
                )
                if package is not None:
                    order.service = ServiceDetails(
                        service_package_id=package.id,
                        service_package_code=package.code,
                        service_price=package.price,
                        service_notes=request.service_notes,
                    )
                orders.append(order)

            try:
                if client.is_guest:
                    client.phone = request.phone.strip()
                self.db.add(client)
                await self.db.flush()
                if request.bicycles:
                    self.db.add_all(bikes)
                    await self.db.flush()
                self.db.add_all(orders)
                await self.db.commit()
            except Exception:
                await self.db.rollback()
                raise

        result = CreatedOrders(
            order_ids=[o.id for o in orders],
            order_kind=kind,
            guest_client_id=client.id if client.is_guest else None,
        )
        logger.info(
            "Created %d %s order(s) for client %s, pickup %s, transport price %s",
            result.order_count, kind.value, client.id, day, price,
        )
        await self._notify(client, result, day)
        return result

    # ── Reference resolution ─────────────────────────────

    async def _registered_client(self, request: OrderRequest, actor: Actor | None) -> Client:
        client = await crud.get_client(self.db, request.user_id)
        if client is None:
            raise NotFoundError(f"User {request.user_id} not found")
        if actor is not None and not actor.can_act_for(client.id):
            raise AuthorizationError("Cannot place orders for another user")
        return client

    async def _guest_client(self, request: OrderRequest) -> Client:
        email = request.email.strip()
        client = await crud.get_client_by_email(self.db, email)
        if client is None:
            return Client(
                id=new_id(), kind=ClientKind.GUEST, email=email, phone=request.phone.strip(),
                first_name=request.first_name, last_name=request.last_name,
            )
        if not client.is_guest:
            raise ValidationError([f"{email} belongs to a registered account; sign in to order"])
        return client

    async def _bike_service(self, service_id: int) -> BikeService:
        service = await crud.get_bike_service(self.db, service_id)
        if service is None:
            raise NotFoundError(f"Bike service {service_id} not found")
        return service

    async def _package(self, package_id: int):
        package = await crud.get_service_package(self.db, package_id)
        if package is None:
            raise NotFoundError(f"Service package {package_id} not found")
        if not package.active:
            raise ValidationError([f"service package {package.code} is not active"])
        return package

    async def _bicycles(self, request: OrderRequest, client: Client) -> list[Bicycle]:
        if request.bicycles:
            return [
                Bicycle(id=new_id(), owner_id=client.id, brand=b.brand.strip(), model=b.model, type=b.type)
                for b in request.bicycles
            ]

        bikes = []
        for bicycle_id in request.bicycle_ids:
            bike = await crud.get_bicycle(self.db, bicycle_id)
            if bike is None:
                raise NotFoundError(f"Bicycle {bicycle_id} not found")
            if bike.owner_id != client.id:
                raise AuthorizationError(f"Bicycle {bicycle_id} does not belong to the user")
            bikes.append(bike)
        return bikes

    async def _pickup_address(self, request: OrderRequest, client: Client) -> dict:
        if request.pickup_address is not None:
            source = request.pickup_address
        else:
            source = await crud.get_address(self.db, request.pickup_address_id)
            if source is None:
                raise NotFoundError(f"Address {request.pickup_address_id} not found")
            if source.owner_id != client.id:
                raise AuthorizationError(f"Address {request.pickup_address_id} does not belong to the user")
        return pickup_fields(source)

    # ── Helpers ──────────────────────────────────────────

    def _target_service_id(self, request: OrderRequest, kind: OrderKind) -> int | None:
        if request.target_service_id is None and kind == OrderKind.SERVICE:
            return self.own_service_id
        return request.target_service_id

    @staticmethod
    def _bikes_count(request: OrderRequest) -> int:
        return len(request.bicycle_ids) or len(request.bicycles)

    async def _notify(self, client: Client, result: CreatedOrders, day: date) -> None:
        if self.notifier is None:
            return
        try:
            await asyncio.to_thread(
                self.notifier.send_order_confirmation,
                client.email, result.order_ids, day, result.order_kind.value,
            )
        except Exception:
            logger.exception("Order confirmation for %s failed", client.email)


def pickup_fields(source) -> dict:
    """Pickup columns from an Address row or an inline address."""
    return {
        "pickup_street": source.street.strip(),
        "pickup_building": source.building.strip(),
        "pickup_apartment": source.apartment,
        "pickup_city": source.city.strip(),
        "pickup_postal_code": source.postal_code,
        "pickup_latitude": source.latitude,
        "pickup_longitude": source.longitude,
    }


def _delivery_fields(service: BikeService) -> dict:
    return {
        "delivery_street": service.street,
        "delivery_building": service.building,
        "delivery_apartment": service.flat,
        "delivery_city": service.city,
        "delivery_postal_code": service.postal_code,
        "delivery_latitude": service.latitude,
        "delivery_longitude": service.longitude,
    }
