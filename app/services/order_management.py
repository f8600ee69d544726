"""Operations on existing orders: status changes, edits, listings, deletion."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db import crud
from app.models import Order, ServiceDetails, Client, OrderStatus, TransportStatus, OrderKind
from app.models.base import utcnow
from app.schemas.order import OrderUpdate
from app.services.actor import Actor
from app.services.availability import SlotAvailabilityCalculator, BookingLocks, booking_locks
from app.services.errors import (
    ValidationError, NotFoundError, AuthorizationError, TransitionError,
)
from app.services.order_factory import address_violations, pickup_fields
from app.services.slot_configs import SlotConfigStore
from app.services.state_machine import (
    can_modify, ensure_transition, ensure_transport_transition, apply_status,
)

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "order_date": Order.order_date,
    "pickup_date": Order.pickup_date,
    "status": Order.status,
    "client": Client.email,
    "price": Order.transport_price,
}


@dataclass
class OrderFilter:
    start_date: date | None = None
    end_date: date | None = None
    status: OrderStatus | None = None
    kind: OrderKind | None = None
    transport_status: TransportStatus | None = None
    package_code: str | None = None
    search: str | None = None  # email or phone fragment


class OrderManager:
    def __init__(self, db: AsyncSession, store: SlotConfigStore, locks: BookingLocks = booking_locks):
        self.db = db
        self.store = store
        self.calculator = SlotAvailabilityCalculator(db, store)
        self.locks = locks

    async def _load(self, order_id: str) -> Order:
        order = await crud.get_order(self.db, order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    async def get(self, order_id: str, actor: Actor) -> Order:
        order = await self._load(order_id)
        if not actor.can_act_for(order.client_id):
            raise AuthorizationError(f"Order {order_id} belongs to another client")
        return order

    async def list_for_client(self, actor: Actor) -> list[Order]:
        return await crud.list_orders_for_client(self.db, actor.client_id)

    # ── Status ───────────────────────────────────────────

    async def update_status(self, order_id: str, target: OrderStatus, actor: Actor) -> Order:
        order = await self.get(order_id, actor)
        if not actor.is_admin and target != OrderStatus.CANCELLED:
            raise AuthorizationError("Only administrators can move an order forward")
        ensure_transition(order.status, target, actor.is_admin)
        if order.status == target:
            return order

        previous = order.status
        apply_status(order, target)
        _touch(order, actor)
        await self.db.commit()
        logger.info("Order %s: %s -> %s by %s", order.id, previous.value, target.value, actor.client_id)
        return order

    async def cancel(self, order_id: str, actor: Actor) -> Order:
        return await self.update_status(order_id, OrderStatus.CANCELLED, actor)

    async def update_transport_status(self, order_id: str, target: TransportStatus, actor: Actor) -> Order:
        order = await self._load(order_id)
        if order.is_terminal:
            raise TransitionError(f"Order {order_id} is {order.status.value}; its transport leg is closed")
        ensure_transport_transition(order.transport_status, target)
        if order.transport_status == target:
            return order

        previous = order.transport_status
        order.transport_status = target
        _touch(order, actor)
        await self.db.commit()
        logger.info("Order %s transport: %s -> %s", order.id, previous.value, target.value)
        return order

    # ── Edits ────────────────────────────────────────────

    async def update_order(self, order_id: str, changes: OrderUpdate, actor: Actor) -> Order:
        order = await self.get(order_id, actor)
        if order.is_terminal:
            raise TransitionError(f"Order {order_id} is {order.status.value} and can no longer be edited")
        if not can_modify(order, actor.is_admin):
            raise AuthorizationError(f"Order {order_id} can no longer be edited")

        violations = []
        if changes.pickup_date is not None and changes.pickup_date < self.store.today():
            violations.append("pickup_date cannot be in the past")
        if changes.transport_price is not None and changes.transport_price < 0:
            violations.append("transport_price cannot be negative")
        if changes.pickup_address is not None:
            violations.extend(address_violations(changes.pickup_address))
        if not order.is_service_order and (changes.service_package_id is not None or changes.service_notes is not None):
            violations.append("only service orders have a service package")
        if violations:
            raise ValidationError(violations)

        package = None
        if changes.service_package_id is not None:
            package = await crud.get_service_package(self.db, changes.service_package_id)
            if package is None:
                raise NotFoundError(f"Service package {changes.service_package_id} not found")
            if not package.active:
                raise ValidationError([f"service package {package.code} is not active"])

        if changes.pickup_date is not None and changes.pickup_date != order.pickup_date:
            async with self.locks.for_date(changes.pickup_date):
                if not await self.calculator.has_capacity(changes.pickup_date, 1):
                    raise ValidationError([f"no pickup slots left on {changes.pickup_date.isoformat()}"])
                order.pickup_date = changes.pickup_date
                self._apply_fields(order, changes, package)
                _touch(order, actor)
                await self.db.commit()
        else:
            self._apply_fields(order, changes, package)
            _touch(order, actor)
            await self.db.commit()

        logger.info("Order %s edited by %s", order.id, actor.client_id)
        return order

    @staticmethod
    def _apply_fields(order: Order, changes: OrderUpdate, package) -> None:
        if changes.pickup_address is not None:
            for name, value in pickup_fields(changes.pickup_address).items():
                setattr(order, name, value)
        if changes.transport_price is not None:
            order.transport_price = changes.transport_price
        if changes.transport_notes is not None:
            order.transport_notes = changes.transport_notes
        if changes.additional_notes is not None:
            order.additional_notes = changes.additional_notes
        if package is not None:
            order.service.service_package_id = package.id
            order.service.service_package_code = package.code
            order.service.service_price = package.price
        if changes.service_notes is not None:
            order.service.service_notes = changes.service_notes

    async def update_service_notes(self, order_id: str, notes: str, actor: Actor) -> Order:
        order = await self._load(order_id)
        if order.is_terminal:
            raise TransitionError(f"Order {order_id} is {order.status.value} and can no longer be edited")
        if order.service is None:
            raise ValidationError([f"order {order_id} is not a service order"])
        order.service.service_notes = notes
        _touch(order, actor)
        await self.db.commit()
        return order

    async def delete(self, order_id: str) -> None:
        """Administrative hard delete; the only way a terminal order changes."""
        order = await self._load(order_id)
        await self.db.delete(order)
        await self.db.commit()
        logger.info("Deleted order %s (%s)", order_id, order.status.value)

    # ── Admin listing ────────────────────────────────────

    async def search(
        self,
        filters: OrderFilter,
        sort: str = "order_date",
        descending: bool = True,
        page: int = 0,
        size: int = 20,
    ) -> tuple[list[Order], int]:
        if sort not in SORT_COLUMNS:
            raise ValidationError([f"cannot sort by {sort}; use one of {', '.join(SORT_COLUMNS)}"])

        query = select(Order).join(Client, Order.client_id == Client.id)
        if filters.package_code:
            query = query.join(ServiceDetails, ServiceDetails.order_id == Order.id).where(
                ServiceDetails.service_package_code == filters.package_code
            )
        if filters.start_date:
            query = query.where(Order.pickup_date >= filters.start_date)
        if filters.end_date:
            query = query.where(Order.pickup_date <= filters.end_date)
        if filters.status:
            query = query.where(Order.status == filters.status)
        if filters.kind:
            query = query.where(Order.kind == filters.kind)
        if filters.transport_status:
            query = query.where(Order.transport_status == filters.transport_status)
        if filters.search:
            pattern = f"%{filters.search.strip().lower()}%"
            query = query.where(or_(func.lower(Client.email).like(pattern), Client.phone.like(pattern)))

        total = (await self.db.execute(select(func.count()).select_from(query.subquery()))).scalar_one()

        column = SORT_COLUMNS[sort]
        query = query.order_by(column.desc() if descending else column.asc(), Order.id)
        result = await self.db.execute(query.offset(page * size).limit(size))
        return list(result.scalars().all()), total


def _touch(order: Order, actor: Actor) -> None:
    order.last_modified_by = actor.client_id
    order.last_modified_date = utcnow()
