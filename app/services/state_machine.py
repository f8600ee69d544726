"""Order lifecycle rules.

Two machines run side by side: the order status, which customers can only
cancel and administrators walk forward one step at a time, and the
transport leg, which tracks the physical pickup and delivery.
"""

from __future__ import annotations

from app.models import Order, OrderStatus, TransportStatus, TERMINAL_STATUSES
from app.models.base import utcnow
from app.services.errors import TransitionError

FORWARD: dict[OrderStatus, OrderStatus] = {
    OrderStatus.PENDING: OrderStatus.CONFIRMED,
    OrderStatus.CONFIRMED: OrderStatus.PICKED_UP,
    OrderStatus.PICKED_UP: OrderStatus.IN_SERVICE,
    OrderStatus.IN_SERVICE: OrderStatus.COMPLETED,
    OrderStatus.COMPLETED: OrderStatus.DELIVERED,
}

TRANSPORT_FORWARD: dict[TransportStatus, TransportStatus] = {
    TransportStatus.PENDING: TransportStatus.PICKED_UP,
    TransportStatus.PICKED_UP: TransportStatus.IN_TRANSIT,
    TransportStatus.IN_TRANSIT: TransportStatus.DELIVERED_TO_SERVICE,
    TransportStatus.DELIVERED_TO_SERVICE: TransportStatus.PICKED_UP_FROM_SERVICE,
    TransportStatus.PICKED_UP_FROM_SERVICE: TransportStatus.COMPLETED,
}

CUSTOMER_CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})
CUSTOMER_MODIFIABLE = CUSTOMER_CANCELLABLE


def can_transition(current: OrderStatus, target: OrderStatus, is_admin: bool) -> bool:
    if not is_admin:
        return target == OrderStatus.CANCELLED and current in CUSTOMER_CANCELLABLE
    if current == target:
        return True
    if current in TERMINAL_STATUSES:
        return False
    if target == OrderStatus.CANCELLED:
        return True
    return FORWARD.get(current) == target


def can_transition_transport(current: TransportStatus, target: TransportStatus) -> bool:
    return current == target or TRANSPORT_FORWARD.get(current) == target


def can_modify(order: Order, is_admin: bool) -> bool:
    """Whether order fields (not only status) may be edited."""
    return is_admin or order.status in CUSTOMER_MODIFIABLE


def ensure_transition(current: OrderStatus, target: OrderStatus, is_admin: bool) -> None:
    if not can_transition(current, target, is_admin):
        raise TransitionError(f"Cannot change status from {current.value} to {target.value}")


def ensure_transport_transition(current: TransportStatus, target: TransportStatus) -> None:
    if not can_transition_transport(current, target):
        raise TransitionError(f"Cannot change transport status from {current.value} to {target.value}")


def apply_status(order: Order, target: OrderStatus) -> None:
    """Set the status and stamp the timestamp that goes with entering it."""
    if order.status == target:
        return
    order.status = target
    now = utcnow()
    if target == OrderStatus.PICKED_UP:
        order.actual_pickup_time = now
    elif target == OrderStatus.DELIVERED:
        order.actual_delivery_time = now
    elif order.service is not None:
        if target == OrderStatus.IN_SERVICE:
            order.service.service_start_date = now
        elif target == OrderStatus.COMPLETED:
            order.service.service_completion_date = now
