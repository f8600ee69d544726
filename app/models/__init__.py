"""SQLAlchemy ORM models."""

from app.models.base import Base
from app.models.enums import (
    OrderStatus, TransportStatus, OrderKind, ActorKind, ClientKind, ClientRole,
)
from app.models.client import Client, Address
from app.models.catalog import Bicycle, BikeService, ServicePackage
from app.models.slot_config import SlotConfig
from app.models.order import Order, ServiceDetails, TERMINAL_STATUSES

__all__ = [
    "Base",
    "OrderStatus", "TransportStatus", "OrderKind", "ActorKind", "ClientKind", "ClientRole",
    "Client", "Address",
    "Bicycle", "BikeService", "ServicePackage",
    "SlotConfig",
    "Order", "ServiceDetails", "TERMINAL_STATUSES",
]
