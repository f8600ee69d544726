"""Order lifecycle enumerations.

These are the only representation of a status inside the service layer;
strings are parsed into them at the HTTP boundary.
"""

from __future__ import annotations

import enum


class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PICKED_UP = "PICKED_UP"
    IN_SERVICE = "IN_SERVICE"
    COMPLETED = "COMPLETED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class TransportStatus(str, enum.Enum):
    PENDING = "PENDING"
    PICKED_UP = "PICKED_UP"
    IN_TRANSIT = "IN_TRANSIT"
    DELIVERED_TO_SERVICE = "DELIVERED_TO_SERVICE"
    PICKED_UP_FROM_SERVICE = "PICKED_UP_FROM_SERVICE"
    COMPLETED = "COMPLETED"


class OrderKind(str, enum.Enum):
    TRANSPORT = "transport"
    SERVICE = "service"


class ActorKind(str, enum.Enum):
    USER = "user"
    GUEST = "guest"


class ClientKind(str, enum.Enum):
    REGISTERED = "registered"
    GUEST = "guest"


class ClientRole(str, enum.Enum):
    CLIENT = "client"
    ADMIN = "admin"
