"""Order rows.

Every order is one bicycle moved on one pickup date. ``orders`` carries the
shared core plus the transport leg; service orders add one
``service_order_details`` row keyed by the same id, and ``kind`` says which
of the two shapes a row has.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import String, Integer, Float, Date, DateTime, Numeric, Enum, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, ULIDMixin, utcnow
from app.models.enums import OrderKind, OrderStatus, TransportStatus

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})


class Order(Base, ULIDMixin):
    __tablename__ = "orders"

    kind: Mapped[OrderKind] = mapped_column(Enum(OrderKind, native_enum=False, length=20), index=True)
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, native_enum=False, length=30), default=OrderStatus.PENDING, index=True
    )
    transport_status: Mapped[TransportStatus] = mapped_column(
        Enum(TransportStatus, native_enum=False, length=30), default=TransportStatus.PENDING
    )
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    client_id: Mapped[str] = mapped_column(String(26), ForeignKey("clients.id"), index=True)
    bicycle_id: Mapped[str] = mapped_column(String(26), ForeignKey("bicycles.id"))

    pickup_date: Mapped[date] = mapped_column(Date, index=True)
    pickup_street: Mapped[str] = mapped_column(String(255))
    pickup_building: Mapped[str] = mapped_column(String(20))
    pickup_apartment: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    pickup_city: Mapped[str] = mapped_column(String(100))
    pickup_postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    pickup_latitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    pickup_longitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)

    target_service_id: Mapped[int] = mapped_column(Integer, ForeignKey("bike_services.id"))
    delivery_street: Mapped[str] = mapped_column(String(255), default="")
    delivery_building: Mapped[str] = mapped_column(String(20), default="")
    delivery_apartment: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    delivery_city: Mapped[str] = mapped_column(String(100), default="")
    delivery_postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    delivery_latitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    delivery_longitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)

    transport_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    estimated_time: Mapped[int | None] = mapped_column(Integer, nullable=True, default=None)  # minutes
    actual_pickup_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    actual_delivery_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    transport_notes: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)
    additional_notes: Mapped[str | None] = mapped_column(String(500), nullable=True, default=None)

    last_modified_by: Mapped[str | None] = mapped_column(String(255), nullable=True, default=None)
    last_modified_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)

    client = relationship("Client", lazy="selectin")
    bicycle = relationship("Bicycle", lazy="selectin")
    service = relationship(
        "ServiceDetails", uselist=False, lazy="selectin", cascade="all, delete-orphan",
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_service_order(self) -> bool:
        return self.kind == OrderKind.SERVICE

    @property
    def total_price(self) -> Decimal:
        if self.service is not None:
            return self.transport_price + self.service.service_price
        return self.transport_price

    @property
    def pickup_address(self) -> str:
        line = f"{self.pickup_street} {self.pickup_building}"
        if self.pickup_apartment:
            line += f"/{self.pickup_apartment}"
        line += f", {self.pickup_city}"
        if self.pickup_postal_code:
            line += f" {self.pickup_postal_code}"
        return line


class ServiceDetails(Base):
    """Service refinement of an order; shares the order's primary key."""

    __tablename__ = "service_order_details"

    order_id: Mapped[str] = mapped_column(String(26), ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True)
    service_package_id: Mapped[int] = mapped_column(Integer, ForeignKey("service_packages.id"))
    service_package_code: Mapped[str] = mapped_column(String(50))
    service_price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    service_notes: Mapped[str | None] = mapped_column(String(1000), nullable=True, default=None)
    service_start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
    service_completion_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, default=None)
