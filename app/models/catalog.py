"""Read-mostly catalogue rows: bicycles, destination services, service packages.

Bike services and packages keep integer ids because the own-service
sentinel is addressed by a conventional id (``orders.own_service_id``).
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import String, Integer, Boolean, Float, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin


class Bicycle(Base, ULIDMixin):
    __tablename__ = "bicycles"

    owner_id: Mapped[str] = mapped_column(String(26), ForeignKey("clients.id"), index=True)
    brand: Mapped[str] = mapped_column(String(100))
    model: Mapped[str] = mapped_column(String(100), default="")
    type: Mapped[str] = mapped_column(String(100), default="")


class BikeService(Base):
    __tablename__ = "bike_services"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255))
    street: Mapped[str] = mapped_column(String(255), default="")
    building: Mapped[str] = mapped_column(String(20), default="")
    flat: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    city: Mapped[str] = mapped_column(String(100), default="")
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)


class ServicePackage(Base):
    __tablename__ = "service_packages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    active: Mapped[bool] = mapped_column(Boolean, default=True)
