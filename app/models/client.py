"""Actor records: registered clients and guests known only by contact info."""

from __future__ import annotations

from sqlalchemy import String, Enum, Float, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, ULIDMixin
from app.models.enums import ClientKind, ClientRole


class Client(Base, ULIDMixin):
    __tablename__ = "clients"

    kind: Mapped[ClientKind] = mapped_column(Enum(ClientKind, native_enum=False, length=20))
    role: Mapped[ClientRole] = mapped_column(
        Enum(ClientRole, native_enum=False, length=20), default=ClientRole.CLIENT
    )
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str] = mapped_column(String(50), default="")
    first_name: Mapped[str] = mapped_column(String(100), default="")
    last_name: Mapped[str] = mapped_column(String(100), default="")

    @property
    def is_guest(self) -> bool:
        return self.kind == ClientKind.GUEST


class Address(Base, ULIDMixin):
    """Saved pickup address of a registered client."""

    __tablename__ = "addresses"

    owner_id: Mapped[str] = mapped_column(String(26), ForeignKey("clients.id"), index=True)
    street: Mapped[str] = mapped_column(String(255))
    building: Mapped[str] = mapped_column(String(20))
    apartment: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    city: Mapped[str] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True, default=None)
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True, default=None)
