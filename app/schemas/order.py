from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from app.models import OrderStatus, TransportStatus, OrderKind


class BicycleInput(BaseModel):
    brand: str = ""
    model: str = ""
    type: str = ""


class AddressInput(BaseModel):
    street: str = ""
    building: str = ""
    apartment: str | None = None
    city: str = ""
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class OrderRequest(BaseModel):
    """Unified order request for registered users and guests.

    Registered users send ``user_id``; guests send ``email``/``phone`` and
    describe their bicycles and pickup address inline.
    """

    user_id: str | None = None
    email: str | None = None
    phone: str | None = None
    first_name: str = ""
    last_name: str = ""

    bicycle_ids: list[str] = []
    bicycles: list[BicycleInput] = []

    pickup_address_id: str | None = None
    pickup_address: AddressInput | None = None
    pickup_date: date | None = None

    service_package_id: int | None = None
    target_service_id: int | None = None
    transport_price: Decimal | None = None

    transport_notes: str | None = None
    additional_notes: str | None = None
    service_notes: str | None = None


class GuestOrderRequest(BaseModel):
    email: str
    phone: str
    first_name: str = ""
    last_name: str = ""
    bicycles: list[BicycleInput] = []
    pickup_address: AddressInput | None = None
    pickup_date: date | None = None
    service_package_id: int | None = None
    target_service_id: int | None = None
    additional_notes: str | None = None
    service_notes: str | None = None

    def to_order_request(self) -> OrderRequest:
        return OrderRequest(**self.model_dump())


class CreatedOrdersRead(BaseModel):
    order_ids: list[str]
    order_count: int
    order_kind: OrderKind
    guest_client_id: str | None = None


class StatusUpdate(BaseModel):
    status: OrderStatus


class TransportStatusUpdate(BaseModel):
    transport_status: TransportStatus


class ServiceNotesUpdate(BaseModel):
    service_notes: str = Field(default="", max_length=1000)


class OrderUpdate(BaseModel):
    """Editable fields; omitted fields stay unchanged."""

    pickup_date: date | None = None
    pickup_address: AddressInput | None = None
    transport_price: Decimal | None = None
    transport_notes: str | None = None
    additional_notes: str | None = None
    service_package_id: int | None = None
    service_notes: str | None = None


class TransportQuoteRequest(BaseModel):
    bikes_count: int = Field(gt=0)
    target_service_id: int | None = None


class TransportQuoteRead(BaseModel):
    base_cost: Decimal
    additional_bikes: Decimal
    discount: Decimal
    transport_cost: Decimal
    per_bicycle: Decimal
    currency: str

    model_config = {"from_attributes": True}


class ServiceDetailsRead(BaseModel):
    service_package_id: int
    service_package_code: str
    service_price: Decimal
    service_notes: str | None = None
    service_start_date: datetime | None = None
    service_completion_date: datetime | None = None

    model_config = {"from_attributes": True}


class OrderRead(BaseModel):
    id: str
    kind: OrderKind
    status: OrderStatus
    transport_status: TransportStatus
    order_date: datetime
    client_id: str
    bicycle_id: str
    pickup_date: date
    pickup_address: str
    target_service_id: int
    transport_price: Decimal
    total_price: Decimal
    estimated_time: int | None = None
    actual_pickup_time: datetime | None = None
    actual_delivery_time: datetime | None = None
    transport_notes: str | None = None
    additional_notes: str | None = None
    last_modified_by: str | None = None
    last_modified_date: datetime | None = None
    service: ServiceDetailsRead | None = None

    model_config = {"from_attributes": True}


class OrderPage(BaseModel):
    items: list[OrderRead]
    total: int
    page: int
    size: int
