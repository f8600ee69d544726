"""Pydantic request/response schemas."""

from app.schemas.slot import SlotConfigWrite, SlotConfigRead, SlotAvailabilityRead
from app.schemas.order import (
    BicycleInput, AddressInput, OrderRequest, GuestOrderRequest, CreatedOrdersRead,
    StatusUpdate, TransportStatusUpdate, ServiceNotesUpdate, OrderUpdate,
    TransportQuoteRequest, TransportQuoteRead, ServiceDetailsRead, OrderRead, OrderPage,
)

__all__ = [
    "SlotConfigWrite", "SlotConfigRead", "SlotAvailabilityRead",
    "BicycleInput", "AddressInput", "OrderRequest", "GuestOrderRequest", "CreatedOrdersRead",
    "StatusUpdate", "TransportStatusUpdate", "ServiceNotesUpdate", "OrderUpdate",
    "TransportQuoteRequest", "TransportQuoteRead", "ServiceDetailsRead", "OrderRead", "OrderPage",
]
