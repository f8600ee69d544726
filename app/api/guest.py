"""Unauthenticated order placement; guests are identified by email."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import get_order_factory
from app.schemas import GuestOrderRequest, CreatedOrdersRead
from app.services.order_factory import OrderFactory

router = APIRouter(prefix="/api/guest", tags=["guest"])


@router.post("/orders", response_model=CreatedOrdersRead, status_code=201)
async def create_guest_orders(
    body: GuestOrderRequest,
    factory: OrderFactory = Depends(get_order_factory),
):
    return await factory.create(body.to_order_request())
