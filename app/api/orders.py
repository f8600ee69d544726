from __future__ import annotations

from fastapi import APIRouter, Depends

from app.dependencies import require_actor, get_order_factory, get_order_manager, get_price_calculator
from app.schemas import (
    OrderRequest, CreatedOrdersRead, OrderRead, StatusUpdate, OrderUpdate,
    TransportQuoteRequest, TransportQuoteRead,
)
from app.services.actor import Actor
from app.services.order_factory import OrderFactory
from app.services.order_management import OrderManager
from app.services.pricing import PriceCalculator

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=CreatedOrdersRead, status_code=201)
async def create_orders(
    body: OrderRequest,
    actor: Actor = Depends(require_actor),
    factory: OrderFactory = Depends(get_order_factory),
):
    return await factory.create(body, actor)


@router.get("", response_model=list[OrderRead])
async def list_my_orders(
    actor: Actor = Depends(require_actor),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.list_for_client(actor)


@router.post("/transport-cost", response_model=TransportQuoteRead)
async def transport_cost(
    body: TransportQuoteRequest,
    pricing: PriceCalculator = Depends(get_price_calculator),
):
    return pricing.transport_quote(body.bikes_count, body.target_service_id)


@router.get("/{order_id}", response_model=OrderRead)
async def get_order(
    order_id: str,
    actor: Actor = Depends(require_actor),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.get(order_id, actor)


@router.put("/{order_id}", response_model=OrderRead)
async def update_order(
    order_id: str,
    body: OrderUpdate,
    actor: Actor = Depends(require_actor),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.update_order(order_id, body, actor)


@router.patch("/{order_id}/status", response_model=OrderRead)
async def update_status(
    order_id: str,
    body: StatusUpdate,
    actor: Actor = Depends(require_actor),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.update_status(order_id, body.status, actor)


@router.post("/{order_id}/cancel", response_model=OrderRead)
async def cancel_order(
    order_id: str,
    actor: Actor = Depends(require_actor),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.cancel(order_id, actor)
