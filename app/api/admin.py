"""Administrator endpoints: capacity configs and order back office."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query

from app.dependencies import require_admin, get_slot_store, get_order_manager
from app.models import OrderStatus, TransportStatus, OrderKind
from app.schemas import (
    SlotConfigWrite, SlotConfigRead, OrderRead, OrderPage,
    TransportStatusUpdate, ServiceNotesUpdate,
)
from app.services.actor import Actor
from app.services.order_management import OrderManager, OrderFilter
from app.services.slot_configs import SlotConfigStore, SlotConfigData

router = APIRouter(prefix="/api/admin", tags=["admin"])


# ── Slot configs ─────────────────────────────────────────

@router.get("/slot-configs", response_model=list[SlotConfigRead])
async def list_slot_configs(
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.list_all()


@router.get("/slot-configs/active", response_model=list[SlotConfigRead])
async def list_active_slot_configs(
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.list_active()


@router.get("/slot-configs/future", response_model=list[SlotConfigRead])
async def list_future_slot_configs(
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.list_future()


@router.get("/slot-configs/{config_id}", response_model=SlotConfigRead)
async def get_slot_config(
    config_id: str,
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.get(config_id)


@router.post("/slot-configs", response_model=SlotConfigRead, status_code=201)
async def create_slot_config(
    body: SlotConfigWrite,
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.create(SlotConfigData(**body.model_dump()))


@router.put("/slot-configs/{config_id}", response_model=SlotConfigRead)
async def update_slot_config(
    config_id: str,
    body: SlotConfigWrite,
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    return await store.update(config_id, SlotConfigData(**body.model_dump()))


@router.delete("/slot-configs/{config_id}", status_code=204)
async def delete_slot_config(
    config_id: str,
    admin: Actor = Depends(require_admin),
    store: SlotConfigStore = Depends(get_slot_store),
):
    await store.delete(config_id)


# ── Orders ───────────────────────────────────────────────

@router.get("/orders", response_model=OrderPage)
async def list_orders(
    start_date: date | None = None,
    end_date: date | None = None,
    status: OrderStatus | None = None,
    kind: OrderKind | None = None,
    transport_status: TransportStatus | None = None,
    package_code: str | None = None,
    search: str | None = None,
    sort: str = "order_date",
    direction: str = Query(default="desc", pattern="^(asc|desc)$"),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=20, ge=1, le=200),
    admin: Actor = Depends(require_admin),
    manager: OrderManager = Depends(get_order_manager),
):
    filters = OrderFilter(
        start_date=start_date, end_date=end_date, status=status, kind=kind,
        transport_status=transport_status, package_code=package_code, search=search,
    )
    items, total = await manager.search(filters, sort, direction == "desc", page, size)
    return OrderPage(
        items=[OrderRead.model_validate(o) for o in items], total=total, page=page, size=size,
    )


@router.patch("/orders/{order_id}/transport-status", response_model=OrderRead)
async def update_transport_status(
    order_id: str,
    body: TransportStatusUpdate,
    admin: Actor = Depends(require_admin),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.update_transport_status(order_id, body.transport_status, admin)


@router.put("/orders/{order_id}/service-notes", response_model=OrderRead)
async def update_service_notes(
    order_id: str,
    body: ServiceNotesUpdate,
    admin: Actor = Depends(require_admin),
    manager: OrderManager = Depends(get_order_manager),
):
    return await manager.update_service_notes(order_id, body.service_notes, admin)


@router.delete("/orders/{order_id}", status_code=204)
async def delete_order(
    order_id: str,
    admin: Actor = Depends(require_admin),
    manager: OrderManager = Depends(get_order_manager),
):
    await manager.delete(order_id)
