"""Central router that includes all sub-routers."""

from fastapi import APIRouter

from app.api.orders import router as orders_router
from app.api.guest import router as guest_router
from app.api.slots import router as slots_router
from app.api.admin import router as admin_router

api_router = APIRouter()
api_router.include_router(orders_router)
api_router.include_router(guest_router)
api_router.include_router(slots_router)
api_router.include_router(admin_router)
