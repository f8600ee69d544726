"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.db.engine import engine, create_all, async_session_factory
from app.api.router import api_router
from app.services.errors import OrderServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    await create_all()

    if settings.slots.seed_default_on_startup:
        from app.services.slot_configs import SlotConfigStore, DefaultSlotConfig

        async with async_session_factory() as db:
            await SlotConfigStore(db, DefaultSlotConfig.from_settings(settings.slots)).initialize_default()

    yield
    await engine.dispose()


app = FastAPI(
    title="Bike Transport",
    description="Pickup capacity, order placement and order lifecycle for bicycle transport and servicing.",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(OrderServiceError)
async def order_service_error_handler(request: Request, exc: OrderServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# API routes
app.include_router(api_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
