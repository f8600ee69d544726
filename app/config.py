"""Application configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

from decimal import Decimal

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml() -> dict:
    if _CONFIG_PATH.exists():
        with open(_CONFIG_PATH) as f:
            return yaml.safe_load(f) or {}
    return {}


_yaml = _load_yaml()


class SlotsConfig(BaseSettings):
    # Fallback capacity used for dates no administrator config covers
    default_max_bikes_per_day: int = 5
    default_max_bikes_per_order: int = 3
    max_range_days: int = 366
    seed_default_on_startup: bool = False


class OrdersConfig(BaseSettings):
    own_service_id: int = 1
    default_estimated_minutes: int = 60


class PricingConfig(BaseSettings):
    base_cost: Decimal = Decimal("30.00")
    per_additional_bike: Decimal = Decimal("15.00")
    own_service_multiplier: Decimal = Decimal("0.9")
    currency: str = "PLN"


class EmailConfig(BaseSettings):
    resend_api_key: str = ""
    from_address: str = "Bike Transport <noreply@example.com>"
    app_url: str = "http://localhost:8000"


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/bike_transport.db"
    log_level: str = "INFO"
    slots: SlotsConfig = Field(default_factory=SlotsConfig)
    orders: OrdersConfig = Field(default_factory=OrdersConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    email: EmailConfig = Field(default_factory=EmailConfig)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


def get_settings() -> Settings:
    """Build Settings by merging YAML defaults with env overrides."""
    y = _yaml
    slots = SlotsConfig(**y.get("slots", {}))
    orders = OrdersConfig(**y.get("orders", {}))
    pricing = PricingConfig(**y.get("pricing", {}))
    email = EmailConfig(**y.get("email", {}))
    db_url = y.get("database", {}).get("url", "sqlite+aiosqlite:///data/bike_transport.db")
    return Settings(
        database_url=db_url,
        log_level=y.get("log_level", "INFO"),
        slots=slots,
        orders=orders,
        pricing=pricing,
        email=email,
    )
