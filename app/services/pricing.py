"""Transport pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from app.config import PricingConfig

CENTS = Decimal("0.01")


def _round(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TransportQuote:
    base_cost: Decimal
    additional_bikes: Decimal
    discount: Decimal
    transport_cost: Decimal
    per_bicycle: Decimal
    currency: str


class PriceCalculator:
    def __init__(self, pricing: PricingConfig, own_service_id: int):
        self.pricing = pricing
        self.own_service_id = own_service_id

    def _gross(self, bikes_count: int) -> tuple[Decimal, Decimal]:
        additional = self.pricing.per_additional_bike * max(0, bikes_count - 1)
        return self.pricing.base_cost, additional

    def transport_price(
        self,
        bikes_count: int,
        supplied_price: Decimal | None = None,
        target_service_id: int | None = None,
    ) -> Decimal:
        """A positive supplied price wins; otherwise base + per extra bike, discounted for our own shop."""
        if supplied_price is not None and supplied_price > 0:
            return supplied_price
        base, additional = self._gross(bikes_count)
        total = base + additional
        if target_service_id == self.own_service_id:
            total = total * self.pricing.own_service_multiplier
        return _round(total)

    def transport_quote(self, bikes_count: int, target_service_id: int | None = None) -> TransportQuote:
        base, additional = self._gross(bikes_count)
        total = self.transport_price(bikes_count, None, target_service_id)
        return TransportQuote(
            base_cost=_round(base),
            additional_bikes=_round(additional),
            discount=_round(base + additional - total),
            transport_cost=total,
            per_bicycle=split_per_bicycle(total, bikes_count),
            currency=self.pricing.currency,
        )


def split_per_bicycle(total: Decimal, bikes_count: int) -> Decimal:
    """Half of the per-bike share, rounded half-up to cents, then doubled.

    Differs from ``total / bikes_count`` by a cent on some odd totals;
    100.00 over 3 bikes gives 33.34.
    """
    if bikes_count <= 0:
        raise ValueError("bikes_count must be positive")
    half = _round(total / (2 * bikes_count))
    return half * 2
