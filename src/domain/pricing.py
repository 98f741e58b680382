"""
Final sale price of a product.

price = acquisition * 1.20 * (1 + category tax), then the variant rule:
  food        30% markdown when it expires within the next 3 days
  electronic  5% surcharge for warranties longer than 12 months
  clothing    none
The result is rounded half-up to a whole amount.
"""
import math
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict

from src.domain.models import (
    ClothingProduct, ElectronicProduct, FoodProduct, Product, ensure_utc,
)

EXPIRY_MARKDOWN_DAYS = 3
EXPIRY_MARKDOWN_MULTIPLIER = 0.70
EXTENDED_WARRANTY_MONTHS = 12
EXTENDED_WARRANTY_MULTIPLIER = 1.05
SECONDS_PER_DAY = 24 * 60 * 60


class PriceBreakdown(BaseModel):
    """How a product's final price is built up, as shown on a product card."""
    model_config = ConfigDict(frozen=True)

    acquisition_price: float
    profit: float
    tax_rate: float
    tax: float
    final_price: int


def round_half_up(value: float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def days_until(moment: datetime, now: Optional[datetime] = None) -> int:
    """Days left until `moment`, rounded up. Zero or negative once it has passed."""
    now = ensure_utc(now) or datetime.now(timezone.utc)
    return math.ceil((ensure_utc(moment) - now).total_seconds() / SECONDS_PER_DAY)


def _food_adjustment(product: FoodProduct, price: float, now: Optional[datetime]) -> float:
    if product.expiration_date is None:
        return price
    if 0 < days_until(product.expiration_date, now) <= EXPIRY_MARKDOWN_DAYS:
        return price * EXPIRY_MARKDOWN_MULTIPLIER
    return price


def _electronic_adjustment(product: ElectronicProduct, price: float, now: Optional[datetime]) -> float:
    if product.warranty_months > EXTENDED_WARRANTY_MONTHS:
        return price * EXTENDED_WARRANTY_MULTIPLIER
    return price


def _clothing_adjustment(product: ClothingProduct, price: float, now: Optional[datetime]) -> float:
    return price


VARIANT_ADJUSTMENTS: Dict[str, Callable[[Product, float, Optional[datetime]], float]] = {
    "food": _food_adjustment,
    "electronic": _electronic_adjustment,
    "clothing": _clothing_adjustment,
}


def price_before_rounding(product: Product, now: Optional[datetime] = None) -> float:
    taxed = product.base_price_with_profit() * (1 + product.tax_rate)
    return VARIANT_ADJUSTMENTS[product.kind](product, taxed, now)


def calculate_price(product: Product, now: Optional[datetime] = None) -> int:
    """
    Final sale price of `product`.

    Args:
        product: Any product variant.
        now: Reference time for the expiry markdown. Defaults to the current UTC time.

    Returns:
        int: The price rounded half-up.
    """
    return round_half_up(price_before_rounding(product, now))


def price_breakdown(product: Product, now: Optional[datetime] = None) -> PriceBreakdown:
    with_profit = product.base_price_with_profit()
    final_price = calculate_price(product, now)
    return PriceBreakdown(
        acquisition_price=product.acquisition_price,
        profit=with_profit - product.acquisition_price,
        tax_rate=product.tax_rate,
        tax=final_price - with_profit,
        final_price=final_price,
    )
