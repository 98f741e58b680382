from datetime import datetime
from typing import Iterable, Optional

from src.domain.models import Product
from src.domain.pricing import calculate_price


class PriceCalculator:
    """Discounts and ad-hoc taxes on top of a product's final price."""

    def calculate_with_discount(self, product: Product, discount_percentage: float, now: Optional[datetime] = None) -> float:
        price = calculate_price(product, now)
        discount = price * discount_percentage / 100
        return max(price - discount, 0)

    def calculate_bulk_discount(self, products: Iterable[Product], bulk_discount_percentage: float, now: Optional[datetime] = None) -> float:
        total = sum(calculate_price(product, now) for product in products)
        discount = total * bulk_discount_percentage / 100
        return max(total - discount, 0)

    def calculate_tax(self, price: float, tax_percentage: float) -> float:
        return price * (1 + tax_percentage / 100)
