import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional

from src.application.identifiers import new_record_id
from src.domain.models import Product, ProductCategory
from src.domain.pricing import PriceBreakdown, calculate_price, price_breakdown
from src.infrastructure.acl import ProductTranslator
from src.infrastructure.repositories import JsonProductRepository

logger = logging.getLogger(__name__)


class ProductService:
    """Product catalog operations on top of the cached product repository."""

    def __init__(self, product_repository: JsonProductRepository):
        self.product_repository = product_repository

    @staticmethod
    def new_product(kind: str, name: str, acquisition_price: float, product_id: Optional[str] = None, **details: Any) -> Product:
        """
        Builds a product of the given kind ('food', 'electronic' or 'clothing').
        A fresh id is generated unless one is given (edits keep the old id).
        """
        return ProductTranslator.to_domain({
            "type": kind,
            "id": product_id or new_record_id(),
            "name": name,
            "acquisition_price": acquisition_price,
            **details,
        })

    def get_all_products(self) -> List[Product]:
        return self.product_repository.get_all()

    def get_product_by_id(self, product_id: str) -> Optional[Product]:
        return self.product_repository.get_by_id(product_id)

    def add_product(self, product: Product) -> None:
        self.product_repository.add(product)
        logger.info(f"Added product {product.id} ({product.kind}).")

    def edit_product(self, product: Product) -> None:
        """Replaces the stored product that has the same id."""
        self.product_repository.update(product)
        logger.info(f"Replaced product {product.id}.")

    def remove_product(self, product_id: str) -> None:
        self.product_repository.remove(product_id)
        logger.info(f"Removed product {product_id}.")

    def get_products_by_category(self, category: ProductCategory) -> List[Product]:
        return [p for p in self.product_repository.get_all() if p.category == category]

    def get_price(self, product: Product, now: Optional[datetime] = None) -> int:
        return calculate_price(product, now)

    def get_price_breakdown(self, product: Product, now: Optional[datetime] = None) -> PriceBreakdown:
        return price_breakdown(product, now)

    def calculate_total_price(self, product_ids: Iterable[str], now: Optional[datetime] = None) -> int:
        """Sum of final prices; ids with no matching product are skipped."""
        total = 0
        for product_id in product_ids:
            product = self.product_repository.get_by_id(product_id)
            if product is not None:
                total += calculate_price(product, now)
        return total
