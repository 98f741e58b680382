from typing import Any, Dict, List

from pydantic import TypeAdapter

from src.domain.birds import Bird
from src.domain.models import AnyProduct, ParkingRecord, Product

_product_adapter: TypeAdapter[Product] = TypeAdapter(AnyProduct)


class ProductTranslator:
    """
    Anti-corruption layer between the JSON product records and the product variants.
    The `type` field selects the variant.
    """

    @staticmethod
    def to_domain(raw: Dict[str, Any]) -> Product:
        """
        Builds the product variant named by raw['type'].

        Raises:
            pydantic.ValidationError: If the tag is unknown or a field is invalid.
        """
        return _product_adapter.validate_python(raw)

    @staticmethod
    def to_payload(product: Product) -> Dict[str, Any]:
        return product.model_dump(mode="json", by_alias=True, exclude_none=True)

    @classmethod
    def normalize(cls, raw_records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Round-trips every record through the domain so defaults are filled in."""
        return [cls.to_payload(cls.to_domain(raw)) for raw in raw_records]


class ParkingTranslator:
    """Translates JSON parking records; exitTime and feeCharged stay explicit nulls."""

    @staticmethod
    def to_domain(raw: Dict[str, Any]) -> ParkingRecord:
        return ParkingRecord.model_validate(raw)

    @staticmethod
    def to_payload(record: ParkingRecord) -> Dict[str, Any]:
        return record.model_dump(mode="json", by_alias=True)


class BirdTranslator:
    """Capabilities travel as a mapping keyed by capability name (canFly, canSwim, ...)."""

    @staticmethod
    def to_domain(raw: Dict[str, Any]) -> Bird:
        return Bird.model_validate(raw)

    @staticmethod
    def to_payload(bird: Bird) -> Dict[str, Any]:
        return bird.model_dump(mode="json", exclude_none=True)
