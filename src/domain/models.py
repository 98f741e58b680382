import math
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Annotated, ClassVar, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from src.domain.exceptions import ParkingRecordClosedException

if TYPE_CHECKING:
    from src.domain.strategies import ParkingRateStrategy

# Fixed 20% profit margin applied on top of the acquisition price
PROFIT_MULTIPLIER = 1.20
SECONDS_PER_HOUR = 60 * 60


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Naive timestamps coming from the JSON files are read as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CatalogModel(BaseModel):
    """
    Base for every persisted entity.
    Fields are snake_case in Python and camelCase on the wire.
    """
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ProductCategory(str, Enum):
    FOOD = "Food"
    ELECTRONICS = "Electronics"
    CLOTHING = "Clothing"


class Product(CatalogModel):
    """
    Immutable product record. Each variant carries an explicit `kind` tag,
    serialized as `type`, so (de)serialization is a dispatch on the tag.
    Edits are done by replacing the whole record.
    """
    TAX_RATE: ClassVar[float] = 0.0

    id: str = Field(..., description="Unique product identifier")
    name: str = Field(..., description="Display name")
    acquisition_price: float = Field(..., ge=0, description="Cost basis before markup and tax")
    category: ProductCategory

    @model_validator(mode="before")
    @classmethod
    def _category_follows_variant(cls, data):
        # Each variant owns its category; whatever the input says is dropped
        if isinstance(data, dict) and "category" in data:
            data = {key: value for key, value in data.items() if key != "category"}
        return data

    @property
    def tax_rate(self) -> float:
        return self.TAX_RATE

    def base_price_with_profit(self) -> float:
        return self.acquisition_price * PROFIT_MULTIPLIER

    def get_info(self) -> str:
        return f"{self.name} - Category: {self.category.value}"

    def describe(self) -> str:
        return ""


class FoodProduct(Product):
    TAX_RATE: ClassVar[float] = 0.05

    kind: Literal["food"] = Field("food", alias="type")
    category: ProductCategory = ProductCategory.FOOD
    expiration_date: Optional[datetime] = None

    @field_validator("expiration_date")
    @classmethod
    def _expiration_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    def describe(self) -> str:
        if self.expiration_date is None:
            return "No expiration date"
        return f"Expires: {self.expiration_date.date().isoformat()}"


class ElectronicProduct(Product):
    TAX_RATE: ClassVar[float] = 0.19

    kind: Literal["electronic"] = Field("electronic", alias="type")
    category: ProductCategory = ProductCategory.ELECTRONICS
    warranty_months: int = Field(12, ge=0)
    brand: str = "Generic"

    def describe(self) -> str:
        return f"Warranty: {self.warranty_months} months - Brand: {self.brand}"


class ClothingProduct(Product):
    TAX_RATE: ClassVar[float] = 0.10

    kind: Literal["clothing"] = Field("clothing", alias="type")
    category: ProductCategory = ProductCategory.CLOTHING
    size: str = "M"
    material: str = "Cotton"

    def describe(self) -> str:
        return f"Size: {self.size} - Material: {self.material}"


AnyProduct = Annotated[
    Union[FoodProduct, ElectronicProduct, ClothingProduct],
    Field(discriminator="kind"),
]


class VehicleType(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"


class ParkingRecord(CatalogModel):
    """
    One stay of a vehicle in the parking lot.
    Created on entry with no exit and no fee; closed exactly once on exit.
    """
    id: str = Field(..., description="Unique record identifier")
    vehicle_plate: str
    entry_time: datetime
    vehicle_type: VehicleType
    exit_time: Optional[datetime] = None
    fee_charged: Optional[float] = Field(None, ge=0)

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _timestamps_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_exit(self) -> "ParkingRecord":
        if self.exit_time is not None and self.exit_time < self.entry_time:
            raise ValueError("exitTime must not be earlier than entryTime")
        if (self.exit_time is None) != (self.fee_charged is None):
            raise ValueError("feeCharged must be set exactly when exitTime is set")
        return self

    def is_active(self) -> bool:
        return self.exit_time is None

    def duration_hours(self, now: Optional[datetime] = None) -> int:
        """
        Whole hours parked, rounded up. While the vehicle is still parked
        `now` (default: current time) stands in for the exit time.
        """
        end = self.exit_time or ensure_utc(now) or datetime.now(timezone.utc)
        return math.ceil((end - self.entry_time).total_seconds() / SECONDS_PER_HOUR)

    def close(self, exit_time: datetime, rate_strategy: "ParkingRateStrategy") -> "ParkingRecord":
        """Returns the closed record, with the fee computed by `rate_strategy`."""
        if not self.is_active():
            raise ParkingRecordClosedException(self.id)

        exit_time = ensure_utc(exit_time)
        fee = rate_strategy.fee_for(self.vehicle_type, self.duration_hours(now=exit_time))
        return ParkingRecord(
            id=self.id,
            vehicle_plate=self.vehicle_plate,
            entry_time=self.entry_time,
            vehicle_type=self.vehicle_type,
            exit_time=exit_time,
            fee_charged=fee,
        )
