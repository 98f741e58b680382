from dataclasses import dataclass
from typing import Optional

from src.application.bird_service import BirdService
from src.application.parking_service import ParkingService
from src.application.price_calculator import PriceCalculator
from src.application.product_service import ProductService
from src.domain.strategies import ParkingRateStrategy, StandardRateStrategy
from src.infrastructure.api_client import CatalogApiClient
from src.infrastructure.repositories import (
    JsonBirdRepository, JsonParkingRepository, JsonProductRepository,
)


@dataclass
class Container:
    product_service: ProductService
    parking_service: ParkingService
    bird_service: BirdService
    price_calculator: PriceCalculator

    async def wait_loaded(self) -> None:
        await self.product_service.product_repository.wait_loaded()
        await self.parking_service.parking_repository.wait_loaded()
        await self.bird_service.bird_repository.wait_loaded()

    async def flush(self) -> None:
        await self.product_service.product_repository.flush()
        await self.parking_service.parking_repository.flush()
        await self.bird_service.bird_repository.flush()


def build_container(client: CatalogApiClient, rate_strategy: Optional[ParkingRateStrategy] = None) -> Container:
    """
    Wires repositories into services. Must be called inside a running event
    loop so each repository starts loading its catalog right away.
    """
    return Container(
        product_service=ProductService(JsonProductRepository(client)),
        parking_service=ParkingService(JsonParkingRepository(client), rate_strategy or StandardRateStrategy()),
        bird_service=BirdService(JsonBirdRepository(client)),
        price_calculator=PriceCalculator(),
    )
