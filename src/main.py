import argparse
import asyncio
import logging
import sys

import aiohttp
from aiohttp import web

from src.config import Settings, load_settings
from src.container import build_container
from src.domain.pricing import calculate_price
from src.infrastructure.api_client import CatalogApiClient
from src.infrastructure.rest_api import create_app

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def serve(settings: Settings) -> None:
    logger.info(f"Serving catalogs from {settings.data_dir.resolve()}")
    web.run_app(create_app(settings.data_dir), host=settings.api_host, port=settings.api_port)


async def summary(settings: Settings) -> None:
    """Loads every catalog through the cached repositories and prints it."""
    async with aiohttp.ClientSession() as session:
        container = build_container(CatalogApiClient(session, settings.api_base_url))
        await container.wait_loaded()

        print("== Products ==")
        for product in container.product_service.get_all_products():
            print(f"{product.get_info()} | {product.describe()} | price: {calculate_price(product)}")

        print("\n== Parking ==")
        for record in container.parking_service.get_all_records():
            state = "parked" if record.is_active() else f"left, fee {record.fee_charged:g}"
            print(f"{record.vehicle_plate} ({record.vehicle_type.value}) {record.duration_hours()}h {state}")

        print("\n== Birds ==")
        for bird in container.bird_service.get_all_birds():
            print(f"{bird.name} ({bird.species}): {'; '.join(bird.abilities())}")


def main() -> None:
    parser = argparse.ArgumentParser(description="SOLID catalogs: products, parking and birds.")
    parser.add_argument("command", choices=["serve", "summary"], nargs="?", default="serve")
    args = parser.parse_args()

    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        if args.command == "serve":
            serve(settings)
        else:
            asyncio.run(summary(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user. Exiting gracefully.")
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
