"""
REST persistence boundary: one JSON file per catalog behind aiohttp routes.

  GET    /api/<catalog>      whole collection, [] when the file is missing
  POST   /api/<catalog>      append one record
  PUT    /api/parking        replace the record with the same id (404 if none)
  DELETE /api/products?id=   drop one product (400 without id)
  DELETE /api/birds          clear every bird
"""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from aiohttp import web
from pydantic import ValidationError

from src.infrastructure.acl import ProductTranslator
from src.infrastructure.json_store import JsonFileStore

logger = logging.getLogger(__name__)

STORE_FILES = {
    "products": "products.json",
    "parking": "parking.json",
    "birds": "birds.json",
}

STORES_KEY = web.AppKey("stores", Dict[str, JsonFileStore])


def _store(request: web.Request, catalog: str) -> JsonFileStore:
    return request.app[STORES_KEY][catalog]


def _failure(message: str, status: int) -> web.Response:
    return web.json_response({"success": False, "error": message}, status=status)


async def _read_record(request: web.Request) -> Dict[str, Any]:
    record = await request.json()
    if not isinstance(record, dict):
        raise ValueError("request body must be a JSON object")
    return record


async def list_products(request: web.Request) -> web.Response:
    records = await _store(request, "products").read_all()
    try:
        return web.json_response(ProductTranslator.normalize(records))
    except ValidationError as e:
        logger.warning(f"Product store holds invalid records, serving an empty list: {e}")
        return web.json_response([])


def _list_handler(catalog: str):
    async def list_records(request: web.Request) -> web.Response:
        return web.json_response(await _store(request, catalog).read_all())
    return list_records


def _create_handler(catalog: str, entity_key: str):
    async def create_record(request: web.Request) -> web.Response:
        try:
            record = await _read_record(request)
            store = _store(request, catalog)
            records = await store.read_all()
            records.append(record)
            await store.write_all(records)
        except (ValueError, OSError) as e:
            logger.error(f"Error adding to {catalog}: {e}")
            return _failure(f"Error adding {entity_key}", 500)

        logger.info(f"Added {entity_key} {record.get('id', record.get('name', ''))} to {catalog}.")
        return web.json_response({"success": True, entity_key: record})
    return create_record


async def replace_parking_record(request: web.Request) -> web.Response:
    try:
        updated = await _read_record(request)
        store = _store(request, "parking")
        records = await store.read_all()

        index: Optional[int] = next(
            (i for i, r in enumerate(records) if isinstance(r, dict) and r.get("id") == updated.get("id")),
            None,
        )
        if index is None:
            return _failure("Record not found", 404)

        records[index] = updated
        await store.write_all(records)
    except (ValueError, OSError) as e:
        logger.error(f"Error updating parking record: {e}")
        return _failure("Error updating record", 500)

    return web.json_response({"success": True, "record": updated})


async def delete_product(request: web.Request) -> web.Response:
    product_id = request.query.get("id")
    if not product_id:
        return _failure("Product id not provided", 400)

    try:
        store = _store(request, "products")
        records = await store.read_all()
        remaining = [r for r in records if not (isinstance(r, dict) and r.get("id") == product_id)]
        await store.write_all(remaining)
    except OSError as e:
        logger.error(f"Error deleting product {product_id}: {e}")
        return _failure("Error deleting product", 500)

    logger.info(f"Deleted product {product_id} ({len(records) - len(remaining)} record(s)).")
    return web.json_response({"success": True})


async def clear_birds(request: web.Request) -> web.Response:
    try:
        await _store(request, "birds").write_all([])
    except OSError as e:
        logger.error(f"Error clearing birds: {e}")
        return _failure("Error clearing birds", 500)
    return web.json_response({"success": True})


def create_app(data_dir: Path) -> web.Application:
    """Builds the aiohttp application serving the three catalogs from `data_dir`."""
    app = web.Application()
    app[STORES_KEY] = {
        catalog: JsonFileStore(Path(data_dir) / filename)
        for catalog, filename in STORE_FILES.items()
    }
    app.add_routes([
        web.get("/api/products", list_products),
        web.post("/api/products", _create_handler("products", "product")),
        web.delete("/api/products", delete_product),
        web.get("/api/parking", _list_handler("parking")),
        web.post("/api/parking", _create_handler("parking", "record")),
        web.put("/api/parking", replace_parking_record),
        web.get("/api/birds", _list_handler("birds")),
        web.post("/api/birds", _create_handler("birds", "bird")),
        web.delete("/api/birds", clear_birds),
    ])
    return app
