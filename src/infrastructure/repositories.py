import asyncio
import functools
import logging
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Dict, Generic, List, Optional, Set, TypeVar

from src.domain.birds import Bird
from src.domain.exceptions import StoreWriteException
from src.domain.models import ParkingRecord, Product
from src.infrastructure.acl import BirdTranslator, ParkingTranslator, ProductTranslator
from src.infrastructure.api_client import CatalogApiClient

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as e:
        raise RuntimeError("Catalog writes need a running event loop.") from e


class CachedCatalogRepository(ABC, Generic[T]):
    """
    Read-through cache over one remote catalog.

    Created inside a running event loop, the repository schedules a full
    fetch of the catalog; reads return an empty list until it lands.
    Mutations change the cache immediately and push the write to the store
    in a background task. The task is returned so callers may await it;
    `flush()` waits for every pending write and reports failures.
    Cache and store are not transactionally linked.
    """

    catalog: str = ""

    def __init__(self, client: CatalogApiClient):
        self.client = client
        self._cache: List[T] = []
        self._pending: Set[asyncio.Task] = set()
        self._failure_count = 0
        self._first_failure: Optional[BaseException] = None
        self._load_task: Optional[asyncio.Task] = None

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop yet: the owner is expected to `await load()` itself
            logger.debug(f"No running loop, /api/{self.catalog} will not be preloaded.")
        else:
            self._load_task = loop.create_task(self.load())

    @abstractmethod
    def _to_domain(self, raw: Dict[str, Any]) -> T:
        pass

    @abstractmethod
    def _to_payload(self, entity: T) -> Dict[str, Any]:
        pass

    def _key(self, entity: T) -> str:
        return entity.id

    async def load(self) -> None:
        """Replaces the cache with the remote collection. Failures leave it empty."""
        try:
            raw_records = await self.client.fetch_all(self.catalog)
            self._cache = [self._to_domain(raw) for raw in raw_records]
            logger.info(f"Loaded {len(self._cache)} records from /api/{self.catalog}.")
        except Exception as e:
            logger.error(f"Error loading /api/{self.catalog}: {e}")
            self._cache = []

    async def wait_loaded(self) -> None:
        if self._load_task is not None:
            await self._load_task

    def get_all(self) -> List[T]:
        return list(self._cache)

    def get_by_id(self, key: str) -> Optional[T]:
        return next((entity for entity in self._cache if self._key(entity) == key), None)

    def add(self, entity: T) -> asyncio.Task:
        loop = _running_loop()
        self._cache.append(entity)
        return self._schedule(
            loop,
            self.client.create(self.catalog, self._to_payload(entity)),
            f"add {self._key(entity)}",
        )

    def _replace_local(self, entity: T) -> bool:
        key = self._key(entity)
        for index, cached in enumerate(self._cache):
            if self._key(cached) == key:
                self._cache[index] = entity
                return True
        return False

    @property
    def pending_writes(self) -> int:
        return len(self._pending)

    async def flush(self) -> None:
        """
        Waits for every background write issued so far.

        Raises:
            StoreWriteException: If any of them failed since the last flush.
        """
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

        count, first = self._failure_count, self._first_failure
        self._failure_count, self._first_failure = 0, None
        if count:
            raise StoreWriteException(
                f"{count} write(s) to /api/{self.catalog} failed: {first}"
            ) from first

    def _schedule(self, loop: asyncio.AbstractEventLoop, coro: Awaitable[Any], action: str) -> asyncio.Task:
        task = loop.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(functools.partial(self._write_done, action))
        return task

    def _write_done(self, action: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self._failure_count += 1
            if self._first_failure is None:
                self._first_failure = error
            logger.error(f"Background {action} on /api/{self.catalog} failed: {error}")


class JsonProductRepository(CachedCatalogRepository[Product]):
    catalog = "products"

    def _to_domain(self, raw: Dict[str, Any]) -> Product:
        return ProductTranslator.to_domain(raw)

    def _to_payload(self, product: Product) -> Dict[str, Any]:
        return ProductTranslator.to_payload(product)

    def update(self, product: Product) -> asyncio.Task:
        """Edits are a delete followed by a re-create on the store."""
        loop = _running_loop()
        if not self._replace_local(product):
            self._cache.append(product)
        return self._schedule(loop, self._delete_then_create(product), f"update {product.id}")

    async def _delete_then_create(self, product: Product) -> Dict[str, Any]:
        await self.client.delete(self.catalog, product.id)
        return await self.client.create(self.catalog, self._to_payload(product))

    def remove(self, product_id: str) -> asyncio.Task:
        loop = _running_loop()
        self._cache = [product for product in self._cache if product.id != product_id]
        return self._schedule(loop, self.client.delete(self.catalog, product_id), f"remove {product_id}")


class JsonParkingRepository(CachedCatalogRepository[ParkingRecord]):
    catalog = "parking"

    def _to_domain(self, raw: Dict[str, Any]) -> ParkingRecord:
        return ParkingTranslator.to_domain(raw)

    def _to_payload(self, record: ParkingRecord) -> Dict[str, Any]:
        return ParkingTranslator.to_payload(record)

    def update(self, record: ParkingRecord) -> asyncio.Task:
        loop = _running_loop()
        self._replace_local(record)
        return self._schedule(
            loop,
            self.client.replace(self.catalog, self._to_payload(record)),
            f"update {record.id}",
        )

    def get_active_records(self) -> List[ParkingRecord]:
        return [record for record in self._cache if record.is_active()]


class JsonBirdRepository(CachedCatalogRepository[Bird]):
    """Birds have no identifier of their own; they are keyed by name."""

    catalog = "birds"

    def _to_domain(self, raw: Dict[str, Any]) -> Bird:
        return BirdTranslator.to_domain(raw)

    def _to_payload(self, bird: Bird) -> Dict[str, Any]:
        return BirdTranslator.to_payload(bird)

    def _key(self, bird: Bird) -> str:
        return bird.name

    def clear(self) -> asyncio.Task:
        loop = _running_loop()
        self._cache = []
        return self._schedule(loop, self.client.delete(self.catalog), "clear")
