import aiohttp
import asyncio
import logging
import random
from typing import Any, Dict, List, Optional

from src.domain.exceptions import RecordNotFoundException, StoreException, StoreWriteException

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = aiohttp.ClientTimeout(total=30, connect=5)
MAX_RETRIES = 3
BACKOFF_BASE = 0.5  # Seconds, doubled on every attempt
RETRYABLE_STATUSES = {500, 502, 503, 504}
IDEMPOTENT_METHODS = {"GET", "PUT", "DELETE"}


class CatalogApiClient:
    """
    Client for the catalog REST endpoints (/api/products, /api/parking, /api/birds).
    Transient failures (5xx, connection errors, timeouts) of GET, PUT and
    DELETE are retried with exponential backoff. POST is sent once, since
    the store appends on every call. Anything else is raised straight away.
    """

    def __init__(self, session: aiohttp.ClientSession, base_url: str):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def url_for(self, catalog: str) -> str:
        return f"{self.base_url}/api/{catalog}"

    async def fetch_all(self, catalog: str) -> List[Dict[str, Any]]:
        """Returns the whole collection. A non-list body is read as an empty collection."""
        data = await self._request("GET", catalog)
        return data if isinstance(data, list) else []

    async def create(self, catalog: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return await self._request("POST", catalog, payload=payload)

    async def replace(self, catalog: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replaces the stored record with the same id.

        Raises:
            RecordNotFoundException: If the store has no record with that id.
        """
        return await self._request("PUT", catalog, payload=payload)

    async def delete(self, catalog: str, record_id: Optional[str] = None) -> Dict[str, Any]:
        """Deletes one record, or the whole collection when no id is given."""
        params = {"id": record_id} if record_id is not None else None
        return await self._request("DELETE", catalog, params=params)

    async def _request(
        self,
        method: str,
        catalog: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        error_cls = StoreException if method == "GET" else StoreWriteException
        url = self.url_for(catalog)
        # A POST that timed out may already have been appended, so it gets one attempt
        attempts = MAX_RETRIES if method in IDEMPOTENT_METHODS else 1

        for attempt in range(1, attempts + 1):
            try:
                async with self.session.request(
                    method, url, json=payload, params=params,
                    headers=self.headers, timeout=REQUEST_TIMEOUT,
                ) as response:
                    if response.status in RETRYABLE_STATUSES:
                        if attempt == attempts:
                            raise error_cls(
                                f"{method} {url} returned {response.status} after {attempts} attempt(s)."
                            )
                        sleep_time = _backoff(attempt)
                        logger.warning(
                            f"{method} {url} returned {response.status}, "
                            f"retrying in {sleep_time:.1f}s (attempt {attempt}/{attempts})..."
                        )
                        await asyncio.sleep(sleep_time)
                        continue

                    body = await response.json(content_type=None)

                    if response.status == 404:
                        record_id = (payload or {}).get("id") or (params or {}).get("id", "")
                        raise RecordNotFoundException(record_id, message=_error_message(body, "Record not found."))

                    if response.status >= 400:
                        raise error_cls(f"{method} {url} failed ({response.status}): {_error_message(body)}")

                    return body

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt == attempts:
                    raise error_cls(f"{method} {url} failed after {attempts} attempt(s): {e}") from e
                sleep_time = _backoff(attempt)
                logger.warning(
                    f"{method} {url} failed (attempt {attempt}/{attempts}): {e}. "
                    f"Retrying in {sleep_time:.1f}s..."
                )
                await asyncio.sleep(sleep_time)


def _backoff(attempt: int) -> float:
    return BACKOFF_BASE * (2 ** (attempt - 1)) + random.uniform(0, BACKOFF_BASE)


def _error_message(body: Any, default: str = "Unknown error") -> str:
    if isinstance(body, dict):
        return body.get("error") or default
    return default
