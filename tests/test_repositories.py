import asyncio
import unittest
from datetime import datetime, timedelta, timezone

from src.domain.birds import duck, penguin
from src.domain.exceptions import StoreException, StoreWriteException
from src.domain.models import ClothingProduct, ParkingRecord, VehicleType
from src.domain.strategies import StandardRateStrategy
from src.infrastructure.repositories import (
    JsonBirdRepository, JsonParkingRepository, JsonProductRepository,
)

ENTRY = datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc)


class _FakeClient:
    def __init__(self, records=None, fail_reads=False, fail_writes=False) -> None:
        self.records = records or []
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.calls = []

    async def fetch_all(self, catalog):
        self.calls.append(("GET", catalog))
        if self.fail_reads:
            raise StoreException("store unreachable")
        return list(self.records)

    async def _write(self, *call):
        await asyncio.sleep(0)
        self.calls.append(call)
        if self.fail_writes:
            raise StoreWriteException("store unreachable")
        return {"success": True}

    async def create(self, catalog, payload):
        return await self._write("POST", catalog, payload)

    async def replace(self, catalog, payload):
        return await self._write("PUT", catalog, payload)

    async def delete(self, catalog, record_id=None):
        return await self._write("DELETE", catalog, record_id)


def _parking_payload(record_id: str = "r1") -> dict:
    return {
        "id": record_id,
        "vehiclePlate": "ABC123",
        "entryTime": "2026-01-10T08:00:00Z",
        "exitTime": None,
        "vehicleType": "car",
        "feeCharged": None,
    }


class TestCacheLoading(unittest.IsolatedAsyncioTestCase):
    async def test_reads_are_empty_until_load_resolves(self) -> None:
        repo = JsonParkingRepository(_FakeClient(records=[_parking_payload()]))

        self.assertEqual(repo.get_all(), [])

        await repo.wait_loaded()

        self.assertEqual([r.id for r in repo.get_all()], ["r1"])
        self.assertEqual(repo.get_by_id("r1").vehicle_type, VehicleType.CAR)

    async def test_failed_load_leaves_cache_empty(self) -> None:
        repo = JsonParkingRepository(_FakeClient(fail_reads=True))

        with self.assertLogs("src.infrastructure.repositories", level="ERROR"):
            await repo.wait_loaded()

        self.assertEqual(repo.get_all(), [])

    async def test_get_by_id_of_unknown_record(self) -> None:
        repo = JsonParkingRepository(_FakeClient())
        await repo.wait_loaded()

        self.assertIsNone(repo.get_by_id("missing"))


class TestCacheWithoutLoop(unittest.TestCase):
    def test_no_preload_outside_event_loop(self) -> None:
        client = _FakeClient(records=[_parking_payload()])
        repo = JsonParkingRepository(client)

        self.assertEqual(repo.get_all(), [])
        self.assertEqual(client.calls, [])

    def test_writes_outside_event_loop_leave_cache_untouched(self) -> None:
        client = _FakeClient()
        repo = JsonProductRepository(client)

        with self.assertRaises(RuntimeError):
            repo.add(ClothingProduct(id="c1", name="Shirt", acquisition_price=50))

        self.assertEqual(repo.get_all(), [])
        self.assertEqual(client.calls, [])


class TestWrites(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self) -> None:
        self.client = _FakeClient()
        self.products = JsonProductRepository(self.client)
        await self.products.wait_loaded()
        self.client.calls.clear()

    async def test_add_updates_cache_before_the_write_lands(self) -> None:
        product = ClothingProduct(id="c1", name="Shirt", acquisition_price=50)

        task = self.products.add(product)

        self.assertEqual(self.products.get_all(), [product])
        self.assertEqual(self.client.calls, [])

        await task

        self.assertEqual(self.client.calls[0][:2], ("POST", "products"))
        self.assertEqual(self.client.calls[0][2]["type"], "clothing")

    async def test_update_is_delete_then_create(self) -> None:
        self.products.add(ClothingProduct(id="c1", name="Shirt", acquisition_price=50))
        await self.products.flush()
        self.client.calls.clear()

        edited = ClothingProduct(id="c1", name="Shirt", acquisition_price=60)
        await self.products.update(edited)

        self.assertEqual([call[0] for call in self.client.calls], ["DELETE", "POST"])
        self.assertEqual(self.products.get_by_id("c1").acquisition_price, 60)
        self.assertEqual(len(self.products.get_all()), 1)

    async def test_remove(self) -> None:
        self.products.add(ClothingProduct(id="c1", name="Shirt", acquisition_price=50))
        self.products.add(ClothingProduct(id="c2", name="Coat", acquisition_price=90))

        self.products.remove("c1")
        await self.products.flush()

        self.assertEqual([p.id for p in self.products.get_all()], ["c2"])
        self.assertIn(("DELETE", "products", "c1"), self.client.calls)
        self.assertEqual(self.products.pending_writes, 0)

    async def test_failed_write_keeps_local_change_and_is_reported(self) -> None:
        self.client.fail_writes = True
        product = ClothingProduct(id="c1", name="Shirt", acquisition_price=50)

        with self.assertLogs("src.infrastructure.repositories", level="ERROR"):
            task = self.products.add(product)
            with self.assertRaises(StoreWriteException):
                await self.products.flush()

        self.assertEqual(self.products.get_all(), [product])
        with self.assertRaises(StoreWriteException):
            await task

        # Failures are reported once
        await self.products.flush()

    async def test_repeated_failures_are_summarized(self) -> None:
        self.client.fail_writes = True

        with self.assertLogs("src.infrastructure.repositories", level="ERROR"):
            for index in range(3):
                self.products.add(ClothingProduct(id=f"c{index}", name="Shirt", acquisition_price=50))
            with self.assertRaises(StoreWriteException) as ctx:
                await self.products.flush()

        self.assertIn("3 write(s)", str(ctx.exception))
        self.assertIsInstance(ctx.exception.__cause__, StoreWriteException)
        await self.products.flush()


class TestParkingRepository(unittest.IsolatedAsyncioTestCase):
    async def test_update_replaces_record_and_puts_it(self) -> None:
        client = _FakeClient(records=[_parking_payload("r1"), _parking_payload("r2")])
        repo = JsonParkingRepository(client)
        await repo.wait_loaded()

        closed = repo.get_by_id("r1").close(ENTRY + timedelta(hours=2), StandardRateStrategy())
        await repo.update(closed)

        self.assertEqual([r.id for r in repo.get_active_records()], ["r2"])
        self.assertEqual(repo.get_by_id("r1").fee_charged, 20)
        method, catalog, payload = client.calls[-1]
        self.assertEqual((method, catalog), ("PUT", "parking"))
        self.assertEqual(payload["feeCharged"], 20)

    async def test_add_new_entry(self) -> None:
        repo = JsonParkingRepository(_FakeClient())
        await repo.wait_loaded()

        record = ParkingRecord(id="r3", vehicle_plate="XYZ", entry_time=ENTRY, vehicle_type=VehicleType.MOTORCYCLE)
        await repo.add(record)

        self.assertEqual(repo.get_active_records(), [record])


class TestBirdRepository(unittest.IsolatedAsyncioTestCase):
    async def test_birds_are_keyed_by_name_and_cleared_together(self) -> None:
        client = _FakeClient()
        repo = JsonBirdRepository(client)
        await repo.wait_loaded()

        repo.add(duck("Donald"))
        repo.add(penguin("Pingu"))

        self.assertEqual(repo.get_by_id("Pingu").species, "Penguin")

        await repo.clear()
        await repo.flush()

        self.assertEqual(repo.get_all(), [])
        self.assertEqual(client.calls[-1], ("DELETE", "birds", None))
