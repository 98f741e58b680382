import unittest
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from src.domain.exceptions import ParkingRecordClosedException
from src.domain.models import (
    ClothingProduct, ElectronicProduct, FoodProduct, ParkingRecord, ProductCategory, VehicleType,
)
from src.domain.strategies import StandardRateStrategy

ENTRY = datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc)


class TestProducts(unittest.TestCase):
    def test_variants_fix_their_category(self) -> None:
        self.assertEqual(FoodProduct(id="f", name="Milk", acquisition_price=1).category, ProductCategory.FOOD)
        self.assertEqual(ElectronicProduct(id="e", name="TV", acquisition_price=1).category, ProductCategory.ELECTRONICS)
        self.assertEqual(ClothingProduct(id="c", name="Shirt", acquisition_price=1).category, ProductCategory.CLOTHING)

    def test_category_cannot_be_overridden(self) -> None:
        product = ElectronicProduct(id="e", name="TV", acquisition_price=1, category=ProductCategory.FOOD)
        self.assertEqual(product.category, ProductCategory.ELECTRONICS)

    def test_negative_acquisition_price_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            ClothingProduct(id="c", name="Shirt", acquisition_price=-1)

    def test_products_are_immutable(self) -> None:
        product = ClothingProduct(id="c", name="Shirt", acquisition_price=10)
        with self.assertRaises(ValidationError):
            product.name = "Jacket"

    def test_info_and_details(self) -> None:
        product = ElectronicProduct(id="e", name="TV", acquisition_price=100, warranty_months=24, brand="Acme")

        self.assertEqual(product.get_info(), "TV - Category: Electronics")
        self.assertEqual(product.describe(), "Warranty: 24 months - Brand: Acme")
        self.assertEqual(FoodProduct(id="f", name="Milk", acquisition_price=1).describe(), "No expiration date")

    def test_naive_expiration_is_read_as_utc(self) -> None:
        product = FoodProduct(id="f", name="Milk", acquisition_price=1, expiration_date=datetime(2026, 1, 12))
        self.assertEqual(product.expiration_date.tzinfo, timezone.utc)


class TestParkingRecord(unittest.TestCase):
    def _active(self) -> ParkingRecord:
        return ParkingRecord(id="r1", vehicle_plate="ABC123", entry_time=ENTRY, vehicle_type=VehicleType.CAR)

    def test_new_record_is_active(self) -> None:
        record = self._active()

        self.assertTrue(record.is_active())
        self.assertIsNone(record.fee_charged)

    def test_duration_of_active_record_uses_now(self) -> None:
        self.assertEqual(self._active().duration_hours(now=ENTRY + timedelta(minutes=90)), 2)

    def test_close_sets_exit_and_fee(self) -> None:
        closed = self._active().close(ENTRY + timedelta(hours=3), StandardRateStrategy())

        self.assertFalse(closed.is_active())
        self.assertEqual(closed.exit_time, ENTRY + timedelta(hours=3))
        self.assertEqual(closed.fee_charged, 30)
        self.assertEqual(closed.duration_hours(), 3)

    def test_closed_record_cannot_be_closed_again(self) -> None:
        closed = self._active().close(ENTRY + timedelta(hours=1), StandardRateStrategy())

        with self.assertRaises(ParkingRecordClosedException):
            closed.close(ENTRY + timedelta(hours=2), StandardRateStrategy())

    def test_exit_before_entry_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            self._active().close(ENTRY - timedelta(hours=1), StandardRateStrategy())

    def test_fee_requires_exit_and_exit_requires_fee(self) -> None:
        with self.assertRaises(ValidationError):
            ParkingRecord(id="r1", vehicle_plate="A", entry_time=ENTRY, vehicle_type="car", fee_charged=10)

        with self.assertRaises(ValidationError):
            ParkingRecord(id="r1", vehicle_plate="A", entry_time=ENTRY, vehicle_type="car", exit_time=ENTRY)

    def test_unknown_vehicle_type_is_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            ParkingRecord(id="r1", vehicle_plate="A", entry_time=ENTRY, vehicle_type="bus")
