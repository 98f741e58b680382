import unittest
from datetime import datetime, timedelta, timezone

from src.domain.exceptions import ParkingRecordActiveException, UnknownRateStrategyException
from src.domain.models import ParkingRecord, VehicleType
from src.domain.strategies import (
    StandardRateStrategy, VIPRateStrategy, WeekendRateStrategy, get_rate_strategy,
)

ENTRY = datetime(2026, 1, 10, 8, 0, tzinfo=timezone.utc)


def _closed(vehicle_type: VehicleType, duration: timedelta) -> ParkingRecord:
    return ParkingRecord(
        id="r1",
        vehicle_plate="ABC123",
        entry_time=ENTRY,
        exit_time=ENTRY + duration,
        vehicle_type=vehicle_type,
        fee_charged=0,
    )


class TestStandardRateStrategy(unittest.TestCase):
    def test_truck_three_hours(self) -> None:
        fee = StandardRateStrategy().calculate_rate(_closed(VehicleType.TRUCK, timedelta(hours=3)))
        self.assertEqual(fee, 45)

    def test_vehicle_multipliers(self) -> None:
        strategy = StandardRateStrategy()
        self.assertEqual(strategy.calculate_rate(_closed(VehicleType.CAR, timedelta(hours=3))), 30)
        self.assertEqual(strategy.calculate_rate(_closed(VehicleType.MOTORCYCLE, timedelta(hours=3))), 15)

    def test_fee_is_linear_in_started_hours(self) -> None:
        strategy = StandardRateStrategy()
        for hours in range(1, 6):
            record = _closed(VehicleType.CAR, timedelta(hours=hours))
            self.assertEqual(strategy.calculate_rate(record), hours * 10)

    def test_partial_hour_is_charged_as_full_hour(self) -> None:
        record = _closed(VehicleType.CAR, timedelta(hours=2, minutes=1))
        self.assertEqual(StandardRateStrategy().calculate_rate(record), 30)

    def test_active_record_raises(self) -> None:
        record = ParkingRecord(id="r1", vehicle_plate="ABC123", entry_time=ENTRY, vehicle_type=VehicleType.CAR)
        with self.assertRaises(ParkingRecordActiveException):
            StandardRateStrategy().calculate_rate(record)


class TestOtherStrategies(unittest.TestCase):
    def test_weekend_rate(self) -> None:
        fee = WeekendRateStrategy().calculate_rate(_closed(VehicleType.TRUCK, timedelta(hours=3)))
        self.assertEqual(fee, 36)

    def test_vip_is_always_free(self) -> None:
        strategy = VIPRateStrategy()
        for vehicle_type in VehicleType:
            self.assertEqual(strategy.calculate_rate(_closed(vehicle_type, timedelta(hours=30))), 0)


class TestGetRateStrategy(unittest.TestCase):
    def test_lookup_by_name(self) -> None:
        self.assertIsInstance(get_rate_strategy("standard"), StandardRateStrategy)
        self.assertIsInstance(get_rate_strategy("weekend"), WeekendRateStrategy)
        self.assertIsInstance(get_rate_strategy("VIP"), VIPRateStrategy)

    def test_unknown_name_raises(self) -> None:
        with self.assertRaises(UnknownRateStrategyException):
            get_rate_strategy("monthly")

        with self.assertRaises(ValueError):
            get_rate_strategy("monthly")
