"""
Parking rate strategies.

The fee for a finished stay is computed by whichever strategy is active in
the ParkingService; strategies can be swapped at runtime without touching
the code that asks for a fee.
"""
from abc import ABC, abstractmethod
import logging
from typing import Dict, Type

from src.domain.exceptions import ParkingRecordActiveException, UnknownRateStrategyException
from src.domain.models import ParkingRecord, VehicleType

VEHICLE_MULTIPLIERS: Dict[VehicleType, float] = {
    VehicleType.CAR: 1.0,
    VehicleType.MOTORCYCLE: 0.5,
    VehicleType.TRUCK: 1.5,
}


class ParkingRateStrategy(ABC):
    """Interface for parking fee algorithms."""

    name: str = ""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def fee_for(self, vehicle_type: VehicleType, hours: int) -> float:
        """Fee for `hours` started hours of parking."""
        pass

    @abstractmethod
    def get_description(self) -> str:
        pass

    def calculate_rate(self, record: ParkingRecord) -> float:
        """
        Fee owed for a finished stay.
        Raises ParkingRecordActiveException if the vehicle has not left yet.
        """
        if record.is_active():
            raise ParkingRecordActiveException(record.id)
        fee = self.fee_for(record.vehicle_type, record.duration_hours())
        self.logger.debug(f"Fee for record {record.id}: {fee}")
        return fee

    def __str__(self) -> str:
        return self.get_description()


class HourlyRateStrategy(ParkingRateStrategy):
    """Flat hourly rate scaled by vehicle type."""

    rate_per_hour: float = 0.0

    def fee_for(self, vehicle_type: VehicleType, hours: int) -> float:
        return hours * self.rate_per_hour * VEHICLE_MULTIPLIERS[vehicle_type]


class StandardRateStrategy(HourlyRateStrategy):
    name = "standard"
    rate_per_hour = 10

    def get_description(self) -> str:
        return f"Standard rate: ${self.rate_per_hour}/hour"


class WeekendRateStrategy(HourlyRateStrategy):
    name = "weekend"
    rate_per_hour = 8

    def get_description(self) -> str:
        return f"Weekend rate: ${self.rate_per_hour}/hour"


class VIPRateStrategy(ParkingRateStrategy):
    name = "vip"

    def fee_for(self, vehicle_type: VehicleType, hours: int) -> float:
        return 0.0

    def get_description(self) -> str:
        return "VIP rate: free"


RATE_STRATEGIES: Dict[str, Type[ParkingRateStrategy]] = {
    strategy.name: strategy
    for strategy in (StandardRateStrategy, WeekendRateStrategy, VIPRateStrategy)
}


def get_rate_strategy(name: str) -> ParkingRateStrategy:
    try:
        return RATE_STRATEGIES[name.lower()]()
    except KeyError:
        raise UnknownRateStrategyException(name) from None
