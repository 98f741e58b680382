import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from src.application.identifiers import new_record_id
from src.domain.models import ParkingRecord, VehicleType
from src.domain.strategies import ParkingRateStrategy
from src.infrastructure.repositories import JsonParkingRepository

logger = logging.getLogger(__name__)


class ParkingService:
    """
    Registers vehicle entries and exits.

    The rate strategy is injected and can be swapped at any time; the fee
    is computed by whichever strategy is active when the exit is registered.
    """

    def __init__(self, parking_repository: JsonParkingRepository, rate_strategy: ParkingRateStrategy):
        self.parking_repository = parking_repository
        self._rate_strategy = rate_strategy

    @property
    def rate_strategy(self) -> ParkingRateStrategy:
        return self._rate_strategy

    def set_rate_strategy(self, strategy: ParkingRateStrategy) -> None:
        logger.info(f"Parking rate strategy changed to '{strategy.get_description()}'.")
        self._rate_strategy = strategy

    def register_entry(
        self,
        vehicle_plate: str,
        vehicle_type: VehicleType,
        now: Optional[datetime] = None,
    ) -> ParkingRecord:
        record = ParkingRecord(
            id=new_record_id(),
            vehicle_plate=vehicle_plate,
            entry_time=now or datetime.now(timezone.utc),
            vehicle_type=vehicle_type,
        )
        self.parking_repository.add(record)
        logger.info(f"Vehicle {vehicle_plate} ({record.vehicle_type.value}) entered, record {record.id}.")
        return record

    def register_exit(
        self,
        record_id: str,
        now: Optional[datetime] = None,
    ) -> Optional[Tuple[ParkingRecord, float]]:
        """
        Stamps the exit time, charges the fee of the active strategy and persists the record.

        Returns:
            (closed_record, fee), or None if the record is unknown or already closed.
        """
        record = self.parking_repository.get_by_id(record_id)
        if record is None or not record.is_active():
            return None

        closed = record.close(now or datetime.now(timezone.utc), self._rate_strategy)
        self.parking_repository.update(closed)
        logger.info(
            f"Vehicle {closed.vehicle_plate} left after {closed.duration_hours()}h, "
            f"charged {closed.fee_charged} ({self._rate_strategy.name})."
        )
        return closed, closed.fee_charged

    def get_active_records(self) -> List[ParkingRecord]:
        return self.parking_repository.get_active_records()

    def get_all_records(self) -> List[ParkingRecord]:
        return self.parking_repository.get_all()
