import logging
from typing import Dict, List, Optional

from src.domain.birds import Bird, Capability, CapabilityDetail, DEFAULT_VERBS
from src.infrastructure.repositories import JsonBirdRepository

logger = logging.getLogger(__name__)

# Speed (km/h) or depth (m) used when a capability is given without one
DEFAULT_AMOUNTS: Dict[Capability, float] = {
    Capability.FLY: 50,
    Capability.SWIM: 5,
    Capability.RUN: 20,
    Capability.WALK: 5,
}


class BirdService:
    def __init__(self, bird_repository: JsonBirdRepository):
        self.bird_repository = bird_repository

    @staticmethod
    def create_bird(name: str, species: str, capabilities: Dict[Capability, Optional[CapabilityDetail]]) -> Bird:
        """
        Builds a bird from the capabilities it should have, filling in a
        default description and speed/depth where they were left out.

        Raises:
            ValueError: If name or species is empty, or no capability is given.
        """
        if not name or not species:
            raise ValueError("A bird needs both a name and a species.")
        if not capabilities:
            raise ValueError("A bird needs at least one capability.")

        completed = {}
        for capability, detail in capabilities.items():
            detail = detail or CapabilityDetail()
            amount_field = "depth" if capability is Capability.SWIM else "speed"
            completed[capability] = CapabilityDetail(**{
                "description": detail.description or f"{name} {DEFAULT_VERBS[capability]}",
                amount_field: getattr(detail, amount_field) or DEFAULT_AMOUNTS[capability],
            })
        return Bird(name=name, species=species, capabilities=completed)

    def get_all_birds(self) -> List[Bird]:
        return self.bird_repository.get_all()

    def add_bird(self, bird: Bird) -> None:
        self.bird_repository.add(bird)
        logger.info(f"Added bird {bird.name} ({bird.species}).")

    def clear_birds(self) -> None:
        self.bird_repository.clear()
        logger.info("Cleared all birds.")

    def describe_abilities(self, bird: Bird) -> List[str]:
        return bird.abilities()
