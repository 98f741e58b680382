"""
Birds whose valid actions are decided by data, not by their class.

A bird carries a capability map. Presence of a capability gates the
matching action; asking for an absent one raises UnsupportedCapabilityError.
"""
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from src.domain.exceptions import UnsupportedCapabilityError


class Capability(str, Enum):
    FLY = "canFly"
    SWIM = "canSwim"
    RUN = "canRun"
    WALK = "canWalk"


class CapabilityDetail(BaseModel):
    """Description plus a speed (km/h) or, for swimming, a depth (metres)."""
    model_config = ConfigDict(frozen=True)

    description: str = ""
    speed: Optional[float] = None
    depth: Optional[float] = None


# Verb used when a capability was given without a description
DEFAULT_VERBS: Dict[Capability, str] = {
    Capability.FLY: "flies",
    Capability.SWIM: "swims",
    Capability.RUN: "runs",
    Capability.WALK: "walks",
}

SPECIES_SOUNDS: Dict[str, str] = {
    "Duck": "quacks",
    "Eagle": "lets out a sharp screech",
    "Ostrich": "booms",
    "Penguin": "squawks",
}


class Bird(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    species: str
    capabilities: Dict[Capability, CapabilityDetail] = Field(default_factory=dict)

    def can(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def can_fly(self) -> bool:
        return self.can(Capability.FLY)

    def can_swim(self) -> bool:
        return self.can(Capability.SWIM)

    def can_run(self) -> bool:
        return self.can(Capability.RUN)

    def can_walk(self) -> bool:
        return self.can(Capability.WALK)

    def _require(self, capability: Capability) -> CapabilityDetail:
        detail = self.capabilities.get(capability)
        if detail is None:
            raise UnsupportedCapabilityError(self.name, capability.value)
        return detail

    def _perform(self, capability: Capability) -> str:
        detail = self._require(capability)
        return detail.description or f"{self.name} {DEFAULT_VERBS[capability]}"

    def fly(self) -> str:
        return self._perform(Capability.FLY)

    def get_flying_speed(self) -> Optional[float]:
        return self._require(Capability.FLY).speed

    def swim(self) -> str:
        return self._perform(Capability.SWIM)

    def get_swimming_depth(self) -> Optional[float]:
        return self._require(Capability.SWIM).depth

    def run(self) -> str:
        return self._perform(Capability.RUN)

    def get_running_speed(self) -> Optional[float]:
        return self._require(Capability.RUN).speed

    def walk(self) -> str:
        return self._perform(Capability.WALK)

    def get_walking_speed(self) -> Optional[float]:
        return self._require(Capability.WALK).speed

    def make_sound(self) -> str:
        return f"{self.name} {SPECIES_SOUNDS.get(self.species, 'makes a sound')}"

    def abilities(self) -> List[str]:
        """One line per capability the bird has, in fly/swim/run/walk order."""
        lines = []
        if self.can_fly():
            lines.append(f"{self.fly()} ({_format_amount(self.get_flying_speed())} km/h)")
        if self.can_swim():
            lines.append(f"{self.swim()} ({_format_amount(self.get_swimming_depth())} m)")
        if self.can_run():
            lines.append(f"{self.run()} ({_format_amount(self.get_running_speed())} km/h)")
        if self.can_walk():
            lines.append(f"{self.walk()} ({_format_amount(self.get_walking_speed())} km/h)")
        return lines


def _format_amount(value: Optional[float]) -> str:
    return "?" if value is None else f"{value:g}"


# Preset birds, built from capability sets instead of one class per species.

def duck(name: str) -> Bird:
    return Bird(name=name, species="Duck", capabilities={
        Capability.FLY: CapabilityDetail(description=f"{name} flies low", speed=80),
        Capability.SWIM: CapabilityDetail(description=f"{name} swims gracefully on the water", depth=2),
        Capability.RUN: CapabilityDetail(description=f"{name} waddles along", speed=3),
    })


def eagle(name: str) -> Bird:
    return Bird(name=name, species="Eagle", capabilities={
        Capability.FLY: CapabilityDetail(description=f"{name} soars majestically through the sky", speed=120),
        Capability.RUN: CapabilityDetail(description=f"{name} walks on the ground", speed=5),
    })


def ostrich(name: str) -> Bird:
    return Bird(name=name, species="Ostrich", capabilities={
        Capability.RUN: CapabilityDetail(description=f"{name} sprints across the savanna", speed=70),
    })


def penguin(name: str) -> Bird:
    return Bird(name=name, species="Penguin", capabilities={
        Capability.SWIM: CapabilityDetail(description=f"{name} dives swiftly underwater", depth=50),
        Capability.RUN: CapabilityDetail(description=f"{name} waddles clumsily over the ice", speed=2),
    })
