from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True)
class Slot:
    id: str
    time: str
    base_price: int


@dataclass(frozen=True)
class SlotAvailability:
    id: str
    time: str
    base_price: int
    available: bool


@dataclass(frozen=True)
class AvailabilityView:
    photographer_id: str
    date: date
    slots: tuple[SlotAvailability, ...]

    @property
    def total_slots(self) -> int:
        return len(self.slots)

    @property
    def available_slots(self) -> int:
        return sum(1 for slot in self.slots if slot.available)

    def is_available(self, time: str) -> bool:
        for slot in self.slots:
            if slot.time == time:
                return slot.available
        return False
