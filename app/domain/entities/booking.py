from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum


class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    declined = "declined"
    cancelled = "cancelled"


class ActorRole(str, Enum):
    client = "client"
    photographer = "photographer"
    admin = "admin"


@dataclass(frozen=True)
class Actor:
    id: str
    role: ActorRole


SlotKey = tuple[str, date, str]


@dataclass(frozen=True)
class Booking:
    id: str
    client_id: str
    photographer_id: str
    event_type: str
    event_date: date
    event_location: str
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    status: BookingStatus = BookingStatus.pending
    event_time: str | None = None  # catalog label, e.g. "10:00 AM"
    duration_hint: str | None = None  # advisory only
    deposit_amount: Decimal = Decimal("0")
    service_id: str | None = None
    guest_count: int | None = None
    special_requests: str | None = None
    client_name: str | None = None
    client_email: str | None = None
    client_phone: str | None = None
    notes: str | None = None
    photographer_notes: str | None = None

    @property
    def slot_key(self) -> SlotKey | None:
        if not self.event_time:
            return None
        return (self.photographer_id, self.event_date, self.event_time)

    def is_party(self, actor: Actor) -> bool:
        if actor.role == ActorRole.client:
            return actor.id == self.client_id
        if actor.role == ActorRole.photographer:
            return actor.id == self.photographer_id
        return False
