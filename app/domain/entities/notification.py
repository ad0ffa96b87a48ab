from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.domain.entities.booking import ActorRole


class NotificationKind(str, Enum):
    booking_requested = "booking_requested"
    booking_confirmed = "booking_confirmed"
    booking_declined = "booking_declined"
    booking_cancelled = "booking_cancelled"


@dataclass(frozen=True)
class NotificationEvent:
    booking_id: str
    kind: NotificationKind
    recipient_role: ActorRole
    recipient_id: str
    subject: str
    body: str
