from __future__ import annotations

from datetime import date

from app.application.ports.booking_store import BookingStorePort
from app.domain.entities.booking import Booking, BookingStatus


class ConflictChecker:
    """Read-only check for confirmed bookings occupying a photographer's slot."""

    def __init__(self, store: BookingStorePort) -> None:
        self._store = store

    def find_conflicts(
        self,
        photographer_id: str,
        event_date: date,
        event_time: str | None,
        exclude_booking_id: str | None = None,
    ) -> list[Booking]:
        if not event_time:
            return []
        confirmed = self._store.list_by_photographer_and_date(
            photographer_id, event_date, status=BookingStatus.confirmed
        )
        return [
            booking
            for booking in confirmed
            if booking.event_time == event_time and booking.id != exclude_booking_id
        ]

    def has_conflict(
        self,
        photographer_id: str,
        event_date: date,
        event_time: str | None,
        exclude_booking_id: str | None = None,
    ) -> bool:
        return bool(self.find_conflicts(photographer_id, event_date, event_time, exclude_booking_id))
