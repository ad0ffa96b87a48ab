from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.application.exceptions import (
    BookingStatusChanged,
    InvalidTransition,
    PermissionDenied,
    SlotAlreadyBooked,
)
from app.application.ports.booking_store import BookingStorePort
from app.application.use_cases.conflict_checker import ConflictChecker
from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.domain.booking_transitions import is_allowed, may_perform
from app.domain.entities.booking import Actor, Booking, BookingStatus


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingLifecycle:
    """
    Owns every status change of a booking.

    Confirmation re-runs the conflict check right before the write. The store's
    conditional update is what keeps a slot to one confirmed booking.
    """

    def __init__(
        self,
        store: BookingStorePort,
        conflict_checker: ConflictChecker,
        notify: NotifyPartiesUseCase,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._conflicts = conflict_checker
        self._notify = notify
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    def request_transition(
        self,
        booking_id: str,
        target_status: BookingStatus,
        actor: Actor,
        notes: str | None = None,
    ) -> Booking:
        booking = self._store.get_by_id(booking_id)
        current = booking.status

        if not is_allowed(current, target_status):
            self._logger.info(
                "Rejected booking transition",
                extra={"booking_id": booking_id, "status": current.value, "target_status": target_status.value},
            )
            raise InvalidTransition(current.value, target_status.value)

        if not may_perform(booking, target_status, actor):
            raise PermissionDenied(
                f"{actor.role.value} {actor.id} may not set booking {booking_id} to {target_status.value}"
            )

        if target_status == BookingStatus.confirmed and self._conflicts.has_conflict(
            booking.photographer_id,
            booking.event_date,
            booking.event_time,
            exclude_booking_id=booking.id,
        ):
            self._logger.info(
                "Slot already booked",
                extra={
                    "booking_id": booking_id,
                    "photographer_id": booking.photographer_id,
                    "event_date": booking.event_date.isoformat(),
                    "event_time": booking.event_time,
                },
            )
            raise SlotAlreadyBooked(booking.photographer_id, booking.event_date, booking.event_time)

        fields: dict[str, object] = {"status": target_status, "updated_at": self._clock()}
        if notes:
            fields["photographer_notes"] = notes

        try:
            updated = self._store.update(booking_id, fields, expected_status=current)
        except BookingStatusChanged as e:
            raise InvalidTransition(e.actual, target_status.value) from e

        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking_id, "status": current.value, "target_status": target_status.value},
        )
        self._notify.status_changed(updated, actor)
        return updated
