from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Callable, Mapping

from app.application.dto.booking_input import CreateBookingInput, parse_booking_input
from app.application.exceptions import PermissionDenied, ValidationError
from app.application.ports.booking_store import BookingFilters, BookingStorePort
from app.application.use_cases.availability import AvailabilityCalculator
from app.application.use_cases.booking_lifecycle import BookingLifecycle, utc_now
from app.application.use_cases.conflict_checker import ConflictChecker
from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.domain.entities.booking import Actor, ActorRole, Booking, BookingStatus
from app.domain.entities.slot import AvailabilityView


class ReservationService:
    """Entry point used by the rest of the application to reserve photographer time."""

    def __init__(
        self,
        store: BookingStorePort,
        notify: NotifyPartiesUseCase,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
        max_list_limit: int = 100,
    ) -> None:
        self._store = store
        self._notify = notify
        self._clock = clock
        self._id_factory = id_factory
        self._max_list_limit = max_list_limit
        self._conflicts = ConflictChecker(store)
        self._availability = AvailabilityCalculator(store)
        self._lifecycle = BookingLifecycle(store, self._conflicts, notify, clock=clock)
        self._logger = logging.getLogger(__name__)

    def create_booking(self, payload: Mapping[str, Any] | CreateBookingInput) -> Booking:
        data = parse_booking_input(payload)

        # Informational only; the pending request is still created
        conflicts = self._conflicts.find_conflicts(data.photographer_id, data.event_date, data.event_time)
        if conflicts:
            self._logger.warning(
                "Booking requested for a confirmed slot",
                extra={
                    "photographer_id": data.photographer_id,
                    "event_date": data.event_date.isoformat(),
                    "event_time": data.event_time,
                },
            )

        now = self._clock()
        booking = Booking(
            id=self._id_factory(),
            client_id=data.client_id,
            photographer_id=data.photographer_id,
            event_type=data.event_type,
            event_date=data.event_date,
            event_location=data.event_location,
            total_amount=data.total_amount,
            deposit_amount=data.deposit_amount,
            event_time=data.event_time,
            duration_hint=data.duration_hint,
            service_id=data.service_id,
            guest_count=data.guest_count,
            special_requests=data.special_requests,
            client_name=data.client_name,
            client_email=data.client_email,
            client_phone=data.client_phone,
            notes=data.notes,
            status=BookingStatus.pending,
            created_at=now,
            updated_at=now,
        )
        created = self._store.create(booking)
        self._logger.info(
            "Booking created",
            extra={
                "booking_id": created.id,
                "photographer_id": created.photographer_id,
                "event_date": created.event_date.isoformat(),
                "event_time": created.event_time,
            },
        )
        self._notify.booking_requested(created)
        return created

    def get_availability(self, photographer_id: str, event_date: date | str) -> AvailabilityView:
        return self._availability.compute(photographer_id, event_date)

    def has_conflict(
        self,
        photographer_id: str,
        event_date: date,
        event_time: str | None,
        exclude_booking_id: str | None = None,
    ) -> bool:
        return self._conflicts.has_conflict(photographer_id, event_date, event_time, exclude_booking_id)

    def transition_booking(
        self,
        booking_id: str,
        target_status: BookingStatus | str,
        actor: Actor,
        notes: str | None = None,
    ) -> Booking:
        return self._lifecycle.request_transition(booking_id, _coerce_status(target_status), actor, notes=notes)

    def cancel_booking(self, booking_id: str, actor: Actor) -> None:
        self._lifecycle.request_transition(booking_id, BookingStatus.cancelled, actor)

    def delete_booking(self, booking_id: str, actor: Actor) -> None:
        """Remove the booking outright. Only the owning client or an admin may do this."""
        booking = self._store.get_by_id(booking_id)
        allowed = actor.role == ActorRole.admin or (actor.role == ActorRole.client and booking.is_party(actor))
        if not allowed:
            raise PermissionDenied(f"{actor.role.value} {actor.id} may not delete booking {booking_id}")

        self._store.delete(booking_id)
        self._logger.info(
            "Booking deleted",
            extra={"booking_id": booking_id, "status": booking.status.value},
        )
        if booking.status in (BookingStatus.pending, BookingStatus.confirmed):
            self._notify.status_changed(_as_cancelled(booking), actor)

    def get_booking(self, booking_id: str) -> Booking:
        return self._store.get_by_id(booking_id)

    def list_bookings(
        self,
        photographer_id: str | None = None,
        client_id: str | None = None,
        status: BookingStatus | str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> list[Booking]:
        if not photographer_id and not client_id:
            raise ValidationError({"photographer_id": "photographer_id or client_id is required"})
        if limit < 1 or offset < 0:
            raise ValidationError({"pagination": "limit must be positive and offset non-negative"})

        status_filter = _coerce_status(status) if status else None
        filters = BookingFilters(
            status=status_filter,
            client_id=client_id or None,
            limit=min(limit, self._max_list_limit),
            offset=offset,
        )

        if photographer_id:
            return self._store.list_by_photographer(photographer_id, filters)
        return self._store.list_by_client(client_id, filters)


def _coerce_status(value: BookingStatus | str) -> BookingStatus:
    if isinstance(value, BookingStatus):
        return value
    try:
        return BookingStatus(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(status.value for status in BookingStatus)
        raise ValidationError({"status": f"must be one of: {allowed}"}) from None


def _as_cancelled(booking: Booking) -> Booking:
    return replace(booking, status=BookingStatus.cancelled)
