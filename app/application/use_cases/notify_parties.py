from __future__ import annotations

import logging

from app.application.ports.notifier import NotifierPort
from app.domain.entities.booking import Actor, ActorRole, Booking, BookingStatus
from app.domain.entities.notification import NotificationEvent, NotificationKind


_KIND_BY_STATUS = {
    BookingStatus.confirmed: NotificationKind.booking_confirmed,
    BookingStatus.declined: NotificationKind.booking_declined,
    BookingStatus.cancelled: NotificationKind.booking_cancelled,
}


class NotifyPartiesUseCase:
    """Send booking notifications. Delivery failures are logged and never raised."""

    def __init__(self, notifier: NotifierPort) -> None:
        self._notifier = notifier
        self._logger = logging.getLogger(__name__)

    def booking_requested(self, booking: Booking) -> int:
        return self._dispatch(
            booking, NotificationKind.booking_requested, [(ActorRole.photographer, booking.photographer_id)]
        )

    def status_changed(self, booking: Booking, actor: Actor) -> int:
        kind = _KIND_BY_STATUS.get(booking.status)
        if kind is None:
            return 0
        if kind == NotificationKind.booking_cancelled:
            return self._dispatch(booking, kind, _counterparties(booking, actor))
        return self._dispatch(booking, kind, [(ActorRole.client, booking.client_id)])

    def _dispatch(
        self,
        booking: Booking,
        kind: NotificationKind,
        recipients: list[tuple[ActorRole, str]],
    ) -> int:
        """Returns how many notifications were handed to the notifier successfully."""
        sent = 0
        for role, recipient_id in recipients:
            subject, body = _render(booking, kind)
            event = NotificationEvent(
                booking_id=booking.id,
                kind=kind,
                recipient_role=role,
                recipient_id=recipient_id,
                subject=subject,
                body=body,
            )
            try:
                self._notifier.notify(event)
                sent += 1
            except Exception as e:
                self._logger.exception(
                    "Failed to send booking notification",
                    extra={"booking_id": booking.id, "kind": kind.value, "error": str(e)},
                )
        return sent


def _counterparties(booking: Booking, actor: Actor) -> list[tuple[ActorRole, str]]:
    if actor.role == ActorRole.client:
        return [(ActorRole.photographer, booking.photographer_id)]
    if actor.role == ActorRole.photographer:
        return [(ActorRole.client, booking.client_id)]
    return [
        (ActorRole.client, booking.client_id),
        (ActorRole.photographer, booking.photographer_id),
    ]


def _render(booking: Booking, kind: NotificationKind) -> tuple[str, str]:
    when = booking.event_date.isoformat()
    if booking.event_time:
        when = f"{when} at {booking.event_time}"
    name = booking.client_name or "there"

    if kind == NotificationKind.booking_requested:
        return (
            "New Booking Request",
            f"You have a new booking request for {booking.event_type} on {when}.",
        )
    if kind == NotificationKind.booking_confirmed:
        return (
            f"Booking Confirmed - {booking.event_type} on {booking.event_date.isoformat()}",
            f"Dear {name},\n\nYour booking for {booking.event_type} on {when} has been confirmed!\n\n"
            f"Location: {booking.event_location}\nTotal: ${booking.total_amount}",
        )
    if kind == NotificationKind.booking_declined:
        return (
            f"Booking Request Update - {booking.event_type} on {booking.event_date.isoformat()}",
            f"Dear {name},\n\nUnfortunately the photographer is unable to accommodate your request "
            f"for {booking.event_type} on {when}.",
        )
    return (
        f"Booking Cancelled - {booking.event_type} on {booking.event_date.isoformat()}",
        f"The booking for {booking.event_type} on {when} has been cancelled.",
    )
