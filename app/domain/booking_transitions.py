from __future__ import annotations

from app.domain.entities.booking import Actor, ActorRole, Booking, BookingStatus


ALLOWED_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.pending: frozenset(
        {BookingStatus.confirmed, BookingStatus.declined, BookingStatus.cancelled}
    ),
    BookingStatus.confirmed: frozenset({BookingStatus.cancelled}),
    BookingStatus.declined: frozenset(),
    BookingStatus.cancelled: frozenset(),
}


def is_allowed(current: BookingStatus, target: BookingStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def may_perform(booking: Booking, target: BookingStatus, actor: Actor) -> bool:
    """Photographer decides confirm/decline; either party or an admin may cancel."""
    if actor.role == ActorRole.admin:
        return True
    if target == BookingStatus.cancelled:
        return booking.is_party(actor)
    return actor.role == ActorRole.photographer and booking.is_party(actor)
