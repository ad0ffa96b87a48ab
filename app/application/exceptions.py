from __future__ import annotations

from datetime import date


class ReservationError(Exception):
    """Base class for errors raised by the reservation engine."""


class ValidationError(ReservationError, ValueError):
    """Raised when booking input is malformed or missing required fields."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        details = "; ".join(f"{field}: {message}" for field, message in self.errors.items())
        super().__init__(f"Validation failed: {details}")


class NotFound(ReservationError, LookupError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking not found: {booking_id}")


class InvalidTransition(ReservationError):
    def __init__(self, current: str, requested: str) -> None:
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move booking from {current} to {requested}")


class SlotAlreadyBooked(ReservationError):
    def __init__(self, photographer_id: str, event_date: date, event_time: str | None) -> None:
        self.photographer_id = photographer_id
        self.event_date = event_date
        self.event_time = event_time
        super().__init__(
            f"Time slot {event_time} on {event_date.isoformat()} is already booked "
            f"for photographer {photographer_id}"
        )


class PermissionDenied(ReservationError):
    """Raised when the acting party may not perform the requested change."""
    pass


class BookingStatusChanged(ReservationError):
    """Raised by a store when a conditional update finds a different status than expected."""

    def __init__(self, booking_id: str, expected: str, actual: str) -> None:
        self.booking_id = booking_id
        self.expected = expected
        self.actual = actual
        super().__init__(f"Booking {booking_id} is {actual}, expected {expected}")


class StoreUnavailable(ReservationError, RuntimeError):
    """Raised when the booking store fails or times out. Safe to retry with backoff."""
