from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any

from app.domain.entities.booking import Booking, BookingStatus


@dataclass(frozen=True)
class BookingFilters:
    status: BookingStatus | None = None
    client_id: str | None = None
    limit: int = 20
    offset: int = 0

    def matches(self, booking: Booking) -> bool:
        if self.status is not None and booking.status != self.status:
            return False
        return self.client_id is None or booking.client_id == self.client_id


class BookingStorePort(ABC):
    @abstractmethod
    def create(self, booking: Booking) -> Booking:
        raise NotImplementedError

    @abstractmethod
    def get_by_id(self, booking_id: str) -> Booking:
        """Return the booking. Raises NotFound if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def update(
        self,
        booking_id: str,
        fields: dict[str, Any],
        expected_status: BookingStatus | None = None,
    ) -> Booking:
        """
        Apply fields to the booking in a single atomic write.

        Raises NotFound if the booking is missing, BookingStatusChanged if
        expected_status is given and no longer matches, and SlotAlreadyBooked
        if the write would leave two confirmed bookings on one slot.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, booking_id: str) -> None:
        """Remove the booking. Raises NotFound if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def list_by_photographer_and_date(
        self,
        photographer_id: str,
        event_date: date,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def list_by_photographer(self, photographer_id: str, filters: BookingFilters) -> list[Booking]:
        """Newest first, paginated by filters."""
        raise NotImplementedError

    @abstractmethod
    def list_by_client(self, client_id: str, filters: BookingFilters) -> list[Booking]:
        """Newest first, paginated by filters."""
        raise NotImplementedError
