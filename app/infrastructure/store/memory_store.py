from __future__ import annotations

import threading
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from datetime import date
from typing import Any

from app.application.exceptions import (
    BookingStatusChanged,
    NotFound,
    SlotAlreadyBooked,
    StoreUnavailable,
)
from app.application.ports.booking_store import BookingFilters, BookingStorePort
from app.domain.entities.booking import Booking, BookingStatus, SlotKey

_MUTABLE_FIELDS = {f.name for f in dataclass_fields(Booking)} - {"id", "created_at"}


class MemoryBookingStore(BookingStorePort):
    def __init__(self, lock_timeout: float = 5.0) -> None:
        self._bookings: dict[str, Booking] = {}
        # Unique index: one confirmed booking id per (photographer, date, time)
        self._confirmed_slots: dict[SlotKey, str] = {}
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout

    def _acquire(self) -> None:
        if not self._lock.acquire(timeout=self._lock_timeout):
            raise StoreUnavailable("Timed out waiting for the booking store")

    def create(self, booking: Booking) -> Booking:
        self._acquire()
        try:
            if booking.id in self._bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            if booking.status == BookingStatus.confirmed:
                self._claim_slot(booking)
            self._bookings[booking.id] = booking
            return booking
        finally:
            self._lock.release()

    def get_by_id(self, booking_id: str) -> Booking:
        self._acquire()
        try:
            booking = self._bookings.get(booking_id)
        finally:
            self._lock.release()
        if booking is None:
            raise NotFound(booking_id)
        return booking

    def update(
        self,
        booking_id: str,
        fields: dict[str, Any],
        expected_status: BookingStatus | None = None,
    ) -> Booking:
        unknown = set(fields) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update booking fields: {sorted(unknown)}")

        self._acquire()
        try:
            current = self._bookings.get(booking_id)
            if current is None:
                raise NotFound(booking_id)
            if expected_status is not None and current.status != expected_status:
                raise BookingStatusChanged(booking_id, expected_status.value, current.status.value)

            updated = replace(current, **fields)
            self._release_slot(current)
            try:
                if updated.status == BookingStatus.confirmed:
                    self._claim_slot(updated)
            except SlotAlreadyBooked:
                if current.status == BookingStatus.confirmed:
                    self._claim_slot(current)
                raise
            self._bookings[booking_id] = updated
            return updated
        finally:
            self._lock.release()

    def delete(self, booking_id: str) -> None:
        self._acquire()
        try:
            booking = self._bookings.pop(booking_id, None)
            if booking is None:
                raise NotFound(booking_id)
            self._release_slot(booking)
        finally:
            self._lock.release()

    def list_by_photographer_and_date(
        self,
        photographer_id: str,
        event_date: date,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        self._acquire()
        try:
            return [
                booking
                for booking in self._bookings.values()
                if booking.photographer_id == photographer_id
                and booking.event_date == event_date
                and (status is None or booking.status == status)
            ]
        finally:
            self._lock.release()

    def list_by_photographer(self, photographer_id: str, filters: BookingFilters) -> list[Booking]:
        return self._list(lambda booking: booking.photographer_id == photographer_id, filters)

    def list_by_client(self, client_id: str, filters: BookingFilters) -> list[Booking]:
        return self._list(lambda booking: booking.client_id == client_id, filters)

    def _list(self, predicate, filters: BookingFilters) -> list[Booking]:
        self._acquire()
        try:
            matches = [
                booking
                for booking in self._bookings.values()
                if predicate(booking) and filters.matches(booking)
            ]
        finally:
            self._lock.release()
        matches.sort(key=lambda booking: booking.created_at, reverse=True)
        return matches[filters.offset : filters.offset + filters.limit]

    def _claim_slot(self, booking: Booking) -> None:
        key = booking.slot_key
        if key is None:
            return
        holder = self._confirmed_slots.get(key)
        if holder is not None and holder != booking.id:
            raise SlotAlreadyBooked(*key)
        self._confirmed_slots[key] = booking.id

    def _release_slot(self, booking: Booking) -> None:
        key = booking.slot_key
        if key is not None and self._confirmed_slots.get(key) == booking.id:
            del self._confirmed_slots[key]
