from __future__ import annotations

import json
import logging
import threading
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Callable

from app.application.exceptions import (
    BookingStatusChanged,
    NotFound,
    SlotAlreadyBooked,
    StoreUnavailable,
)
from app.application.ports.booking_store import BookingFilters, BookingStorePort
from app.domain.entities.booking import Booking, BookingStatus

_MUTABLE_FIELDS = {f.name for f in dataclass_fields(Booking)} - {"id", "created_at"}


class JsonBookingStore(BookingStorePort):
    """
    Bookings kept in a single JSON document.
    Every operation loads, mutates and atomically rewrites the file under one lock,
    so the confirmed-slot check and the status write happen together.
    """

    def __init__(self, data_dir: str = "./data/bookings", lock_timeout: float = 5.0) -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._file_path = self._data_dir / "bookings.json"
        self._lock = threading.Lock()
        self._lock_timeout = lock_timeout
        self._logger = logging.getLogger(__name__)

    def create(self, booking: Booking) -> Booking:
        def mutate(bookings: dict[str, Booking]) -> Booking:
            if booking.id in bookings:
                raise ValueError(f"Booking {booking.id} already exists")
            if booking.status == BookingStatus.confirmed:
                _ensure_slot_free(bookings, booking)
            bookings[booking.id] = booking
            return booking

        return self._write(mutate)

    def get_by_id(self, booking_id: str) -> Booking:
        booking = self._read(lambda bookings: bookings.get(booking_id))
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

        def mutate(bookings: dict[str, Booking]) -> Booking:
            current = bookings.get(booking_id)
            if current is None:
                raise NotFound(booking_id)
            if expected_status is not None and current.status != expected_status:
                raise BookingStatusChanged(booking_id, expected_status.value, current.status.value)
            updated = replace(current, **fields)
            if updated.status == BookingStatus.confirmed:
                _ensure_slot_free(bookings, updated)
            bookings[booking_id] = updated
            return updated

        return self._write(mutate)

    def delete(self, booking_id: str) -> None:
        def mutate(bookings: dict[str, Booking]) -> None:
            if bookings.pop(booking_id, None) is None:
                raise NotFound(booking_id)

        self._write(mutate)

    def list_by_photographer_and_date(
        self,
        photographer_id: str,
        event_date: date,
        status: BookingStatus | None = None,
    ) -> list[Booking]:
        return self._read(
            lambda bookings: [
                booking
                for booking in bookings.values()
                if booking.photographer_id == photographer_id
                and booking.event_date == event_date
                and (status is None or booking.status == status)
            ]
        )

    def list_by_photographer(self, photographer_id: str, filters: BookingFilters) -> list[Booking]:
        return self._list(lambda booking: booking.photographer_id == photographer_id, filters)

    def list_by_client(self, client_id: str, filters: BookingFilters) -> list[Booking]:
        return self._list(lambda booking: booking.client_id == client_id, filters)

    def _list(self, predicate: Callable[[Booking], bool], filters: BookingFilters) -> list[Booking]:
        matches = self._read(
            lambda bookings: [
                booking
                for booking in bookings.values()
                if predicate(booking) and filters.matches(booking)
            ]
        )
        matches.sort(key=lambda booking: booking.created_at, reverse=True)
        return matches[filters.offset : filters.offset + filters.limit]

    def _read(self, fn):
        with self._locked():
            return fn(self._load())

    def _write(self, mutate):
        with self._locked():
            bookings = self._load()
            result = mutate(bookings)
            self._save(bookings)
            return result

    def _locked(self) -> "_LockGuard":
        return _LockGuard(self._lock, self._lock_timeout)

    def _load(self) -> dict[str, Booking]:
        """Load all bookings. Missing file means an empty store; unreadable file is an outage."""
        if not self._file_path.exists():
            return {}
        try:
            with open(self._file_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return {
                booking_id: _deserialize_booking(raw)
                for booking_id, raw in data.get("bookings", {}).items()
            }
        except (json.JSONDecodeError, OSError, KeyError, ValueError, InvalidOperation) as e:
            self._logger.error("Failed to load booking store", extra={"error": str(e)})
            raise StoreUnavailable(f"Cannot read {self._file_path}") from e

    def _save(self, bookings: dict[str, Booking]) -> None:
        """Save all bookings atomically."""
        data = {
            "version": 1,
            "bookings": {booking_id: _serialize_booking(b) for booking_id, b in bookings.items()},
        }
        temp_path = self._file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self._file_path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            self._logger.error("Failed to save booking store", extra={"error": str(e)})
            raise StoreUnavailable(f"Cannot write {self._file_path}") from e


class _LockGuard:
    def __init__(self, lock: threading.Lock, timeout: float) -> None:
        self._lock = lock
        self._timeout = timeout

    def __enter__(self) -> None:
        if not self._lock.acquire(timeout=self._timeout):
            raise StoreUnavailable("Timed out waiting for the booking store")

    def __exit__(self, *exc_info: object) -> None:
        self._lock.release()


def _ensure_slot_free(bookings: dict[str, Booking], candidate: Booking) -> None:
    key = candidate.slot_key
    if key is None:
        return
    for other in bookings.values():
        if other.id != candidate.id and other.status == BookingStatus.confirmed and other.slot_key == key:
            raise SlotAlreadyBooked(*key)


def _serialize_booking(booking: Booking) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for f in dataclass_fields(Booking):
        value = getattr(booking, f.name)
        if isinstance(value, BookingStatus):
            value = value.value
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        result[f.name] = value
    return result


def _deserialize_booking(data: dict[str, Any]) -> Booking:
    return Booking(
        id=data["id"],
        client_id=data["client_id"],
        photographer_id=data["photographer_id"],
        event_type=data["event_type"],
        event_date=date.fromisoformat(data["event_date"]),
        event_location=data["event_location"],
        total_amount=Decimal(data["total_amount"]),
        deposit_amount=Decimal(data.get("deposit_amount") or "0"),
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
        status=BookingStatus(data.get("status", "pending")),
        event_time=data.get("event_time"),
        duration_hint=data.get("duration_hint"),
        service_id=data.get("service_id"),
        guest_count=data.get("guest_count"),
        special_requests=data.get("special_requests"),
        client_name=data.get("client_name"),
        client_email=data.get("client_email"),
        client_phone=data.get("client_phone"),
        notes=data.get("notes"),
        photographer_notes=data.get("photographer_notes"),
    )
