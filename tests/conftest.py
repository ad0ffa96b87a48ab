from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from app.application.exceptions import StoreUnavailable
from app.application.ports.notifier import NotifierPort
from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.application.use_cases.reservations import ReservationService
from app.domain.entities.booking import Actor, ActorRole
from app.domain.entities.notification import NotificationEvent
from app.infrastructure.store.memory_store import MemoryBookingStore


class RecordingNotifier(NotifierPort):
    def __init__(self, fail: bool = False) -> None:
        self.events: list[NotificationEvent] = []
        self.fail = fail

    def notify(self, event: NotificationEvent) -> None:
        if self.fail:
            raise ConnectionError("smtp down")
        self.events.append(event)


class TickingClock:
    """Returns a strictly increasing UTC timestamp on every call."""

    def __init__(self, start: datetime | None = None) -> None:
        self._start = start or datetime(2024, 6, 1, 9, 0, tzinfo=timezone.utc)
        self._ticks = itertools.count()

    def __call__(self) -> datetime:
        return self._start + timedelta(seconds=next(self._ticks))


class UnwritableStore(MemoryBookingStore):
    """Memory store whose writes fail like an unreachable database."""

    def __init__(self, fail_create: bool = False) -> None:
        super().__init__()
        self.fail_create = fail_create

    def create(self, booking):
        if self.fail_create:
            raise StoreUnavailable("disk full")
        return super().create(booking)

    def update(self, booking_id, fields, expected_status=None):
        raise StoreUnavailable("disk full")


def booking_payload(**overrides):
    payload = {
        "clientId": "C1",
        "photographerId": "P1",
        "eventType": "Wedding",
        "eventDate": "2024-06-15",
        "eventTime": "10:00 AM",
        "eventLocation": "City Hall",
        "totalAmount": 350,
        "clientName": "Dana",
        "clientEmail": "dana@example.com",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store() -> MemoryBookingStore:
    return MemoryBookingStore()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def service(store, notifier) -> ReservationService:
    return ReservationService(store=store, notify=NotifyPartiesUseCase(notifier), clock=TickingClock())


@pytest.fixture
def photographer() -> Actor:
    return Actor(id="P1", role=ActorRole.photographer)


@pytest.fixture
def client_actor() -> Actor:
    return Actor(id="C1", role=ActorRole.client)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="A1", role=ActorRole.admin)


@pytest.fixture
def make_payload():
    return booking_payload


@pytest.fixture
def failing_notifier() -> RecordingNotifier:
    return RecordingNotifier(fail=True)


@pytest.fixture
def unwritable_store() -> UnwritableStore:
    return UnwritableStore()
