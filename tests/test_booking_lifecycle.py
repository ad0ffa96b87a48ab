"""
Tests for booking status transitions and double-booking protection.
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from app.application.exceptions import (
    InvalidTransition,
    NotFound,
    PermissionDenied,
    SlotAlreadyBooked,
    ValidationError,
)
from app.application.use_cases.booking_lifecycle import BookingLifecycle
from app.application.use_cases.conflict_checker import ConflictChecker
from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.application.use_cases.reservations import ReservationService
from app.domain.entities.booking import Actor, ActorRole, BookingStatus
from app.domain.entities.notification import NotificationKind


def test_scenario_a_new_booking_is_pending_and_slot_stays_free(make_payload, service, notifier):
    booking = service.create_booking(make_payload())

    assert booking.status == BookingStatus.pending
    assert booking.created_at == booking.updated_at
    assert service.get_availability("P1", "2024-06-15").is_available("10:00 AM") is True
    assert [e.kind for e in notifier.events] == [NotificationKind.booking_requested]
    assert notifier.events[0].recipient_role == ActorRole.photographer
    assert notifier.events[0].recipient_id == "P1"


def test_scenario_b_confirmation_occupies_slot(make_payload, service, photographer, notifier):
    booking = service.create_booking(make_payload())

    confirmed = service.transition_booking(booking.id, "confirmed", photographer)

    assert confirmed.status == BookingStatus.confirmed
    assert confirmed.updated_at > booking.updated_at
    assert service.get_availability("P1", "2024-06-15").is_available("10:00 AM") is False
    assert notifier.events[-1].kind == NotificationKind.booking_confirmed
    assert notifier.events[-1].recipient_id == "C1"


def test_scenario_c_second_request_is_created_but_cannot_be_confirmed(make_payload, service, photographer):
    first = service.create_booking(make_payload())
    service.transition_booking(first.id, BookingStatus.confirmed, photographer)

    second = service.create_booking(make_payload(clientId="C2"))
    assert second.status == BookingStatus.pending

    with pytest.raises(SlotAlreadyBooked):
        service.transition_booking(second.id, BookingStatus.confirmed, photographer)

    assert service.get_booking(second.id).status == BookingStatus.pending


def test_scenario_d_declined_booking_cannot_be_confirmed(make_payload, service, photographer):
    booking = service.create_booking(make_payload())

    declined = service.transition_booking(booking.id, "declined", photographer)
    assert declined.status == BookingStatus.declined

    with pytest.raises(InvalidTransition) as exc_info:
        service.transition_booking(booking.id, "confirmed", photographer)

    assert exc_info.value.current == "declined"
    assert exc_info.value.requested == "confirmed"


def test_scenario_e_concurrent_confirmations_yield_one_winner(make_payload, service, store, photographer):
    first = service.create_booking(make_payload())
    second = service.create_booking(make_payload(clientId="C2"))
    barrier = threading.Barrier(2)

    def confirm(booking_id: str) -> str:
        barrier.wait()
        try:
            service.transition_booking(booking_id, "confirmed", photographer)
            return "confirmed"
        except SlotAlreadyBooked:
            return "rejected"

    with ThreadPoolExecutor(max_workers=2) as pool:
        outcomes = list(pool.map(confirm, [first.id, second.id]))

    assert sorted(outcomes) == ["confirmed", "rejected"]
    confirmed = store.list_by_photographer_and_date("P1", first.event_date, status=BookingStatus.confirmed)
    assert len(confirmed) == 1


def test_store_rejects_second_confirmation_even_without_precheck(make_payload, service, store, notifier, photographer):
    class NeverConflicts(ConflictChecker):
        def has_conflict(self, *args, **kwargs) -> bool:
            return False

    lifecycle = BookingLifecycle(store, NeverConflicts(store), NotifyPartiesUseCase(notifier))
    first = service.create_booking(make_payload())
    second = service.create_booking(make_payload(clientId="C2"))

    lifecycle.request_transition(first.id, BookingStatus.confirmed, photographer)
    with pytest.raises(SlotAlreadyBooked):
        lifecycle.request_transition(second.id, BookingStatus.confirmed, photographer)

    assert store.get_by_id(second.id).status == BookingStatus.pending


def test_self_is_excluded_from_conflict_check(make_payload, service, photographer):
    booking = service.create_booking(make_payload())
    confirmed = service.transition_booking(booking.id, "confirmed", photographer)

    assert service.has_conflict("P1", confirmed.event_date, "10:00 AM", exclude_booking_id=booking.id) is False
    assert service.has_conflict("P1", confirmed.event_date, "10:00 AM") is True

    # Re-confirming is a disallowed edge, not a slot conflict
    with pytest.raises(InvalidTransition):
        service.transition_booking(booking.id, "confirmed", photographer)


@pytest.mark.parametrize("terminal", ["declined", "cancelled"])
def test_terminal_statuses_never_transition(make_payload, service, photographer, admin, terminal):
    booking = service.create_booking(make_payload())
    service.transition_booking(booking.id, terminal, photographer)

    for target in BookingStatus:
        with pytest.raises(InvalidTransition):
            service.transition_booking(booking.id, target, admin)

    assert service.get_booking(booking.id).status.value == terminal


def test_confirmed_booking_can_only_be_cancelled(make_payload, service, photographer, client_actor, notifier):
    booking = service.create_booking(make_payload())
    service.transition_booking(booking.id, "confirmed", photographer)

    with pytest.raises(InvalidTransition):
        service.transition_booking(booking.id, "declined", photographer)
    with pytest.raises(InvalidTransition):
        service.transition_booking(booking.id, "pending", photographer)

    service.cancel_booking(booking.id, client_actor)

    assert service.get_booking(booking.id).status == BookingStatus.cancelled
    last = notifier.events[-1]
    assert last.kind == NotificationKind.booking_cancelled
    assert last.recipient_role == ActorRole.photographer


def test_only_the_booked_photographer_decides(make_payload, service, client_actor):
    booking = service.create_booking(make_payload())
    other_photographer = Actor(id="P2", role=ActorRole.photographer)

    with pytest.raises(PermissionDenied):
        service.transition_booking(booking.id, "confirmed", client_actor)
    with pytest.raises(PermissionDenied):
        service.transition_booking(booking.id, "declined", other_photographer)

    assert service.get_booking(booking.id).status == BookingStatus.pending


def test_cancellation_requires_a_party_or_admin(make_payload, service, admin, notifier):
    booking = service.create_booking(make_payload())
    stranger = Actor(id="C9", role=ActorRole.client)

    with pytest.raises(PermissionDenied):
        service.cancel_booking(booking.id, stranger)

    service.cancel_booking(booking.id, admin)

    assert service.get_booking(booking.id).status == BookingStatus.cancelled
    cancelled_to = {e.recipient_role for e in notifier.events if e.kind == NotificationKind.booking_cancelled}
    assert cancelled_to == {ActorRole.client, ActorRole.photographer}


def test_photographer_notes_saved_with_decision(make_payload, service, photographer):
    booking = service.create_booking(make_payload())

    declined = service.transition_booking(booking.id, "declined", photographer, notes="Fully booked that week")

    assert declined.photographer_notes == "Fully booked that week"


def test_unknown_status_and_missing_booking(make_payload, service, photographer):
    booking = service.create_booking(make_payload())

    with pytest.raises(ValidationError) as exc_info:
        service.transition_booking(booking.id, "archived", photographer)
    assert "status" in exc_info.value.errors

    with pytest.raises(NotFound):
        service.transition_booking("missing", "confirmed", photographer)


def test_notifier_failure_does_not_roll_back(make_payload, store, failing_notifier, photographer):
    service = ReservationService(store=store, notify=NotifyPartiesUseCase(failing_notifier))

    booking = service.create_booking(make_payload())
    confirmed = service.transition_booking(booking.id, "confirmed", photographer)

    assert confirmed.status == BookingStatus.confirmed
    assert store.get_by_id(booking.id).status == BookingStatus.confirmed


def test_bookings_without_time_never_conflict(make_payload, service, photographer):
    first = service.create_booking(make_payload(eventTime=None))
    second = service.create_booking(make_payload(eventTime=None, clientId="C2"))

    service.transition_booking(first.id, "confirmed", photographer)
    service.transition_booking(second.id, "confirmed", photographer)

    assert service.get_availability("P1", "2024-06-15").available_slots == 10


def test_delete_booking_removes_it_from_conflict_checks(make_payload, service, photographer, client_actor):
    first = service.create_booking(make_payload())
    service.transition_booking(first.id, "confirmed", photographer)

    with pytest.raises(PermissionDenied):
        service.delete_booking(first.id, photographer)

    service.delete_booking(first.id, client_actor)

    with pytest.raises(NotFound):
        service.get_booking(first.id)
    second = service.create_booking(make_payload(clientId="C2"))
    assert service.transition_booking(second.id, "confirmed", photographer).status == BookingStatus.confirmed


def test_list_bookings_filters_and_orders_newest_first(make_payload, service, photographer):
    first = service.create_booking(make_payload())
    second = service.create_booking(make_payload(eventTime="11:00 AM"))
    service.create_booking(make_payload(photographerId="P2"))
    service.transition_booking(first.id, "confirmed", photographer)

    assert [b.id for b in service.list_bookings(photographer_id="P1")] == [second.id, first.id]
    assert [b.id for b in service.list_bookings(photographer_id="P1", status="confirmed")] == [first.id]
    assert len(service.list_bookings(client_id="C1")) == 3
    assert [b.id for b in service.list_bookings(photographer_id="P1", limit=1, offset=1)] == [first.id]

    with pytest.raises(ValidationError):
        service.list_bookings()


def test_combined_filters_apply_before_pagination(make_payload, service):
    own = service.create_booking(make_payload(eventTime="09:00 AM"))
    for client_id in ("C2", "C3", "C4"):
        service.create_booking(make_payload(clientId=client_id))

    page = service.list_bookings(photographer_id="P1", client_id="C1", limit=2)

    assert [b.id for b in page] == [own.id]
    assert service.list_bookings(photographer_id="P1", client_id="C1", offset=1) == []
