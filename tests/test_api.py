from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.application.use_cases.notify_parties import NotifyPartiesUseCase
from app.application.use_cases.reservations import ReservationService
from app.main import app
from app.wiring.dependencies import get_reservation_service


PHOTOGRAPHER = {"X-Actor-Id": "P1", "X-Actor-Role": "photographer"}
CLIENT = {"X-Actor-Id": "C1", "X-Actor-Role": "client"}


@pytest.fixture
def api(service):
    app.dependency_overrides[get_reservation_service] = lambda: service
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


def _availability(api) -> dict:
    resp = api.get("/api/v1/bookings/availability", params={"photographerId": "P1", "date": "2024-06-15"})
    assert resp.status_code == 200
    return {slot["time"]: slot["available"] for slot in resp.json()["availability"]}


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_booking_round_trip_over_http(api, make_payload):
    resp = api.post("/api/v1/bookings", json=make_payload())
    assert resp.status_code == 201
    booking = resp.json()["booking"]
    assert booking["status"] == "pending"
    assert booking["event_time"] == "10:00 AM"
    assert _availability(api)["10:00 AM"] is True

    resp = api.patch(f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=PHOTOGRAPHER)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Booking confirmed successfully"
    assert _availability(api)["10:00 AM"] is False

    second = api.post("/api/v1/bookings", json=make_payload(clientId="C2")).json()["booking"]
    resp = api.patch(f"/api/v1/bookings/{second['id']}", json={"status": "confirmed"}, headers=PHOTOGRAPHER)
    assert resp.status_code == 409
    assert api.get(f"/api/v1/bookings/{second['id']}").json()["booking"]["status"] == "pending"


def test_availability_response_shape(api):
    resp = api.get("/api/v1/bookings/availability", params={"photographerId": "P1", "date": "2024-06-15"})

    body = resp.json()
    assert body["date"] == "2024-06-15"
    assert body["photographerId"] == "P1"
    assert body["totalSlots"] == 10
    assert body["availableSlots"] == 10
    assert body["availability"][0] == {"id": "morning-1", "time": "09:00 AM", "price": 150, "available": True}


def test_error_mapping(api, make_payload):
    resp = api.post("/api/v1/bookings", json=make_payload(totalAmount=None, eventTime="8pm"))
    assert resp.status_code == 400
    details = resp.json()["detail"]["details"]
    assert set(details) == {"total_amount", "event_time"}

    assert api.get("/api/v1/bookings/nope").status_code == 404
    assert api.get("/api/v1/bookings/availability", params={"photographerId": "P1"}).status_code == 400
    assert (
        api.get("/api/v1/bookings/availability", params={"photographerId": "P1", "date": "June"}).status_code
        == 400
    )

    booking = api.post("/api/v1/bookings", json=make_payload()).json()["booking"]
    url = f"/api/v1/bookings/{booking['id']}"
    assert api.patch(url, json={"status": "confirmed"}).status_code == 401
    assert api.patch(url, json={"status": "confirmed"}, headers=CLIENT).status_code == 403
    assert api.patch(url, json={"status": "bogus"}, headers=PHOTOGRAPHER).status_code == 400

    assert api.patch(url, json={"status": "declined"}, headers=PHOTOGRAPHER).status_code == 200
    resp = api.patch(url, json={"status": "confirmed"}, headers=PHOTOGRAPHER)
    assert resp.status_code == 409
    assert resp.json()["detail"]["current"] == "declined"


def test_cancel_delete_and_list(api, make_payload):
    first = api.post("/api/v1/bookings", json=make_payload()).json()["booking"]
    second = api.post("/api/v1/bookings", json=make_payload(eventTime="11:00 AM")).json()["booking"]

    assert api.post(f"/api/v1/bookings/{first['id']}/cancel", headers=CLIENT).status_code == 204
    assert api.delete(f"/api/v1/bookings/{second['id']}", headers=PHOTOGRAPHER).status_code == 403
    assert api.delete(f"/api/v1/bookings/{second['id']}", headers=CLIENT).json() == {
        "message": "Booking deleted successfully"
    }

    resp = api.get("/api/v1/bookings", params={"photographerId": "P1"})
    assert resp.status_code == 200
    body = resp.json()
    assert [b["id"] for b in body["bookings"]] == [first["id"]]
    assert body["bookings"][0]["status"] == "cancelled"
    assert body["pagination"] == {"limit": 20, "offset": 0, "total": 1}

    resp = api.get("/api/v1/bookings", params={"userId": "C1", "status": "pending"})
    assert resp.json()["bookings"] == []


def test_store_outage_maps_to_503(make_payload, notifier, unwritable_store):
    store = unwritable_store
    app.dependency_overrides[get_reservation_service] = lambda: ReservationService(
        store=store, notify=NotifyPartiesUseCase(notifier)
    )
    try:
        with TestClient(app) as client:
            booking = client.post("/api/v1/bookings", json=make_payload()).json()["booking"]
            resp = client.patch(
                f"/api/v1/bookings/{booking['id']}", json={"status": "confirmed"}, headers=PHOTOGRAPHER
            )
    finally:
        app.dependency_overrides.clear()

    assert resp.status_code == 503
    assert resp.headers["Retry-After"] == "1"
    assert store.get_by_id(booking["id"]).status.value == "pending"
