"""
Tests for the HTTP surface.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from spa_booking.core.config import settings
from spa_booking.main import app
from spa_booking.wiring.dependencies import (
    get_auto_cancel_use_case,
    get_create_booking_use_case,
    get_status_transition_use_case,
)

from conftest import build_env

ADMIN = {"Authorization": "Bearer admin-token"}
ALICE = {"X-Line-Access-Token": "alice-token"}


@pytest.fixture
def api():
    env = build_env()
    app.dependency_overrides[get_create_booking_use_case] = lambda: env.create
    app.dependency_overrides[get_status_transition_use_case] = lambda: env.status
    app.dependency_overrides[get_auto_cancel_use_case] = lambda: env.auto_cancel
    client = TestClient(app)
    client.env = env
    yield client
    app.dependency_overrides.clear()


def _create(api, headers=ALICE, **overrides):
    body = {
        "service_id": "massage",
        "date": "2024-05-01",
        "time": "10:00",
        "add_on_names": ["Hot Stone"],
        "customer_info": {"name": "Alice", "phone": "0812345678"},
    }
    body.update(overrides)
    return api.post("/api/v1/bookings/service", json=body, headers=headers)


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_create_service_booking(api):
    resp = _create(api, coupon_id="TEN")

    assert resp.status_code == 201
    data = resp.json()
    assert data["success"] is True
    assert data["booking"]["paymentInfo"]["totalPrice"] == 540
    assert data["booking"]["status"] == "pending"
    assert data["booking"]["userId"] == "U-alice"


def test_client_prices_are_ignored(api):
    resp = _create(api, price=1, total_price=1)

    assert resp.json()["booking"]["paymentInfo"]["totalPrice"] == 600


def test_missing_credentials_is_401(api):
    resp = _create(api, headers={})

    assert resp.status_code == 401
    assert resp.json()["detail"]["error"] == "Unauthorized"


def test_full_slot_is_409(api):
    _create(api, time="14:00")

    resp = _create(api, time="14:00")

    assert resp.status_code == 409
    assert resp.json()["detail"] == {"error": "SlotFull", "message": "This time slot is fully booked."}


def test_unknown_service_is_404(api):
    assert _create(api, service_id="nope").status_code == 404


def test_room_booking(api):
    resp = api.post(
        "/api/v1/bookings/room",
        json={"room_type_id": "deluxe", "check_in_date": "2024-05-02", "check_out_date": "2024-05-04"},
        headers=ALICE,
    )

    assert resp.status_code == 201
    assert resp.json()["booking"]["bookingInfo"]["roomNumber"] == "101"


def test_lifecycle_over_http(api):
    booking_id = _create(api).json()["booking_id"]

    assert api.post(f"/api/v1/bookings/{booking_id}/confirm", headers=ADMIN).json()["booking"]["status"] == "confirmed"
    assert api.post(f"/api/v1/bookings/{booking_id}/start", headers=ADMIN).json()["booking"]["status"] == "in_progress"

    resp = api.post(f"/api/v1/bookings/{booking_id}/paid", json={"method": "cash"}, headers=ADMIN)
    assert resp.json()["booking"]["paymentInfo"]["paymentStatus"] == "paid"
    assert resp.json()["data"]["points_awarded"] == 7

    resp = api.post(f"/api/v1/bookings/{booking_id}/complete", json={"note": "Done"}, headers=ADMIN)
    assert resp.json()["booking"]["status"] == "completed"

    resp = api.post(f"/api/v1/bookings/{booking_id}/cancel", json={"reason": "late"}, headers=ADMIN)
    assert resp.status_code == 409
    assert resp.json()["detail"]["error"] == "InvalidTransition"


def test_owner_reads_and_cancels(api):
    booking_id = _create(api).json()["booking_id"]

    assert api.get(f"/api/v1/bookings/{booking_id}", headers=ALICE).status_code == 200
    assert api.get(f"/api/v1/bookings/{booking_id}", headers={"X-Line-Access-Token": "bob-token"}).status_code == 401

    resp = api.post(f"/api/v1/bookings/{booking_id}/cancel", headers=ALICE)
    assert resp.json()["booking"]["cancelReason"] == "User cancelled"


def test_find_by_phone(api):
    _create(api)

    resp = api.get("/api/v1/bookings", params={"phone": "081-234-5678"}, headers=ADMIN)

    assert resp.status_code == 200
    assert len(resp.json()["data"]["bookings"]) == 1
    assert resp.json()["data"]["bookings"][0]["customerInfo"]["name"] == "Alice"


def test_admin_force_status_and_delete(api):
    booking_id = _create(api).json()["booking_id"]

    resp = api.put(f"/api/v1/bookings/{booking_id}/status", json={"status": "completed"}, headers=ADMIN)
    assert resp.json()["booking"]["status"] == "completed"

    assert api.delete(f"/api/v1/bookings/{booking_id}", headers=ALICE).status_code == 401
    assert api.delete(f"/api/v1/bookings/{booking_id}", headers=ADMIN).status_code == 200
    assert api.get(f"/api/v1/bookings/{booking_id}", headers=ADMIN).status_code == 404


def test_invoice_and_payment_slip(api):
    booking_id = _create(api).json()["booking_id"]

    resp = api.post(f"/api/v1/bookings/{booking_id}/invoice", headers=ADMIN)
    assert resp.json()["booking"]["paymentInfo"]["paymentStatus"] == "invoiced"

    resp = api.post(f"/api/v1/bookings/{booking_id}/payment-slip", json={"slip_reference": "s.jpg"}, headers=ALICE)
    assert resp.json()["booking"]["paymentInfo"]["paymentStatus"] == "pending_verification"


def test_block_slot(api):
    resp = api.post("/api/v1/bookings/block", json={"date": "2024-05-01", "time": "14:00"}, headers=ADMIN)

    assert resp.status_code == 201
    assert resp.json()["booking"]["status"] == "blocked"
    assert _create(api, time="14:00").status_code == 409


def test_cron_requires_secret(api, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")

    assert api.post("/api/v1/cron/auto-cancel-unpaid").status_code == 401
    assert api.post("/api/v1/cron/auto-cancel-unpaid", headers={"Authorization": "Bearer nope"}).status_code == 401

    resp = api.post("/api/v1/cron/auto-cancel-unpaid", headers={"Authorization": "Bearer s3cret"})
    assert resp.status_code == 200
    assert resp.json()["data"]["cancelled"] == 0


def test_cron_without_secret_is_closed_in_production(api, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", None)
    monkeypatch.setattr(settings, "ENV", "production")

    assert api.get("/api/v1/cron/auto-cancel-unpaid").status_code == 401
