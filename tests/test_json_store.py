"""
Tests for durable booking persistence.
"""

from __future__ import annotations

import json
import tempfile
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

from spa_booking.application.exceptions import PersistenceError
from spa_booking.domain.entities.booking import (
    AreaOptionChoice,
    Booking,
    BookingStatus,
    BookingType,
    CustomerInfo,
    PaymentInfo,
    PaymentStatus,
    RoomBookingInfo,
    ServiceSnapshot,
)
from spa_booking.domain.entities.catalog import PricedOption, ServiceArea
from spa_booking.infrastructure.store.json_store import JsonBookingStore

TZ = ZoneInfo("Asia/Bangkok")


def _service_booking() -> Booking:
    return Booking(
        booking_id=None,
        booking_type=BookingType.service,
        status=BookingStatus.pending,
        customer_info=CustomerInfo(name="Alice", phone="0812345678"),
        user_id="U-alice",
        date="2024-05-01",
        time="10:00",
        service_info=ServiceSnapshot(
            service_id="laser",
            name="Laser",
            price=3600,
            duration=40,
            service_type="multi-area",
            selected_area=ServiceArea(
                name="Face",
                price=800,
                duration=20,
                packages=(PricedOption(name="5 sessions", price=3500, duration=25),),
            ),
            selected_package=PricedOption(name="5 sessions", price=3500, duration=25),
            area_index=0,
            package_index=0,
            selected_area_options=(AreaOptionChoice(area_name="Face", option_name="Basic"),),
            add_ons=(PricedOption(name="Hot Stone", price=100, duration=15),),
        ),
        payment_info=PaymentInfo(
            original_price=3600,
            discount=360,
            total_price=3240,
            payment_due_at=datetime(2024, 5, 1, 23, 59, 59, 999000, tzinfo=TZ),
            coupon_id="TEN",
        ),
        created_at=datetime(2024, 5, 1, 10, 0, tzinfo=TZ),
        points_awarded_for=frozenset({"visit"}),
    )


def test_json_store_persists_booking():
    """Test that a booking survives a new store instance over the same directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        created = JsonBookingStore(data_dir=tmpdir).create(_service_booking())

        assert created.booking_id
        loaded = JsonBookingStore(data_dir=tmpdir).get(created.booking_id)

        assert loaded == created
        assert loaded.payment_info.payment_due_at.tzinfo is not None
        assert loaded.service_info.selected_package.price == 3500


def test_document_uses_camel_case_fields():
    with tempfile.TemporaryDirectory() as tmpdir:
        created = JsonBookingStore(data_dir=tmpdir).create(_service_booking())

        with open(Path(tmpdir) / f"{created.booking_id}.json", "r", encoding="utf-8") as f:
            data = json.load(f)

        assert data["status"] == "pending"
        assert data["paymentInfo"]["totalPrice"] == 3240
        assert data["serviceInfo"]["addOns"][0]["name"] == "Hot Stone"
        assert data["pointsAwardedFor"] == ["visit"]


def test_save_overwrites_and_queries_see_changes():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        created = store.create(_service_booking())

        assert len(store.find_slot_bookings("2024-05-01", "10:00", [BookingStatus.pending])) == 1

        store.save(replace(created, status=BookingStatus.cancelled))

        assert store.find_slot_bookings("2024-05-01", "10:00", [BookingStatus.pending]) == []
        assert [b.booking_id for b in store.find_by_status([BookingStatus.cancelled])] == [created.booking_id]
        assert store.find_by_phone("081-234-5678")[0].booking_id == created.booking_id


def test_room_bookings_are_queryable_by_type():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.create(
            Booking(
                booking_id=None,
                booking_type=BookingType.room,
                status=BookingStatus.confirmed,
                booking_info=RoomBookingInfo(
                    room_type_id="deluxe",
                    check_in_date="2024-05-01",
                    check_out_date="2024-05-03",
                    nights=2,
                    rooms=2,
                    room_id="r1",
                    room_ids=("r1", "r2"),
                ),
                payment_info=PaymentInfo(payment_status=PaymentStatus.paid),
            )
        )

        found = store.find_room_bookings("deluxe", [BookingStatus.confirmed])

        assert len(found) == 1
        assert found[0].assigned_room_ids == ("r1", "r2")
        assert found[0].payment_info.payment_status == PaymentStatus.paid
        assert store.find_room_bookings("suite", [BookingStatus.confirmed]) == []


def test_delete_removes_document():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        created = store.create(_service_booking())

        assert store.delete(created.booking_id) is True
        assert store.get(created.booking_id) is None
        assert store.delete(created.booking_id) is False


def test_corrupted_documents_are_skipped_by_queries():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.create(_service_booking())
        (Path(tmpdir) / "broken.json").write_text("{not json", encoding="utf-8")

        assert len(store.find_by_status([BookingStatus.pending])) == 1
        assert store.get("broken") is None


def test_malformed_document_raises_persistence_error():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        (Path(tmpdir) / "odd.json").write_text(json.dumps({"id": "odd", "status": "teleported"}), encoding="utf-8")

        with pytest.raises(PersistenceError):
            store.get("odd")


def test_no_temp_files_left_behind():
    with tempfile.TemporaryDirectory() as tmpdir:
        store = JsonBookingStore(data_dir=tmpdir)
        store.create(_service_booking())

        assert list(Path(tmpdir).glob("*.tmp")) == []
