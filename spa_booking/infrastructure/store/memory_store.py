from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from datetime import datetime
from typing import Iterable

from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.coupon_store import CouponStorePort
from spa_booking.domain.entities.booking import Booking, BookingStatus, BookingType
from spa_booking.domain.entities.coupon import Coupon


def new_booking_id() -> str:
    return uuid.uuid4().hex[:20]


def select_slot_bookings(
    bookings: Iterable[Booking],
    date: str,
    time: str,
    statuses: Iterable[BookingStatus],
    technician_id: str | None = None,
) -> list[Booking]:
    wanted = set(statuses)
    return [
        b
        for b in bookings
        if b.booking_type == BookingType.service
        and b.date == date
        and b.time == time
        and b.status in wanted
        and (technician_id is None or b.technician_id == technician_id)
    ]


def select_room_bookings(
    bookings: Iterable[Booking], room_type_id: str, statuses: Iterable[BookingStatus]
) -> list[Booking]:
    wanted = set(statuses)
    return [
        b
        for b in bookings
        if b.booking_type == BookingType.room
        and b.booking_info is not None
        and b.booking_info.room_type_id == room_type_id
        and b.status in wanted
    ]


def _digits(phone: str) -> str:
    return "".join(ch for ch in phone if ch.isdigit())


def select_by_phone(bookings: Iterable[Booking], phone: str) -> list[Booking]:
    target = _digits(phone)
    if not target:
        return []
    matches = [b for b in bookings if _digits(b.customer_info.phone) == target]
    return sorted(matches, key=lambda b: b.created_at or datetime.min, reverse=True)


class KeyedLocks:
    """Lazily created lock per key."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.Lock] = {}
        self._lock_lock = threading.Lock()

    def get(self, key: str) -> threading.Lock:
        with self._lock_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]


class MemoryBookingStore(BookingStorePort):
    def __init__(self) -> None:
        self._bookings: dict[str, Booking] = {}
        self._write_lock = threading.Lock()
        self._admission = KeyedLocks()

    def create(self, booking: Booking) -> Booking:
        stored = replace(booking, booking_id=booking.booking_id or new_booking_id())
        with self._write_lock:
            self._bookings[stored.booking_id] = stored
        return stored

    def get(self, booking_id: str) -> Booking | None:
        return self._bookings.get(booking_id)

    def save(self, booking: Booking) -> None:
        with self._write_lock:
            self._bookings[booking.booking_id] = booking

    def delete(self, booking_id: str) -> bool:
        with self._write_lock:
            return self._bookings.pop(booking_id, None) is not None

    def _snapshot(self) -> list[Booking]:
        with self._write_lock:
            return list(self._bookings.values())

    def find_slot_bookings(
        self,
        date: str,
        time: str,
        statuses: Iterable[BookingStatus],
        technician_id: str | None = None,
    ) -> list[Booking]:
        return select_slot_bookings(self._snapshot(), date, time, statuses, technician_id)

    def find_room_bookings(self, room_type_id: str, statuses: Iterable[BookingStatus]) -> list[Booking]:
        return select_room_bookings(self._snapshot(), room_type_id, statuses)

    def find_by_status(self, statuses: Iterable[BookingStatus]) -> list[Booking]:
        wanted = set(statuses)
        return [b for b in self._snapshot() if b.status in wanted]

    def find_by_phone(self, phone: str) -> list[Booking]:
        return select_by_phone(self._snapshot(), phone)

    def admission_lock(self, key: str) -> threading.Lock:
        return self._admission.get(key)


class MemoryCouponStore(CouponStorePort):
    """Coupons keyed by (user_id, coupon_id)."""

    def __init__(self, coupons: dict[str, list[Coupon]] | None = None) -> None:
        self._coupons: dict[tuple[str, str], Coupon] = {}
        self._lock = threading.Lock()
        for user_id, items in (coupons or {}).items():
            for coupon in items:
                self._coupons[(user_id, coupon.coupon_id)] = coupon

    def add(self, user_id: str, coupon: Coupon) -> None:
        with self._lock:
            self._coupons[(user_id, coupon.coupon_id)] = coupon

    def get_coupon(self, user_id: str, coupon_id: str) -> Coupon | None:
        return self._coupons.get((user_id, coupon_id))

    def mark_used(self, user_id: str, coupon_id: str, booking_id: str, used_at: datetime) -> bool:
        with self._lock:
            coupon = self._coupons.get((user_id, coupon_id))
            if coupon is None or coupon.used:
                return False
            self._coupons[(user_id, coupon_id)] = replace(
                coupon, used=True, used_at=used_at, booking_id=booking_id
            )
            return True
