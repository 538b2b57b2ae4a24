from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable

from spa_booking.application.exceptions import PersistenceError
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.domain.entities.booking import Booking, BookingStatus
from spa_booking.infrastructure.store.documents import booking_from_document, booking_to_document
from spa_booking.infrastructure.store.memory_store import (
    KeyedLocks,
    new_booking_id,
    select_by_phone,
    select_room_bookings,
    select_slot_bookings,
)

logger = logging.getLogger(__name__)


class JsonBookingStore(BookingStorePort):
    """One JSON document per booking under data_dir."""

    def __init__(self, data_dir: str = "./data/bookings") -> None:
        self._data_dir = Path(data_dir)
        self._data_dir.mkdir(parents=True, exist_ok=True)
        self._locks = KeyedLocks()
        self._admission = KeyedLocks()

    def _get_lock(self, booking_id: str) -> threading.Lock:
        return self._locks.get(booking_id)

    def _get_file_path(self, booking_id: str) -> Path:
        return self._data_dir / f"{booking_id}.json"

    def _load_document(self, file_path: Path) -> dict[str, Any] | None:
        """Load a booking document, None if missing or corrupted."""
        if not file_path.exists():
            return None
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(
                "Skipping unreadable booking document",
                extra={"booking_id": file_path.stem, "error": str(e)},
            )
            return None

    def _save_document(self, booking_id: str, data: dict[str, Any]) -> None:
        """Save a booking document atomically."""
        file_path = self._get_file_path(booking_id)
        temp_path = file_path.with_suffix(".json.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(file_path)
        except (OSError, TypeError, ValueError) as e:
            if temp_path.exists():
                temp_path.unlink(missing_ok=True)
            raise PersistenceError(f"Failed to write booking {booking_id}: {e}") from e

    def _load_all(self) -> list[Booking]:
        bookings = []
        for file_path in sorted(self._data_dir.glob("*.json")):
            data = self._load_document(file_path)
            if data is None:
                continue
            try:
                bookings.append(booking_from_document(data))
            except (ValueError, TypeError) as e:
                logger.warning(
                    "Skipping malformed booking document",
                    extra={"booking_id": file_path.stem, "error": str(e)},
                )
        return bookings

    def create(self, booking: Booking) -> Booking:
        stored = replace(booking, booking_id=booking.booking_id or new_booking_id())
        with self._get_lock(stored.booking_id):
            self._save_document(stored.booking_id, booking_to_document(stored))
        return stored

    def get(self, booking_id: str) -> Booking | None:
        with self._get_lock(booking_id):
            data = self._load_document(self._get_file_path(booking_id))
        if data is None:
            return None
        try:
            return booking_from_document(data)
        except (ValueError, TypeError) as e:
            raise PersistenceError(f"Malformed booking {booking_id}: {e}") from e

    def save(self, booking: Booking) -> None:
        with self._get_lock(booking.booking_id):
            self._save_document(booking.booking_id, booking_to_document(booking))

    def delete(self, booking_id: str) -> bool:
        with self._get_lock(booking_id):
            file_path = self._get_file_path(booking_id)
            if not file_path.exists():
                return False
            try:
                file_path.unlink()
            except OSError as e:
                raise PersistenceError(f"Failed to delete booking {booking_id}: {e}") from e
            return True

    def find_slot_bookings(
        self,
        date: str,
        time: str,
        statuses: Iterable[BookingStatus],
        technician_id: str | None = None,
    ) -> list[Booking]:
        return select_slot_bookings(self._load_all(), date, time, statuses, technician_id)

    def find_room_bookings(self, room_type_id: str, statuses: Iterable[BookingStatus]) -> list[Booking]:
        return select_room_bookings(self._load_all(), room_type_id, statuses)

    def find_by_status(self, statuses: Iterable[BookingStatus]) -> list[Booking]:
        wanted = set(statuses)
        return [b for b in self._load_all() if b.status in wanted]

    def find_by_phone(self, phone: str) -> list[Booking]:
        return select_by_phone(self._load_all(), phone)

    def admission_lock(self, key: str) -> threading.Lock:
        return self._admission.get(key)
