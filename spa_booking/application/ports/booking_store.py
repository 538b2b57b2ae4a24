from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Iterable

from spa_booking.domain.entities.booking import Booking, BookingStatus


class BookingStorePort(ABC):
    @abstractmethod
    def create(self, booking: Booking) -> Booking:
        """Persist a new booking under a generated id. Returns the stored booking."""
        raise NotImplementedError

    @abstractmethod
    def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    @abstractmethod
    def save(self, booking: Booking) -> None:
        """Overwrite an existing booking document."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, booking_id: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def find_slot_bookings(
        self,
        date: str,
        time: str,
        statuses: Iterable[BookingStatus],
        technician_id: str | None = None,
    ) -> list[Booking]:
        """Service bookings at (date, time) in one of statuses, optionally for one technician."""
        raise NotImplementedError

    @abstractmethod
    def find_room_bookings(self, room_type_id: str, statuses: Iterable[BookingStatus]) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def find_by_status(self, statuses: Iterable[BookingStatus]) -> list[Booking]:
        raise NotImplementedError

    @abstractmethod
    def find_by_phone(self, phone: str) -> list[Booking]:
        """Bookings whose customer phone matches, newest first."""
        raise NotImplementedError

    @abstractmethod
    def admission_lock(self, key: str) -> AbstractContextManager[None]:
        """
        Serialize admission for one key (a slot, a room type or a coupon).
        Held across the availability count or coupon check and the create write.
        """
        raise NotImplementedError
