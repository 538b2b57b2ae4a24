from __future__ import annotations

from abc import ABC, abstractmethod

from spa_booking.domain.entities.booking import Booking


class CalendarSyncPort(ABC):
    @abstractmethod
    def upsert_event(self, booking: Booking) -> str:
        """Create or update the calendar record for a booking. Returns event_id."""
        raise NotImplementedError

    @abstractmethod
    def delete_event(self, booking_id: str) -> bool:
        """Remove the calendar record. Returns True if one existed."""
        raise NotImplementedError
