from __future__ import annotations

import logging

from spa_booking.application.ports.calendar import CalendarSyncPort
from spa_booking.domain.entities.booking import Booking


class MockCalendarSync(CalendarSyncPort):
    def __init__(self) -> None:
        self._events: dict[str, dict[str, str | None]] = {}
        self._logger = logging.getLogger(__name__)

    def upsert_event(self, booking: Booking) -> str:
        event_id = f"mock_event_{booking.booking_id}"
        self._events[booking.booking_id] = {
            "event_id": event_id,
            "title": f"{booking.customer_info.name or 'Customer'} - {booking.display_name}",
            "date": booking.date,
            "time": booking.time,
            "status": booking.status.value,
        }
        self._logger.info(
            "Mock calendar event upserted",
            extra={"booking_id": booking.booking_id, "status": booking.status.value},
        )
        return event_id

    def delete_event(self, booking_id: str) -> bool:
        if booking_id in self._events:
            del self._events[booking_id]
            self._logger.info("Mock calendar event cancelled", extra={"booking_id": booking_id})
            return True
        return False

    def event_for(self, booking_id: str) -> dict[str, str | None] | None:
        return self._events.get(booking_id)
