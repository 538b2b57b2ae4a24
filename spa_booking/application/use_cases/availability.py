from __future__ import annotations

import logging
from datetime import date

from spa_booking.application.exceptions import RoomFullyBooked, SlotFull
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.settings_store import SettingsStorePort
from spa_booking.application.utils.business_time import parse_calendar_date
from spa_booking.application.utils.date_ranges import ranges_overlap
from spa_booking.domain.entities.booking import ROOM_ACTIVE_STATUSES, SLOT_HOLDING_STATUSES
from spa_booking.domain.entities.catalog import RoomType, RoomUnit

AUTO_ASSIGN = "auto-assign"


def slot_lock_key(date_str: str, time_str: str) -> str:
    return f"slot:{date_str}:{time_str}"


def room_lock_key(room_type_id: str) -> str:
    return f"room:{room_type_id}"


class AvailabilityChecker:
    """
    Admission control for new bookings. Callers hold the store's admission lock
    for the matching key across the check and the create write.
    """

    def __init__(self, bookings: BookingStorePort, settings_store: SettingsStorePort) -> None:
        self._bookings = bookings
        self._settings = settings_store
        self._logger = logging.getLogger(__name__)

    def check_service_slot(self, date_str: str, time_str: str, technician_id: str | None = None) -> None:
        settings = self._settings.get_booking_settings()
        capacity = settings.capacity_for(time_str)

        technician_exclusive = bool(settings.use_technician and technician_id and technician_id != AUTO_ASSIGN)
        if technician_exclusive:
            capacity = 1

        competing = self._bookings.find_slot_bookings(
            date_str,
            time_str,
            SLOT_HOLDING_STATUSES,
            technician_id=technician_id if technician_exclusive else None,
        )

        if len(competing) >= capacity:
            self._logger.info(
                "Slot full",
                extra={"reason": f"{date_str} {time_str} count={len(competing)} capacity={capacity}"},
            )
            if technician_exclusive:
                raise SlotFull("This technician is not available at the selected time.")
            raise SlotFull("This time slot is fully booked.")

    def check_room(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
        rooms_requested: int,
    ) -> list[RoomUnit]:
        """Admit a stay and return the concrete units assigned to it."""
        inventory = room_type.usable_units()
        reserved = 0
        occupied: set[str] = set()

        for booking in self._bookings.find_room_bookings(room_type.room_type_id, ROOM_ACTIVE_STATUSES):
            info = booking.booking_info
            if info is None or info.room_type_id != room_type.room_type_id:
                continue
            other_in = parse_calendar_date(info.check_in_date, "checkInDate")
            other_out = parse_calendar_date(info.check_out_date, "checkOutDate")
            if not ranges_overlap(check_in, check_out, other_in, other_out):
                continue
            reserved += max(1, info.rooms)
            occupied.update(booking.assigned_room_ids)

        if reserved + rooms_requested > len(inventory):
            raise RoomFullyBooked("No rooms of this type are available for the selected dates.")

        free = [unit for unit in inventory if unit.room_id not in occupied]
        if len(free) < rooms_requested:
            raise RoomFullyBooked("No rooms of this type are available for the selected dates.")
        return free[:rooms_requested]
