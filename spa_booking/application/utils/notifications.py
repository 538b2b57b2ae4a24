from __future__ import annotations

import logging
from typing import Any

from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification, NotificationPort
from spa_booking.application.ports.settings_store import SettingsStorePort
from spa_booking.application.utils.side_effects import SideEffectRunner
from spa_booking.domain.entities.booking import Booking


def booking_payload(booking: Booking, **extra: Any) -> dict[str, Any]:
    """Flat view of a booking handed to message templates."""
    payload: dict[str, Any] = {
        "bookingId": booking.booking_id,
        "bookingType": booking.booking_type.value,
        "status": booking.status.value,
        "customerName": booking.customer_info.name or "Customer",
        "serviceName": booking.display_name,
        "date": booking.date,
        "time": booking.time,
        "totalPrice": booking.payment_info.total_price,
    }
    if booking.booking_info:
        payload["checkIn"] = booking.booking_info.check_in_date
        payload["checkOut"] = booking.booking_info.check_out_date
        payload["roomNumber"] = booking.booking_info.room_number
    payload.update(extra)
    return payload


class NotificationGate:
    """Applies notification toggles, then dispatches best-effort."""

    def __init__(
        self,
        notifier: NotificationPort,
        settings_store: SettingsStorePort,
        runner: SideEffectRunner,
    ) -> None:
        self._notifier = notifier
        self._settings = settings_store
        self._runner = runner
        self._logger = logging.getLogger(__name__)

    def customer(self, booking: Booking, notification: CustomerNotification, **extra: Any) -> None:
        if not booking.user_id:
            return
        settings = self._runner.run_now("notification_settings", self._settings.get_notification_settings)
        if settings is None or not settings.customer_allows(notification.value):
            self._logger.debug("Customer notification disabled", extra={"reason": notification.value})
            return
        self._runner.run(
            f"notify_customer:{notification.value}",
            self._notifier.notify_customer,
            booking.user_id,
            notification,
            booking_payload(booking, **extra),
        )

    def admins(self, booking: Booking, notification: AdminNotification, **extra: Any) -> None:
        settings = self._runner.run_now("notification_settings", self._settings.get_notification_settings)
        if settings is None or not settings.admin_allows(notification.value):
            self._logger.debug("Admin notification disabled", extra={"reason": notification.value})
            return
        self._runner.run(
            f"notify_admins:{notification.value}",
            self._notifier.notify_admins,
            notification,
            booking_payload(booking, **extra),
        )
