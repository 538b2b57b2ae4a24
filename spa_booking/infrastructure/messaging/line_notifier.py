from __future__ import annotations

import logging
from typing import Any

import httpx

from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification, NotificationPort
from spa_booking.infrastructure.messaging.line_client import LineMessagingClient
from spa_booking.infrastructure.messaging.telegram_client import TelegramClient
from spa_booking.infrastructure.messaging.templates import admin_text, customer_text


class LineNotifier(NotificationPort):
    """
    Customers are reached by LINE push.
    Admins are reached by LINE multicast, with Telegram as the fallback channel
    when no admin LINE ids are configured or the multicast fails.
    """

    def __init__(
        self,
        line: LineMessagingClient,
        admin_line_ids: list[str],
        telegram: TelegramClient | None = None,
        currency: str = "THB",
    ) -> None:
        self._line = line
        self._admin_line_ids = list(admin_line_ids)
        self._telegram = telegram
        self._currency = currency
        self._logger = logging.getLogger(__name__)

    def notify_customer(self, user_id: str, notification: CustomerNotification, payload: dict[str, Any]) -> None:
        self._line.push_text(user_id, customer_text(notification, payload, self._currency))
        self._logger.info(
            "Customer notified",
            extra={"booking_id": payload.get("bookingId"), "user_id": user_id, "reason": notification.value},
        )

    def notify_admins(self, notification: AdminNotification, payload: dict[str, Any]) -> None:
        text = admin_text(notification, payload, self._currency)
        if self._admin_line_ids:
            try:
                self._line.multicast_text(self._admin_line_ids, text)
                return
            except httpx.HTTPError as e:
                if self._telegram is None:
                    raise
                self._logger.warning(
                    "Admin LINE multicast failed, falling back to Telegram",
                    extra={"booking_id": payload.get("bookingId"), "error": str(e)},
                )
        if self._telegram is None:
            self._logger.warning("No admin channel configured", extra={"reason": notification.value})
            return
        self._telegram.send_text(text)
