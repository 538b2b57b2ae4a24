from __future__ import annotations

import logging
from typing import Any

from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification, NotificationPort
from spa_booking.infrastructure.messaging.templates import admin_text, customer_text


class MockNotifier(NotificationPort):
    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self._logger = logging.getLogger(__name__)

    def notify_customer(self, user_id: str, notification: CustomerNotification, payload: dict[str, Any]) -> None:
        text = customer_text(notification, payload)
        self.sent.append({"to": user_id, "type": notification.value, "payload": payload, "text": text})
        self._logger.info("Mock customer notification", extra={"user_id": user_id, "reason": notification.value})

    def notify_admins(self, notification: AdminNotification, payload: dict[str, Any]) -> None:
        text = admin_text(notification, payload)
        self.sent.append({"to": "admins", "type": notification.value, "payload": payload, "text": text})
        self._logger.info("Mock admin notification", extra={"reason": notification.value})

    def types_sent_to(self, recipient: str) -> list[str]:
        return [m["type"] for m in self.sent if m["to"] == recipient]
