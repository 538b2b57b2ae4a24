from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any


class CustomerNotification(str, Enum):
    new_booking = "newBooking"
    appointment_confirmed = "appointmentConfirmed"
    service_completed = "serviceCompleted"
    review_request = "reviewRequest"
    appointment_cancelled = "appointmentCancelled"
    payment_confirmed = "paymentConfirmed"
    payment_invoice = "paymentInvoice"


class AdminNotification(str, Enum):
    new_booking = "newBooking"
    payment_received = "paymentReceived"
    customer_confirmed = "customerConfirmed"
    booking_cancelled = "bookingCancelled"
    payment_slip = "paymentSlip"


class NotificationPort(ABC):
    @abstractmethod
    def notify_customer(self, user_id: str, notification: CustomerNotification, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    @abstractmethod
    def notify_admins(self, notification: AdminNotification, payload: dict[str, Any]) -> None:
        raise NotImplementedError
