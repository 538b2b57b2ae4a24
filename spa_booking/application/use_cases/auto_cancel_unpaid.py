from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from spa_booking.application.dto.action_result import ActionResult
from spa_booking.application.exceptions import BookingError
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.calendar import CalendarSyncPort
from spa_booking.application.ports.notifier import CustomerNotification
from spa_booking.application.utils.business_time import as_business_time, end_of_business_day
from spa_booking.application.utils.notifications import NotificationGate
from spa_booking.application.utils.side_effects import SideEffectRunner
from spa_booking.domain.entities.booking import Booking, BookingStatus, BookingType, PaymentStatus

AUTO_CANCEL_REASON = "Auto-cancel: unpaid by end of day"


class AutoCancelUnpaidUseCase:
    """
    Cancels unconfirmed service appointments whose payment deadline has passed without payment.
    Room reservations are not swept.
    """

    def __init__(
        self,
        bookings: BookingStorePort,
        calendar: CalendarSyncPort,
        notifications: NotificationGate,
        runner: SideEffectRunner,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._bookings = bookings
        self._calendar = calendar
        self._notifications = notifications
        self._runner = runner
        self._timezone = timezone
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

    def execute(self) -> ActionResult:
        now = self._clock()
        candidates = [
            b
            for b in self._bookings.find_by_status([BookingStatus.pending, BookingStatus.awaiting_confirmation])
            if b.booking_type == BookingType.service
        ]

        cancelled: list[str] = []
        for booking in candidates:
            if booking.payment_info.payment_status == PaymentStatus.paid:
                continue
            if self._effective_due(booking, now) > now:
                continue

            updated = replace(
                booking,
                status=BookingStatus.cancelled,
                cancel_reason=AUTO_CANCEL_REASON,
                cancelled_at=now,
                cancelled_by="system",
                updated_at=now,
            )
            try:
                self._bookings.save(updated)
            except BookingError as e:
                self._logger.error(
                    "Auto-cancel write failed",
                    extra={"booking_id": booking.booking_id, "error": e.message},
                )
                continue
            cancelled.append(booking.booking_id or "")
            self._runner.run("calendar_delete", self._calendar.delete_event, booking.booking_id)
            self._notifications.customer(
                updated,
                CustomerNotification.appointment_cancelled,
                reason="Payment was not received today; the booking was cancelled automatically.",
            )

        self._logger.info("Auto-cancel finished", extra={"reason": f"cancelled={len(cancelled)} checked={len(candidates)}"})
        return ActionResult(
            success=True,
            data={"cancelled": len(cancelled), "checked": len(candidates), "booking_ids": cancelled, "now": now.isoformat()},
        )

    def _effective_due(self, booking: Booking, now: datetime) -> datetime:
        if booking.payment_info.payment_due_at:
            return as_business_time(booking.payment_info.payment_due_at, self._timezone)
        created = as_business_time(booking.created_at, self._timezone) if booking.created_at else now
        return end_of_business_day(self._timezone, created)
