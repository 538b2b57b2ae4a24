from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from spa_booking.application.exceptions import BookingError, ErrorCode
from spa_booking.domain.entities.booking import Booking


@dataclass(frozen=True)
class ActionResult:
    success: bool
    error: ErrorCode | None = None
    message: str | None = None
    booking_id: str | None = None
    booking: Booking | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def ok(booking: Booking | None = None, **data: Any) -> "ActionResult":
        return ActionResult(
            success=True,
            booking_id=booking.booking_id if booking else None,
            booking=booking,
            data=data,
        )

    @staticmethod
    def failure(error: BookingError) -> "ActionResult":
        return ActionResult(success=False, error=error.code, message=error.message)
