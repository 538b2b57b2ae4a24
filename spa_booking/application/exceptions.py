from enum import Enum


class ErrorCode(str, Enum):
    validation = "ValidationError"
    not_found = "NotFound"
    unauthorized = "Unauthorized"
    slot_full = "SlotFull"
    room_fully_booked = "RoomFullyBooked"
    invalid_coupon = "InvalidCoupon"
    coupon_already_used = "CouponAlreadyUsed"
    invalid_coupon_type = "InvalidCouponType"
    invalid_transition = "InvalidTransition"
    persistence = "PersistenceError"


class BookingError(RuntimeError):
    """Base for every failure surfaced to the caller of a booking operation."""

    code: ErrorCode = ErrorCode.validation

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code.value)
        self.message = message or self.code.value


class ValidationError(BookingError):
    code = ErrorCode.validation


class NotFound(BookingError):
    code = ErrorCode.not_found


class Unauthorized(BookingError):
    code = ErrorCode.unauthorized


class SlotFull(BookingError):
    code = ErrorCode.slot_full


class RoomFullyBooked(BookingError):
    code = ErrorCode.room_fully_booked


class InvalidCoupon(BookingError):
    code = ErrorCode.invalid_coupon


class CouponAlreadyUsed(BookingError):
    code = ErrorCode.coupon_already_used


class InvalidCouponType(BookingError):
    code = ErrorCode.invalid_coupon_type


class InvalidTransition(BookingError):
    code = ErrorCode.invalid_transition


class PersistenceError(BookingError):
    """Raised when the underlying store fails (I/O, serialization)."""

    code = ErrorCode.persistence
