from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from spa_booking.domain.entities.catalog import PricedOption, ServiceArea


class BookingType(str, Enum):
    service = "service"
    room = "room"


class BookingStatus(str, Enum):
    pending = "pending"
    awaiting_confirmation = "awaiting_confirmation"
    confirmed = "confirmed"
    in_progress = "in_progress"
    completed = "completed"
    cancelled = "cancelled"
    blocked = "blocked"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    pending_verification = "pending_verification"
    invoiced = "invoiced"
    paid = "paid"


# Statuses that consume a service slot.
SLOT_HOLDING_STATUSES = frozenset(
    {
        BookingStatus.pending,
        BookingStatus.confirmed,
        BookingStatus.awaiting_confirmation,
        BookingStatus.blocked,
    }
)

# Statuses that consume room inventory.
ROOM_ACTIVE_STATUSES = frozenset(
    {
        BookingStatus.pending,
        BookingStatus.awaiting_confirmation,
        BookingStatus.confirmed,
        BookingStatus.in_progress,
    }
)

TERMINAL_STATUSES = frozenset({BookingStatus.completed, BookingStatus.cancelled})


@dataclass(frozen=True)
class CustomerInfo:
    name: str = ""
    phone: str = ""
    note: str = ""
    picture_url: str = ""


@dataclass(frozen=True)
class AreaOptionChoice:
    area_name: str
    option_name: str


@dataclass(frozen=True)
class ServiceSnapshot:
    """Catalog data copied into the booking at creation time."""

    service_id: str
    name: str
    price: int
    duration: int
    service_type: str = "single"
    image_url: str = ""
    selected_area: ServiceArea | None = None
    selected_package: PricedOption | None = None
    area_index: int | None = None
    package_index: int | None = None
    selected_area_options: tuple[AreaOptionChoice, ...] = ()
    add_ons: tuple[PricedOption, ...] = ()


@dataclass(frozen=True)
class RoomTypeSnapshot:
    room_type_id: str
    name: str
    base_price: int
    image_url: str | None = None


@dataclass(frozen=True)
class RoomBookingInfo:
    room_type_id: str
    check_in_date: str
    check_out_date: str
    nights: int
    rooms: int
    guests: int = 1
    room_id: str | None = None
    room_number: str | None = None
    room_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class PaymentInfo:
    original_price: int = 0
    discount: int = 0
    total_price: int = 0
    base_price: int = 0
    add_ons_total: int = 0
    payment_status: PaymentStatus = PaymentStatus.unpaid
    payment_method: str | None = None
    payment_due_at: datetime | None = None
    coupon_id: str | None = None
    coupon_name: str | None = None
    amount_paid: int | None = None
    paid_at: datetime | None = None
    payment_received_by: str | None = None
    slip_reference: str | None = None


@dataclass(frozen=True)
class Timeline:
    started_at: datetime | None = None
    checked_in_by: str | None = None
    completed_at: datetime | None = None


@dataclass(frozen=True)
class Booking:
    booking_id: str | None
    booking_type: BookingType
    status: BookingStatus
    customer_info: CustomerInfo = CustomerInfo()
    user_id: str | None = None
    # service appointments
    date: str | None = None
    time: str | None = None
    technician_id: str | None = None
    service_info: ServiceSnapshot | None = None
    # room reservations
    room_type_info: RoomTypeSnapshot | None = None
    booking_info: RoomBookingInfo | None = None
    payment_info: PaymentInfo = PaymentInfo()
    timeline: Timeline = Timeline()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None  # "admin", "employee", "user" or "system"
    cancelled_by_employee_id: str | None = None
    cancel_reason: str | None = None
    completion_note: str | None = None
    calendar_event_id: str | None = None
    points_awarded_for: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def assigned_room_ids(self) -> tuple[str, ...]:
        if not self.booking_info:
            return ()
        if self.booking_info.room_ids:
            return self.booking_info.room_ids
        return (self.booking_info.room_id,) if self.booking_info.room_id else ()

    @property
    def display_name(self) -> str:
        if self.service_info:
            return self.service_info.name
        if self.room_type_info:
            return self.room_type_info.name
        return "Booking"
