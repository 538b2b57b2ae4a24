from __future__ import annotations

from datetime import datetime
from typing import Any

from spa_booking.domain.entities.booking import (
    AreaOptionChoice,
    Booking,
    BookingStatus,
    BookingType,
    CustomerInfo,
    PaymentInfo,
    PaymentStatus,
    RoomBookingInfo,
    RoomTypeSnapshot,
    ServiceSnapshot,
    Timeline,
)
from spa_booking.domain.entities.catalog import PricedOption, ServiceArea


def _dt_out(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt_in(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except (ValueError, TypeError):
        return None


def _option_out(option: PricedOption | None) -> dict[str, Any] | None:
    if option is None:
        return None
    return {"name": option.name, "price": option.price, "duration": option.duration}


def _option_in(data: dict[str, Any] | None) -> PricedOption | None:
    if not data:
        return None
    return PricedOption(
        name=str(data.get("name", "")),
        price=int(data.get("price") or 0),
        duration=int(data.get("duration") or 0),
    )


def _area_out(area: ServiceArea | None) -> dict[str, Any] | None:
    if area is None:
        return None
    return {
        "name": area.name,
        "price": area.price,
        "duration": area.duration,
        "packages": [_option_out(p) for p in area.packages],
    }


def _area_in(data: dict[str, Any] | None) -> ServiceArea | None:
    if not data:
        return None
    return ServiceArea(
        name=str(data.get("name", "")),
        price=int(data.get("price") or 0),
        duration=int(data.get("duration") or 0),
        packages=tuple(p for p in (_option_in(p) for p in data.get("packages") or []) if p),
    )


def _service_out(info: ServiceSnapshot | None) -> dict[str, Any] | None:
    if info is None:
        return None
    return {
        "id": info.service_id,
        "name": info.name,
        "price": info.price,
        "duration": info.duration,
        "serviceType": info.service_type,
        "imageUrl": info.image_url,
        "selectedArea": _area_out(info.selected_area),
        "selectedPackage": _option_out(info.selected_package),
        "areaIndex": info.area_index,
        "packageIndex": info.package_index,
        "selectedAreaOptions": [
            {"areaName": c.area_name, "optionName": c.option_name} for c in info.selected_area_options
        ],
        "addOns": [_option_out(a) for a in info.add_ons],
    }


def _service_in(data: dict[str, Any] | None) -> ServiceSnapshot | None:
    if not data:
        return None
    return ServiceSnapshot(
        service_id=str(data.get("id", "")),
        name=str(data.get("name", "")),
        price=int(data.get("price") or 0),
        duration=int(data.get("duration") or 0),
        service_type=data.get("serviceType") or "single",
        image_url=data.get("imageUrl") or "",
        selected_area=_area_in(data.get("selectedArea")),
        selected_package=_option_in(data.get("selectedPackage")),
        area_index=data.get("areaIndex"),
        package_index=data.get("packageIndex"),
        selected_area_options=tuple(
            AreaOptionChoice(area_name=c.get("areaName", ""), option_name=c.get("optionName", ""))
            for c in data.get("selectedAreaOptions") or []
        ),
        add_ons=tuple(a for a in (_option_in(a) for a in data.get("addOns") or []) if a),
    )


def _payment_out(info: PaymentInfo) -> dict[str, Any]:
    return {
        "originalPrice": info.original_price,
        "discount": info.discount,
        "totalPrice": info.total_price,
        "basePrice": info.base_price,
        "addOnsTotal": info.add_ons_total,
        "paymentStatus": info.payment_status.value,
        "paymentMethod": info.payment_method,
        "paymentDueAt": _dt_out(info.payment_due_at),
        "couponId": info.coupon_id,
        "couponName": info.coupon_name,
        "amountPaid": info.amount_paid,
        "paidAt": _dt_out(info.paid_at),
        "paymentReceivedBy": info.payment_received_by,
        "slipReference": info.slip_reference,
    }


def _payment_in(data: dict[str, Any] | None) -> PaymentInfo:
    data = data or {}
    return PaymentInfo(
        original_price=int(data.get("originalPrice") or 0),
        discount=int(data.get("discount") or 0),
        total_price=int(data.get("totalPrice") or 0),
        base_price=int(data.get("basePrice") or 0),
        add_ons_total=int(data.get("addOnsTotal") or 0),
        payment_status=PaymentStatus(data.get("paymentStatus") or PaymentStatus.unpaid.value),
        payment_method=data.get("paymentMethod"),
        payment_due_at=_dt_in(data.get("paymentDueAt")),
        coupon_id=data.get("couponId"),
        coupon_name=data.get("couponName"),
        amount_paid=data.get("amountPaid"),
        paid_at=_dt_in(data.get("paidAt")),
        payment_received_by=data.get("paymentReceivedBy"),
        slip_reference=data.get("slipReference"),
    )


def _room_out(info: RoomBookingInfo | None) -> dict[str, Any] | None:
    if info is None:
        return None
    return {
        "roomTypeId": info.room_type_id,
        "checkInDate": info.check_in_date,
        "checkOutDate": info.check_out_date,
        "nights": info.nights,
        "rooms": info.rooms,
        "guests": info.guests,
        "roomId": info.room_id,
        "roomNumber": info.room_number,
        "roomIds": list(info.room_ids),
    }


def _room_in(data: dict[str, Any] | None) -> RoomBookingInfo | None:
    if not data:
        return None
    return RoomBookingInfo(
        room_type_id=str(data.get("roomTypeId", "")),
        check_in_date=str(data.get("checkInDate", "")),
        check_out_date=str(data.get("checkOutDate", "")),
        nights=int(data.get("nights") or 1),
        rooms=int(data.get("rooms") or 1),
        guests=int(data.get("guests") or 1),
        room_id=data.get("roomId"),
        room_number=data.get("roomNumber"),
        room_ids=tuple(data.get("roomIds") or ()),
    )


def booking_to_document(booking: Booking) -> dict[str, Any]:
    """Serialize a Booking into its camelCase persisted document."""
    room_type = booking.room_type_info
    return {
        "id": booking.booking_id,
        "bookingType": booking.booking_type.value,
        "status": booking.status.value,
        "userId": booking.user_id,
        "customerInfo": {
            "name": booking.customer_info.name,
            "phone": booking.customer_info.phone,
            "note": booking.customer_info.note,
            "pictureUrl": booking.customer_info.picture_url,
        },
        "date": booking.date,
        "time": booking.time,
        "technicianId": booking.technician_id,
        "serviceInfo": _service_out(booking.service_info),
        "roomTypeInfo": (
            {
                "id": room_type.room_type_id,
                "name": room_type.name,
                "basePrice": room_type.base_price,
                "imageUrl": room_type.image_url,
            }
            if room_type
            else None
        ),
        "bookingInfo": _room_out(booking.booking_info),
        "paymentInfo": _payment_out(booking.payment_info),
        "timeline": {
            "startedAt": _dt_out(booking.timeline.started_at),
            "checkedInBy": booking.timeline.checked_in_by,
            "completedAt": _dt_out(booking.timeline.completed_at),
        },
        "createdAt": _dt_out(booking.created_at),
        "updatedAt": _dt_out(booking.updated_at),
        "createdBy": booking.created_by,
        "cancelledAt": _dt_out(booking.cancelled_at),
        "cancelledBy": booking.cancelled_by,
        "cancelledByEmployeeId": booking.cancelled_by_employee_id,
        "cancelReason": booking.cancel_reason,
        "completionNote": booking.completion_note,
        "calendarEventId": booking.calendar_event_id,
        "pointsAwardedFor": sorted(booking.points_awarded_for),
    }


def booking_from_document(data: dict[str, Any]) -> Booking:
    customer = data.get("customerInfo") or {}
    room_type = data.get("roomTypeInfo")
    timeline = data.get("timeline") or {}
    return Booking(
        booking_id=data.get("id"),
        booking_type=BookingType(data.get("bookingType") or BookingType.service.value),
        status=BookingStatus(data.get("status") or BookingStatus.pending.value),
        user_id=data.get("userId"),
        customer_info=CustomerInfo(
            name=customer.get("name") or customer.get("fullName") or "",
            phone=customer.get("phone") or "",
            note=customer.get("note") or "",
            picture_url=customer.get("pictureUrl") or "",
        ),
        date=data.get("date"),
        time=data.get("time"),
        technician_id=data.get("technicianId"),
        service_info=_service_in(data.get("serviceInfo")),
        room_type_info=(
            RoomTypeSnapshot(
                room_type_id=str(room_type.get("id", "")),
                name=str(room_type.get("name", "")),
                base_price=int(room_type.get("basePrice") or 0),
                image_url=room_type.get("imageUrl"),
            )
            if room_type
            else None
        ),
        booking_info=_room_in(data.get("bookingInfo")),
        payment_info=_payment_in(data.get("paymentInfo")),
        timeline=Timeline(
            started_at=_dt_in(timeline.get("startedAt")),
            checked_in_by=timeline.get("checkedInBy"),
            completed_at=_dt_in(timeline.get("completedAt")),
        ),
        created_at=_dt_in(data.get("createdAt")),
        updated_at=_dt_in(data.get("updatedAt")),
        created_by=data.get("createdBy"),
        cancelled_at=_dt_in(data.get("cancelledAt")),
        cancelled_by=data.get("cancelledBy"),
        cancelled_by_employee_id=data.get("cancelledByEmployeeId"),
        cancel_reason=data.get("cancelReason"),
        completion_note=data.get("completionNote"),
        calendar_event_id=data.get("calendarEventId"),
        points_awarded_for=frozenset(data.get("pointsAwardedFor") or ()),
    )
