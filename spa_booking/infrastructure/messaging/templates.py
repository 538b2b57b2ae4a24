from __future__ import annotations

from typing import Any

from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification


def _when(payload: dict[str, Any]) -> str:
    if payload.get("checkIn"):
        return f"{payload['checkIn']} - {payload.get('checkOut') or ''}".strip(" -")
    return f"{payload.get('date') or '-'} {payload.get('time') or ''}".strip()


def _price(payload: dict[str, Any], currency: str) -> str:
    return f"{int(payload.get('totalPrice') or 0):,} {currency}"


def customer_text(notification: CustomerNotification, payload: dict[str, Any], currency: str = "THB") -> str:
    name = payload.get("serviceName") or "your booking"
    when = _when(payload)
    if notification == CustomerNotification.new_booking:
        return f'Booking received: "{name}"\nDate: {when}\nTotal: {_price(payload, currency)}'
    if notification == CustomerNotification.appointment_confirmed:
        return f'Your booking "{name}" on {when} has been confirmed.'
    if notification == CustomerNotification.service_completed:
        text = f'Your service "{name}" has been completed. Thank you!'
        points = payload.get("totalPointsAwarded") or 0
        if points:
            text += f"\nYou earned {points} points."
        return text
    if notification == CustomerNotification.review_request:
        return f'How was "{name}"? We would love your review.'
    if notification == CustomerNotification.appointment_cancelled:
        text = f'Your booking "{name}" on {when} has been cancelled.'
        if payload.get("reason"):
            text += f"\nReason: {payload['reason']}"
        return text
    if notification == CustomerNotification.payment_confirmed:
        return f'Payment of {_price(payload, currency)} for "{name}" has been received.'
    if notification == CustomerNotification.payment_invoice:
        return f'Invoice for "{name}" ({when})\nAmount due: {_price(payload, currency)}'
    return f'Update for "{name}"'


def admin_text(notification: AdminNotification, payload: dict[str, Any], currency: str = "THB") -> str:
    name = payload.get("serviceName") or "booking"
    customer = payload.get("customerName") or "Customer"
    when = _when(payload)
    if notification == AdminNotification.new_booking:
        return f"New booking: {customer}\n{name}\n{when}\nTotal: {_price(payload, currency)}"
    if notification == AdminNotification.payment_received:
        return f"Payment received from {customer}: {_price(payload, currency)} ({name})"
    if notification == AdminNotification.customer_confirmed:
        return f"{customer} confirmed {name} on {when}"
    if notification == AdminNotification.booking_cancelled:
        text = f"Booking cancelled: {customer}\n{name}\n{when}"
        if payload.get("reason"):
            text += f"\nReason: {payload['reason']}"
        return text
    if notification == AdminNotification.payment_slip:
        return f"Payment slip submitted by {customer} for {name} ({_price(payload, currency)})"
    return f"Booking update: {payload.get('bookingId')}"
