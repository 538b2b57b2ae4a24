"""
Tests for lifecycle transitions, payment handling and point awards.
"""

from __future__ import annotations

import pytest

from spa_booking.application.dto.booking_requests import CustomerInfoDTO, ServiceBookingRequest
from spa_booking.application.exceptions import ErrorCode
from spa_booking.domain.entities.booking import BookingStatus, PaymentStatus
from spa_booking.domain.status_machine import Transition, can_apply


def _book(env, auth=None, **overrides):
    data = {
        "service_id": "massage",
        "date": "2024-05-01",
        "time": "10:00",
        "customer_info": CustomerInfoDTO(name="Alice", phone="0812345678"),
    }
    data.update(overrides)
    result = env.create.create_service_booking(ServiceBookingRequest(**data), auth or env.alice)
    assert result.success, result.message
    env.notifier.sent.clear()
    return result.booking_id


@pytest.mark.parametrize(
    "transition,allowed",
    [
        (Transition.confirm, {BookingStatus.pending, BookingStatus.awaiting_confirmation}),
        (
            Transition.start,
            {BookingStatus.pending, BookingStatus.confirmed, BookingStatus.awaiting_confirmation},
        ),
        (Transition.complete, {BookingStatus.confirmed, BookingStatus.in_progress}),
        (Transition.cancel, set(BookingStatus) - {BookingStatus.completed, BookingStatus.cancelled}),
    ],
)
def test_transition_graph(transition, allowed):
    for status in BookingStatus:
        assert can_apply(transition, status) == (status in allowed)


def test_full_lifecycle_by_staff(env):
    booking_id = _book(env)

    assert env.status.confirm(booking_id, env.admin).booking.status == BookingStatus.confirmed

    started = env.status.start(booking_id, env.employee)
    assert started.booking.status == BookingStatus.in_progress
    assert started.booking.timeline.checked_in_by == "emp-1"
    assert started.booking.timeline.started_at == env.clock.now

    done = env.status.complete(booking_id, env.employee, note="All good")
    assert done.booking.status == BookingStatus.completed
    assert done.booking.completion_note == "All good"
    assert done.booking.timeline.completed_at is not None


def test_terminal_bookings_do_not_move(env):
    booking_id = _book(env)
    env.status.cancel(booking_id, env.admin, reason="No show")

    for attempt in (
        env.status.confirm(booking_id, env.admin),
        env.status.start(booking_id, env.admin),
        env.status.complete(booking_id, env.admin),
        env.status.cancel(booking_id, env.admin),
    ):
        assert attempt.error == ErrorCode.invalid_transition

    assert env.store.get(booking_id).status == BookingStatus.cancelled


def test_admin_override_bypasses_graph(env):
    booking_id = _book(env)
    env.status.cancel(booking_id, env.admin)

    result = env.status.force_set_status(booking_id, "confirmed", env.admin)

    assert result.success
    assert env.store.get(booking_id).status == BookingStatus.confirmed
    assert "appointmentConfirmed" in env.notifier.types_sent_to("U-alice")


def test_override_requires_admin(env):
    booking_id = _book(env)

    result = env.status.force_set_status(booking_id, "completed", env.employee)

    assert result.error == ErrorCode.unauthorized


def test_cancel_after_payment_keeps_payment_status(env):
    booking_id = _book(env)
    env.status.mark_paid(booking_id, env.admin)

    result = env.status.cancel(booking_id, env.admin, reason="Customer request")

    booking = env.store.get(booking_id)
    assert result.success
    assert booking.status == BookingStatus.cancelled
    assert booking.payment_info.payment_status == PaymentStatus.paid
    assert booking.cancelled_by == "admin"
    assert booking.cancel_reason == "Customer request"


def test_owner_can_cancel_and_admins_hear_about_it(env):
    booking_id = _book(env)

    result = env.status.cancel(booking_id, env.alice)

    assert result.booking.cancel_reason == "User cancelled"
    assert result.booking.cancelled_by == "user"
    assert "bookingCancelled" in env.notifier.types_sent_to("admins")
    assert "appointmentCancelled" in env.notifier.types_sent_to("U-alice")


def test_employee_cancel_is_labelled(env):
    booking_id = _book(env)

    result = env.status.cancel(booking_id, env.employee)

    assert result.booking.cancelled_by == "employee"
    assert result.booking.cancelled_by_employee_id == "emp-1"
    assert result.booking.cancel_reason == "Cancelled by employee"


def test_stranger_cannot_touch_booking(env):
    booking_id = _book(env)

    assert env.status.cancel(booking_id, env.bob).error == ErrorCode.unauthorized
    assert env.status.confirm(booking_id, env.bob).error == ErrorCode.unauthorized
    assert env.status.get(booking_id, env.bob).error == ErrorCode.unauthorized
    assert env.status.start(booking_id, env.alice).error == ErrorCode.unauthorized


def test_owner_confirm_notifies_admins(env):
    booking_id = _book(env)

    env.status.confirm(booking_id, env.alice)

    assert env.notifier.types_sent_to("admins") == ["customerConfirmed"]
    assert env.notifier.types_sent_to("U-alice") == []


def test_mark_paid_confirms_and_awards_points(env):
    booking_id = _book(env, add_on_names=["Hot Stone"])

    result = env.status.mark_paid(booking_id, env.employee, method="transfer")

    booking = env.store.get(booking_id)
    assert booking.status == BookingStatus.confirmed
    assert booking.payment_info.payment_status == PaymentStatus.paid
    assert booking.payment_info.amount_paid == 600
    assert booking.payment_info.payment_method == "transfer"
    assert booking.payment_info.payment_received_by == "emp-1"
    # 600 / 100 purchase points + 1 visit point
    assert result.data["points_awarded"] == 7
    assert booking.points_awarded_for == frozenset({"purchase", "visit"})
    assert env.ledger.balance("U-alice") == 7
    assert env.notifier.types_sent_to("U-alice") == ["paymentConfirmed", "appointmentConfirmed"]
    assert env.notifier.types_sent_to("admins") == ["paymentReceived"]


def test_points_awarded_once_across_payment_and_completion(env):
    booking_id = _book(env)

    env.status.mark_paid(booking_id, env.admin)
    completed = env.status.complete(booking_id, env.admin)

    assert completed.data["points_awarded"] == 0
    assert env.ledger.balance("U-alice") == 6


def test_completion_awards_points_and_requests_review(env):
    booking_id = _book(env)
    env.status.confirm(booking_id, env.admin)
    env.notifier.sent.clear()

    result = env.status.complete(booking_id, env.admin)

    assert result.data["points_awarded"] == 6
    assert env.notifier.types_sent_to("U-alice") == ["serviceCompleted", "reviewRequest"]
    assert env.notifier.sent[0]["payload"]["totalPointsAwarded"] == 6


def test_mark_paid_rejects_cancelled_booking(env):
    booking_id = _book(env)
    env.status.cancel(booking_id, env.admin)

    result = env.status.mark_paid(booking_id, env.admin)

    assert result.error == ErrorCode.invalid_transition


def test_mark_paid_keeps_in_progress_status(env):
    booking_id = _book(env)
    env.status.start(booking_id, env.admin)

    result = env.status.mark_paid(booking_id, env.admin, amount=450)

    assert result.booking.status == BookingStatus.in_progress
    assert result.booking.payment_info.amount_paid == 450


def test_send_invoice(env):
    booking_id = _book(env)

    result = env.status.send_invoice(booking_id, env.admin)

    assert result.booking.payment_info.payment_status == PaymentStatus.invoiced
    assert env.notifier.types_sent_to("U-alice") == ["paymentInvoice"]


def test_send_invoice_needs_linked_user(env):
    booking_id = _book(env, auth=env.admin)

    assert env.status.send_invoice(booking_id, env.admin).error == ErrorCode.validation


def test_payment_slip_by_owner(env):
    booking_id = _book(env)

    result = env.status.submit_payment_slip(booking_id, env.alice, "slips/abc.jpg")

    assert result.booking.payment_info.payment_status == PaymentStatus.pending_verification
    assert result.booking.payment_info.slip_reference == "slips/abc.jpg"
    assert env.notifier.types_sent_to("admins") == ["paymentSlip"]
    assert env.status.submit_payment_slip(booking_id, env.bob, "x").error == ErrorCode.unauthorized


def test_delete_is_admin_only(env):
    booking_id = _book(env)

    assert env.status.delete(booking_id, env.employee).error == ErrorCode.unauthorized
    assert env.status.delete(booking_id, env.admin).success
    assert env.store.get(booking_id) is None
    assert env.status.delete(booking_id, env.admin).error == ErrorCode.not_found


def test_find_by_phone_for_staff(env):
    first = _book(env)
    env.clock.now = env.clock.now.replace(hour=11)
    second = _book(env, time="11:00")

    result = env.status.find_by_phone("081-234-5678", env.employee)

    assert [b.booking_id for b in result.data["bookings"]] == [second, first]
    assert env.status.find_by_phone("0812345678", env.alice).error == ErrorCode.unauthorized


def test_notifications_respect_settings(env):
    env.settings_store.update(
        "notifications",
        {
            "allNotifications": {"enabled": True},
            "customerNotifications": {"enabled": True, "appointmentConfirmed": False},
            "adminNotifications": {"enabled": False, "customerConfirmed": True},
        },
    )
    booking_id = _book(env)

    env.status.confirm(booking_id, env.admin)
    env.status.cancel(booking_id, env.alice)

    assert env.notifier.sent == []
