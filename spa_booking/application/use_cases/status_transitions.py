from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable
from zoneinfo import ZoneInfo

from spa_booking.application.dto.action_result import ActionResult
from spa_booking.application.exceptions import BookingError, InvalidTransition, NotFound, ValidationError
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.calendar import CalendarSyncPort
from spa_booking.application.ports.customer_directory import CustomerDirectoryPort
from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification
from spa_booking.application.ports.point_ledger import PointLedgerPort
from spa_booking.application.utils.authorization import Authorizer
from spa_booking.application.utils.notifications import NotificationGate
from spa_booking.application.utils.side_effects import SideEffectRunner
from spa_booking.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from spa_booking.domain.entities.principal import AuthContext, Principal
from spa_booking.domain.status_machine import Transition, can_apply, target_of

PURCHASE_POINTS = "purchase"
VISIT_POINTS = "visit"


class StatusTransitionUseCase:
    """Lifecycle changes on committed bookings, driven by admins, employees or the booking's owner."""

    def __init__(
        self,
        authorizer: Authorizer,
        bookings: BookingStorePort,
        points: PointLedgerPort,
        customers: CustomerDirectoryPort,
        calendar: CalendarSyncPort,
        notifications: NotificationGate,
        runner: SideEffectRunner,
        timezone: ZoneInfo,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._authorizer = authorizer
        self._bookings = bookings
        self._points = points
        self._customers = customers
        self._calendar = calendar
        self._notifications = notifications
        self._runner = runner
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

    # --- graph transitions ---

    def confirm(self, booking_id: str, auth: AuthContext | None) -> ActionResult:
        try:
            booking = self._load(booking_id)
            principal = self._authorizer.require_staff_or_owner(auth, booking)
            updated = self._apply(booking, Transition.confirm)
        except BookingError as e:
            return ActionResult.failure(e)

        self._runner.run("calendar_upsert", self._calendar.upsert_event, updated)
        if principal.role == "user":
            self._notifications.admins(updated, AdminNotification.customer_confirmed)
        else:
            self._notifications.customer(updated, CustomerNotification.appointment_confirmed)
        return ActionResult.ok(updated)

    def start(self, booking_id: str, auth: AuthContext | None) -> ActionResult:
        """Check-in: the customer has arrived and service has begun."""
        try:
            principal = self._authorizer.require_staff(auth)
            booking = self._load(booking_id)
            now = self._clock()
            updated = self._apply(
                booking,
                Transition.start,
                timeline=replace(booking.timeline, started_at=now, checked_in_by=principal.employee_id or principal.role),
            )
        except BookingError as e:
            return ActionResult.failure(e)

        self._runner.run("calendar_upsert", self._calendar.upsert_event, updated)
        return ActionResult.ok(updated)

    def complete(self, booking_id: str, auth: AuthContext | None, note: str | None = None) -> ActionResult:
        try:
            self._authorizer.require_staff(auth)
            booking = self._load(booking_id)
            now = self._clock()
            updated = self._apply(
                booking,
                Transition.complete,
                timeline=replace(booking.timeline, completed_at=now),
                completion_note=note or booking.completion_note,
            )
        except BookingError as e:
            return ActionResult.failure(e)

        updated, awarded = self._after_completion(updated)
        return ActionResult.ok(updated, points_awarded=awarded)

    def cancel(self, booking_id: str, auth: AuthContext | None, reason: str | None = None) -> ActionResult:
        try:
            booking = self._load(booking_id)
            principal = self._authorizer.require_staff_or_owner(auth, booking)
            cancel_reason = reason or _default_cancel_reason(principal)
            now = self._clock()
            updated = self._apply(
                booking,
                Transition.cancel,
                cancel_reason=cancel_reason,
                cancelled_at=now,
                cancelled_by=principal.role,
                cancelled_by_employee_id=principal.employee_id,
            )
        except BookingError as e:
            return ActionResult.failure(e)

        self._after_cancel(updated, notify_admins=principal.role == "user")
        return ActionResult.ok(updated)

    # --- payment ---

    def mark_paid(
        self,
        booking_id: str,
        auth: AuthContext | None,
        amount: int | None = None,
        method: str | None = None,
    ) -> ActionResult:
        """Record payment; bookings not yet confirmed are advanced to confirmed."""
        try:
            principal = self._authorizer.require_staff(auth)
            booking = self._load(booking_id)
            if booking.status == BookingStatus.cancelled:
                raise InvalidTransition("Cannot take payment for a cancelled booking.")
            now = self._clock()
            payment = replace(
                booking.payment_info,
                payment_status=PaymentStatus.paid,
                payment_method=method or booking.payment_info.payment_method,
                amount_paid=amount if amount is not None else booking.payment_info.total_price,
                paid_at=now,
                payment_received_by=principal.employee_id or principal.role,
            )
            advanced = can_apply(Transition.confirm, booking.status)
            updated = replace(
                booking,
                status=BookingStatus.confirmed if advanced else booking.status,
                payment_info=payment,
                updated_at=now,
            )
            self._bookings.save(updated)
        except BookingError as e:
            return ActionResult.failure(e)

        self._logger.info("Payment recorded", extra={"booking_id": booking_id, "status": updated.status.value})
        self._runner.run("calendar_upsert", self._calendar.upsert_event, updated)
        updated, awarded = self._award_points(updated)
        self._notifications.customer(updated, CustomerNotification.payment_confirmed)
        if advanced:
            self._notifications.customer(updated, CustomerNotification.appointment_confirmed)
        self._notifications.admins(updated, AdminNotification.payment_received)
        return ActionResult.ok(updated, points_awarded=awarded)

    def send_invoice(self, booking_id: str, auth: AuthContext | None) -> ActionResult:
        try:
            self._authorizer.require_admin(auth)
            booking = self._load(booking_id)
            if not booking.user_id:
                raise ValidationError("This booking is not linked to a LINE user.")
            if booking.payment_info.payment_status == PaymentStatus.paid:
                raise InvalidTransition("Booking is already paid.")
            updated = self._save_payment_status(booking, PaymentStatus.invoiced)
        except BookingError as e:
            return ActionResult.failure(e)

        self._notifications.customer(updated, CustomerNotification.payment_invoice)
        return ActionResult.ok(updated)

    def submit_payment_slip(self, booking_id: str, auth: AuthContext | None, slip_reference: str) -> ActionResult:
        """Owner uploaded a transfer slip; payment now awaits staff verification."""
        try:
            booking = self._load(booking_id)
            self._authorizer.require_owner(auth, booking)
            if not slip_reference:
                raise ValidationError("Payment slip is required.")
            if booking.is_terminal:
                raise InvalidTransition(f"Booking is already {booking.status.value}.")
            if booking.payment_info.payment_status == PaymentStatus.paid:
                raise InvalidTransition("Booking is already paid.")
            updated = self._save_payment_status(
                booking,
                PaymentStatus.pending_verification,
                slip_reference=slip_reference,
            )
        except BookingError as e:
            return ActionResult.failure(e)

        self._notifications.admins(updated, AdminNotification.payment_slip)
        return ActionResult.ok(updated)

    # --- admin overrides ---

    def force_set_status(
        self,
        booking_id: str,
        status: str,
        auth: AuthContext | None,
        note: str | None = None,
    ) -> ActionResult:
        """Admin override: set any status, bypassing the transition graph."""
        try:
            self._authorizer.require_admin(auth)
            try:
                new_status = BookingStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown status: {status}")
            booking = self._load(booking_id)
            now = self._clock()
            changes: dict = {"status": new_status, "updated_at": now}
            if note:
                changes["completion_note"] = note
            if new_status == BookingStatus.completed and not booking.timeline.completed_at:
                changes["timeline"] = replace(booking.timeline, completed_at=now)
            if new_status == BookingStatus.cancelled and not booking.cancelled_at:
                changes.update(cancelled_at=now, cancelled_by="admin", cancel_reason=note or "Cancelled by admin")
            updated = replace(booking, **changes)
            self._bookings.save(updated)
        except BookingError as e:
            return ActionResult.failure(e)

        self._logger.info(
            "Status overridden by admin",
            extra={"booking_id": booking_id, "status": new_status.value, "reason": booking.status.value},
        )
        awarded = 0
        if new_status == BookingStatus.confirmed:
            self._runner.run("calendar_upsert", self._calendar.upsert_event, updated)
            self._notifications.customer(updated, CustomerNotification.appointment_confirmed)
        elif new_status == BookingStatus.completed:
            updated, awarded = self._after_completion(updated)
        elif new_status == BookingStatus.cancelled:
            self._after_cancel(updated, notify_admins=False)
        else:
            self._runner.run("calendar_upsert", self._calendar.upsert_event, updated)
        return ActionResult.ok(updated, points_awarded=awarded)

    def delete(self, booking_id: str, auth: AuthContext | None) -> ActionResult:
        try:
            self._authorizer.require_admin(auth)
            if not self._bookings.delete(booking_id):
                raise NotFound("Booking not found.")
        except BookingError as e:
            return ActionResult.failure(e)

        self._logger.info("Booking deleted", extra={"booking_id": booking_id})
        self._runner.run("calendar_delete", self._calendar.delete_event, booking_id)
        return ActionResult(success=True, booking_id=booking_id)

    # --- lookups ---

    def get(self, booking_id: str, auth: AuthContext | None) -> ActionResult:
        try:
            booking = self._load(booking_id)
            self._authorizer.require_staff_or_owner(auth, booking)
        except BookingError as e:
            return ActionResult.failure(e)
        return ActionResult.ok(booking)

    def find_by_phone(self, phone: str, auth: AuthContext | None) -> ActionResult:
        try:
            self._authorizer.require_staff(auth)
            if not phone:
                raise ValidationError("Phone number is required.")
            found = self._bookings.find_by_phone(phone.strip())
        except BookingError as e:
            return ActionResult.failure(e)
        return ActionResult(success=True, data={"bookings": found})

    # --- internals ---

    def _load(self, booking_id: str) -> Booking:
        if not booking_id:
            raise ValidationError("Booking id is required.")
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise NotFound("Booking not found.")
        return booking

    def _apply(self, booking: Booking, transition: Transition, **changes) -> Booking:
        if not can_apply(transition, booking.status):
            raise InvalidTransition(f"Cannot {transition.value} a booking that is {booking.status.value}.")
        updated = replace(booking, status=target_of(transition), updated_at=self._clock(), **changes)
        self._bookings.save(updated)
        self._logger.info(
            "Booking status changed",
            extra={"booking_id": booking.booking_id, "status": updated.status.value, "reason": booking.status.value},
        )
        return updated

    def _save_payment_status(self, booking: Booking, status: PaymentStatus, **payment_changes) -> Booking:
        updated = replace(
            booking,
            payment_info=replace(booking.payment_info, payment_status=status, **payment_changes),
            updated_at=self._clock(),
        )
        self._bookings.save(updated)
        return updated

    def _after_completion(self, booking: Booking) -> tuple[Booking, int]:
        booking, awarded = self._award_points(booking)
        self._runner.run("calendar_upsert", self._calendar.upsert_event, booking)
        self._notifications.customer(booking, CustomerNotification.service_completed, totalPointsAwarded=awarded)
        self._notifications.customer(booking, CustomerNotification.review_request)
        if booking.user_id or booking.customer_info.phone:
            self._runner.run("customer_upsert", self._customers.upsert_customer, booking.customer_info, booking.user_id)
        return booking, awarded

    def _after_cancel(self, booking: Booking, notify_admins: bool) -> None:
        self._runner.run("calendar_delete", self._calendar.delete_event, booking.booking_id)
        self._notifications.customer(booking, CustomerNotification.appointment_cancelled, reason=booking.cancel_reason)
        if notify_admins:
            self._notifications.admins(booking, AdminNotification.booking_cancelled, reason=booking.cancel_reason)

    def _award_points(self, booking: Booking) -> tuple[Booking, int]:
        """
        Award purchase and visit points at most once each per booking,
        whichever of completion or payment fires first.
        """
        if not booking.user_id:
            return booking, 0

        awarded_for = set(booking.points_awarded_for)
        total = 0
        total_price = booking.payment_info.total_price

        if PURCHASE_POINTS not in awarded_for and total_price > 0:
            points = self._runner.run_now("award_purchase_points", self._points.award_for_purchase, booking.user_id, total_price)
            if points is not None:
                awarded_for.add(PURCHASE_POINTS)
                total += points

        if VISIT_POINTS not in awarded_for:
            points = self._runner.run_now("award_visit_points", self._points.award_for_visit, booking.user_id)
            if points is not None:
                awarded_for.add(VISIT_POINTS)
                total += points

        if awarded_for == set(booking.points_awarded_for):
            return booking, total

        updated = replace(booking, points_awarded_for=frozenset(awarded_for))
        if not self._runner.run_now("save_points_marker", self._save_marker, updated):
            return booking, total
        return updated, total

    def _save_marker(self, booking: Booking) -> bool:
        self._bookings.save(booking)
        return True


def _default_cancel_reason(principal: Principal) -> str:
    if principal.role == "user":
        return "User cancelled"
    if principal.role == "employee":
        return "Cancelled by employee"
    return "Cancelled by admin"
