from __future__ import annotations

import logging
from contextlib import AbstractContextManager, nullcontext
from datetime import date, datetime
from typing import Callable
from zoneinfo import ZoneInfo

from spa_booking.application.dto.action_result import ActionResult
from spa_booking.application.dto.booking_requests import (
    BlockSlotRequest,
    RoomBookingRequest,
    ServiceBookingRequest,
)
from spa_booking.application.exceptions import BookingError, SlotFull, Unauthorized, ValidationError
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.calendar import CalendarSyncPort
from spa_booking.application.ports.coupon_store import CouponStorePort
from spa_booking.application.ports.customer_directory import CustomerDirectoryPort
from spa_booking.application.ports.notifier import AdminNotification, CustomerNotification
from spa_booking.application.use_cases.availability import (
    AvailabilityChecker,
    room_lock_key,
    slot_lock_key,
)
from spa_booking.application.use_cases.catalog_reader import CatalogReader
from spa_booking.application.use_cases.coupons import CouponValidator, coupon_lock_key
from spa_booking.application.use_cases.pricing import PricingResolver, apply_discount
from spa_booking.application.utils.authorization import Authorizer
from spa_booking.application.utils.business_time import (
    as_business_time,
    end_of_business_day,
    nights_between,
    parse_calendar_date,
)
from spa_booking.application.utils.notifications import NotificationGate
from spa_booking.application.utils.side_effects import SideEffectRunner
from spa_booking.domain.entities.booking import (
    Booking,
    BookingStatus,
    BookingType,
    CustomerInfo,
    PaymentInfo,
    PaymentStatus,
    RoomBookingInfo,
    RoomTypeSnapshot,
    ServiceSnapshot,
)
from spa_booking.domain.entities.coupon import AppliedCoupon
from spa_booking.domain.entities.principal import AuthContext, Principal


class CreateBookingUseCase:
    """
    Admission, pricing and commit of new bookings.

    Everything up to the create write is strict: any failure aborts with no
    write. Everything after it is best-effort and never undoes the booking.
    """

    def __init__(
        self,
        authorizer: Authorizer,
        catalog_reader: CatalogReader,
        pricing: PricingResolver,
        coupon_validator: CouponValidator,
        availability: AvailabilityChecker,
        bookings: BookingStorePort,
        coupons: CouponStorePort,
        customers: CustomerDirectoryPort,
        calendar: CalendarSyncPort,
        notifications: NotificationGate,
        runner: SideEffectRunner,
        timezone: ZoneInfo,
        production: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._authorizer = authorizer
        self._catalog = catalog_reader
        self._pricing = pricing
        self._coupon_validator = coupon_validator
        self._availability = availability
        self._bookings = bookings
        self._coupons = coupons
        self._customers = customers
        self._calendar = calendar
        self._notifications = notifications
        self._runner = runner
        self._timezone = timezone
        self._production = production
        self._clock = clock or (lambda: datetime.now(timezone))
        self._logger = logging.getLogger(__name__)

    def create_service_booking(self, request: ServiceBookingRequest, auth: AuthContext | None) -> ActionResult:
        try:
            booking = self._create_service_booking(request, auth)
        except BookingError as e:
            self._logger.info("Service booking rejected", extra={"error": e.code.value, "reason": e.message})
            return ActionResult.failure(e)
        self._after_commit(booking)
        return ActionResult.ok(booking)

    def create_room_booking(self, request: RoomBookingRequest, auth: AuthContext | None) -> ActionResult:
        try:
            booking = self._create_room_booking(request, auth)
        except BookingError as e:
            self._logger.info("Room booking rejected", extra={"error": e.code.value, "reason": e.message})
            return ActionResult.failure(e)
        self._after_commit(booking)
        return ActionResult.ok(booking)

    def block_slot(self, request: BlockSlotRequest, auth: AuthContext | None) -> ActionResult:
        """Admin-only: occupy a slot with a blocked placeholder, even if it is already full."""
        try:
            self._authorizer.require_admin(auth)
            if not request.date or not request.time:
                raise ValidationError("Date and time are required.")
            now = self._clock()
            block = Booking(
                booking_id=None,
                booking_type=BookingType.service,
                status=BookingStatus.blocked,
                customer_info=CustomerInfo(name=request.note),
                date=request.date,
                time=request.time,
                technician_id=request.technician_id or None,
                service_info=ServiceSnapshot(service_id="", name="Blocked", price=0, duration=request.duration),
                created_at=now,
                updated_at=now,
                created_by="admin",
            )
            with self._bookings.admission_lock(slot_lock_key(request.date, request.time)):
                try:
                    self._availability.check_service_slot(request.date, request.time, request.technician_id)
                except SlotFull:
                    self._logger.warning("Blocking a slot that is already full", extra={"reason": request.note})
                created = self._bookings.create(block)
        except BookingError as e:
            return ActionResult.failure(e)
        self._logger.info("Slot blocked", extra={"booking_id": created.booking_id})
        return ActionResult.ok(created)

    def _create_service_booking(self, request: ServiceBookingRequest, auth: AuthContext | None) -> Booking:
        if not request.date or not request.time:
            raise ValidationError("Date and time are required.")
        if not request.service_id:
            raise ValidationError("Service is required.")

        principal = self._authorizer.require_customer_or_admin(auth)
        user_id = self._resolve_user_id(principal, request.user_id, require_user=self._production)

        with self._coupon_lock(user_id, request.coupon_id):
            created = self._admit_service_booking(request, principal, user_id)
            self._consume_coupon(created)

        self._logger.info(
            "Service booking created",
            extra={"booking_id": created.booking_id, "status": created.status.value, "user_id": user_id},
        )
        return created

    def _admit_service_booking(
        self, request: ServiceBookingRequest, principal: Principal, user_id: str | None
    ) -> Booking:
        service = self._catalog.load_service(request.service_id)
        quote = self._pricing.resolve_service(
            service,
            area_index=request.area_index,
            package_index=request.package_index,
            area_options=[c.to_entity() for c in request.selected_area_options],
            add_on_names=request.add_on_names,
        )
        coupon = self._validate_coupon(user_id, request.coupon_id, quote.subtotal)
        charge = apply_discount(quote.subtotal, coupon.discount if coupon else 0)

        now = self._clock()
        booking = Booking(
            booking_id=None,
            booking_type=BookingType.service,
            status=self._initial_status(principal, request.status),
            customer_info=request.customer_info.to_entity(),
            user_id=user_id,
            date=request.date,
            time=request.time,
            technician_id=request.technician_id or None,
            service_info=ServiceSnapshot(
                service_id=service.service_id,
                name=service.name,
                price=quote.price,
                duration=quote.duration,
                service_type=service.service_type or "single",
                image_url=service.image_url,
                selected_area=quote.selected_area,
                selected_package=quote.selected_package,
                area_index=request.area_index,
                package_index=request.package_index,
                selected_area_options=quote.selected_area_options,
                add_ons=quote.add_ons,
            ),
            payment_info=PaymentInfo(
                original_price=charge.original_price,
                discount=charge.discount,
                total_price=charge.total_price,
                base_price=quote.base_price,
                add_ons_total=quote.add_ons_total,
                payment_status=PaymentStatus.unpaid,
                payment_method=request.payment_method,
                payment_due_at=self._payment_due(request.payment_due_at, now),
                coupon_id=coupon.coupon_id if coupon else None,
                coupon_name=coupon.name if coupon else None,
            ),
            created_at=now,
            updated_at=now,
            created_by=principal.role,
        )

        with self._bookings.admission_lock(slot_lock_key(request.date, request.time)):
            self._availability.check_service_slot(request.date, request.time, request.technician_id)
            return self._bookings.create(booking)

    def _create_room_booking(self, request: RoomBookingRequest, auth: AuthContext | None) -> Booking:
        if not request.room_type_id or not request.check_in_date or not request.check_out_date:
            raise ValidationError("Missing booking dates or room type.")
        check_in = parse_calendar_date(request.check_in_date, "checkInDate")
        check_out = parse_calendar_date(request.check_out_date, "checkOutDate")
        if check_out <= check_in:
            raise ValidationError("Check-out date must be after check-in date.")

        principal = self._authorizer.require_customer_or_admin(auth)
        user_id = self._resolve_user_id(principal, request.user_id, require_user=False)

        with self._coupon_lock(user_id, request.coupon_id):
            created = self._admit_room_booking(request, principal, user_id, check_in, check_out)
            self._consume_coupon(created)

        self._logger.info(
            "Room booking created",
            extra={"booking_id": created.booking_id, "status": created.status.value, "user_id": user_id},
        )
        return created

    def _admit_room_booking(
        self,
        request: RoomBookingRequest,
        principal: Principal,
        user_id: str | None,
        check_in: date,
        check_out: date,
    ) -> Booking:
        room_type = self._catalog.load_room_type(request.room_type_id)
        nights = request.nights if request.nights and request.nights > 0 else nights_between(check_in, check_out)
        rooms = max(1, request.rooms or 1)
        quote = self._pricing.resolve_room(
            room_type,
            nights=nights,
            rooms=rooms,
            original_price=request.original_price,
            discount=request.discount,
            total_price=request.total_price,
        )
        coupon = self._validate_coupon(user_id, request.coupon_id, max(0, quote.subtotal - quote.discount))
        charge = apply_discount(quote.subtotal, quote.discount + (coupon.discount if coupon else 0))

        payment_status = PaymentStatus.unpaid
        if principal.is_admin and request.payment_status:
            payment_status = self._parse_enum(PaymentStatus, request.payment_status, "paymentStatus")

        now = self._clock()
        with self._bookings.admission_lock(room_lock_key(room_type.room_type_id)):
            units = self._availability.check_room(room_type, check_in, check_out, rooms)
            booking = Booking(
                booking_id=None,
                booking_type=BookingType.room,
                status=self._initial_status(principal, request.status),
                customer_info=request.customer_info.to_entity(),
                user_id=user_id,
                room_type_info=RoomTypeSnapshot(
                    room_type_id=room_type.room_type_id,
                    name=room_type.name,
                    base_price=room_type.base_price,
                    image_url=room_type.image_url,
                ),
                booking_info=RoomBookingInfo(
                    room_type_id=room_type.room_type_id,
                    check_in_date=request.check_in_date,
                    check_out_date=request.check_out_date,
                    nights=nights,
                    rooms=rooms,
                    guests=max(1, request.guests),
                    room_id=units[0].room_id,
                    room_number=units[0].room_number,
                    room_ids=tuple(u.room_id for u in units),
                ),
                payment_info=PaymentInfo(
                    original_price=charge.original_price,
                    discount=charge.discount,
                    total_price=charge.total_price,
                    base_price=room_type.base_price,
                    payment_status=payment_status,
                    payment_method=request.payment_method,
                    payment_due_at=self._payment_due(request.payment_due_at, now),
                    coupon_id=coupon.coupon_id if coupon else None,
                    coupon_name=coupon.name if coupon else None,
                ),
                created_at=now,
                updated_at=now,
                created_by=principal.role,
            )
            return self._bookings.create(booking)

    def _resolve_user_id(self, principal: Principal, requested: str | None, require_user: bool) -> str | None:
        if principal.is_admin:
            return requested or None
        line_user_id = principal.user_id
        if line_user_id and requested and line_user_id != requested:
            raise Unauthorized("LINE user mismatch.")
        if not line_user_id and not requested and require_user:
            raise Unauthorized("Missing LINE user.")
        return line_user_id or requested or None

    def _payment_due(self, requested: datetime | None, now: datetime) -> datetime:
        if requested is not None:
            return as_business_time(requested, self._timezone)
        return end_of_business_day(self._timezone, now)

    def _validate_coupon(self, user_id: str | None, coupon_id: str | None, subtotal: int) -> AppliedCoupon | None:
        if not coupon_id:
            return None
        return self._coupon_validator.validate(user_id, coupon_id, subtotal)

    def _initial_status(self, principal: Principal, requested: str | None) -> BookingStatus:
        # Self-service bookings always start pending; admins may start further along.
        if not principal.is_admin or not requested or requested == BookingStatus.awaiting_confirmation.value:
            return BookingStatus.pending
        return self._parse_enum(BookingStatus, requested, "status")

    @staticmethod
    def _parse_enum(enum_cls, value: str, field_name: str):
        try:
            return enum_cls(value)
        except ValueError:
            raise ValidationError(f"Unknown {field_name}: {value}")

    def _coupon_lock(self, user_id: str | None, coupon_id: str | None) -> AbstractContextManager:
        # Held across validate, create and mark-used so one coupon backs one booking.
        if not user_id or not coupon_id:
            return nullcontext()
        return self._bookings.admission_lock(coupon_lock_key(user_id, coupon_id))

    def _consume_coupon(self, booking: Booking) -> None:
        if not booking.payment_info.coupon_id or not booking.user_id:
            return
        marked = self._runner.run_now(
            "coupon_mark_used",
            self._coupons.mark_used,
            booking.user_id,
            booking.payment_info.coupon_id,
            booking.booking_id,
            self._clock(),
        )
        if not marked:
            self._logger.warning(
                "Coupon was not marked used",
                extra={"booking_id": booking.booking_id, "reason": booking.payment_info.coupon_id},
            )

    def _after_commit(self, booking: Booking) -> None:
        if booking.booking_type == BookingType.service:
            self._runner.run("calendar_upsert", self._calendar.upsert_event, booking)

        if booking.user_id or booking.customer_info.phone:
            self._runner.run("customer_upsert", self._customers.upsert_customer, booking.customer_info, booking.user_id)

        self._notifications.customer(booking, CustomerNotification.new_booking)
        self._notifications.admins(booking, AdminNotification.new_booking)
