"""
Shared fixtures: the booking use cases assembled over in-memory adapters.
"""

from __future__ import annotations

from datetime import datetime
from types import SimpleNamespace
from zoneinfo import ZoneInfo

import pytest

from spa_booking.application.use_cases.auto_cancel_unpaid import AutoCancelUnpaidUseCase
from spa_booking.application.use_cases.availability import AvailabilityChecker
from spa_booking.application.use_cases.catalog_reader import CatalogReader
from spa_booking.application.use_cases.coupons import CouponValidator
from spa_booking.application.use_cases.create_booking import CreateBookingUseCase
from spa_booking.application.use_cases.pricing import PricingResolver
from spa_booking.application.use_cases.status_transitions import StatusTransitionUseCase
from spa_booking.application.utils.authorization import Authorizer
from spa_booking.application.utils.notifications import NotificationGate
from spa_booking.application.utils.side_effects import SideEffectRunner
from spa_booking.domain.entities.principal import AuthContext
from spa_booking.infrastructure.calendar.mock_calendar import MockCalendarSync
from spa_booking.infrastructure.catalog.catalog_store import MemoryCatalogStore, parse_coupons
from spa_booking.infrastructure.customers.memory_directory import MemoryCustomerDirectory
from spa_booking.infrastructure.identity.employee_directory import MemoryEmployeeDirectory
from spa_booking.infrastructure.identity.mock_identity import MockIdentityResolver
from spa_booking.infrastructure.messaging.mock_notifier import MockNotifier
from spa_booking.infrastructure.points.memory_ledger import MemoryPointLedger
from spa_booking.infrastructure.settings.settings_store import DocumentSettingsStore
from spa_booking.infrastructure.store.memory_store import MemoryBookingStore, MemoryCouponStore

TZ = ZoneInfo("Asia/Bangkok")

CATALOG = {
    "services": {
        "massage": {
            "serviceName": "Thai Massage",
            "price": 500,
            "duration": 60,
            "serviceType": "single",
            "addOnServices": [
                {"name": "Hot Stone", "price": 100, "duration": 15},
                {"name": "Aroma Oil", "price": 50, "duration": 10},
            ],
        },
        "laser": {
            "serviceName": "Laser",
            "price": 1000,
            "duration": 30,
            "serviceType": "multi-area",
            "areas": [
                {
                    "name": "Face",
                    "price": 800,
                    "duration": 20,
                    "packages": [{"name": "5 sessions", "price": 3500, "duration": 25}],
                },
                {"name": "Legs", "price": 1500, "duration": 45},
            ],
        },
        "facial": {
            "serviceName": "Facial",
            "price": 999,
            "duration": 99,
            "serviceType": "area-based-options",
            "areaOptions": [
                {
                    "areaName": "Face",
                    "options": [
                        {"name": "Basic", "price": 300, "duration": 30},
                        {"name": "Premium", "price": 600, "duration": 45},
                    ],
                },
                {"areaName": "Neck", "options": [{"name": "Basic", "price": 200, "duration": 20}]},
            ],
        },
    },
    "roomTypes": {
        "deluxe": {
            "name": "Deluxe",
            "basePrice": 1000,
            "rooms": [
                {"id": "r1", "roomNumber": "101", "status": "available"},
                {"id": "r2", "roomNumber": "102"},
                {"id": "r3", "roomNumber": "103", "status": "maintenance"},
            ],
        },
    },
    "coupons": {
        "U-alice": [
            {"id": "TEN", "name": "10% off", "discountType": "percentage", "discountValue": 10},
            {"id": "FIFTY", "name": "50 off", "discountType": "fixed", "discountValue": 50},
            {"id": "WEIRD", "name": "Mystery", "discountType": "bogus", "discountValue": 5},
            {"id": "OLD", "name": "Old", "discountType": "fixed", "discountValue": 20, "used": True},
        ],
    },
}

_ALL_CUSTOMER = {
    "enabled": True,
    "newBooking": True,
    "appointmentConfirmed": True,
    "serviceCompleted": True,
    "reviewRequest": True,
    "appointmentCancelled": True,
    "paymentConfirmed": True,
    "paymentInvoice": True,
}
_ALL_ADMIN = {
    "enabled": True,
    "newBooking": True,
    "paymentReceived": True,
    "customerConfirmed": True,
    "bookingCancelled": True,
    "paymentSlip": True,
}

SETTINGS = {
    "booking": {"useTechnician": True, "totalTechnicians": 2, "timeQueues": [{"time": "14:00", "count": 1}]},
    "notifications": {
        "allNotifications": {"enabled": True},
        "customerNotifications": _ALL_CUSTOMER,
        "adminNotifications": _ALL_ADMIN,
    },
    "points": {"enablePurchasePoints": True, "pointsPerCurrency": 100, "enableVisitPoints": True, "pointsPerVisit": 1},
    "employees": {"emp-1": {"lineUserId": "U-emp", "status": "active"}},
}


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def build_env(production: bool = False, allow_dev_bypass: bool = False) -> SimpleNamespace:
    clock = Clock(datetime(2024, 5, 1, 10, 0, tzinfo=TZ))
    store = MemoryBookingStore()
    coupons = MemoryCouponStore(parse_coupons(CATALOG))
    settings_store = DocumentSettingsStore(SETTINGS)
    notifier = MockNotifier()
    calendar = MockCalendarSync()
    customers = MemoryCustomerDirectory()
    ledger = MemoryPointLedger(settings_store)
    runner = SideEffectRunner()
    identity = MockIdentityResolver(
        admin_tokens={"admin-token"},
        user_tokens={"alice-token": "U-alice", "bob-token": "U-bob", "emp-token": "U-emp"},
        allow_dev_bypass=allow_dev_bypass,
    )
    authorizer = Authorizer(identity, MemoryEmployeeDirectory.from_document(SETTINGS))
    gate = NotificationGate(notifier, settings_store, runner)

    create = CreateBookingUseCase(
        authorizer=authorizer,
        catalog_reader=CatalogReader(MemoryCatalogStore.from_document(CATALOG)),
        pricing=PricingResolver(),
        coupon_validator=CouponValidator(coupons),
        availability=AvailabilityChecker(store, settings_store),
        bookings=store,
        coupons=coupons,
        customers=customers,
        calendar=calendar,
        notifications=gate,
        runner=runner,
        timezone=TZ,
        production=production,
        clock=clock,
    )
    status = StatusTransitionUseCase(
        authorizer=authorizer,
        bookings=store,
        points=ledger,
        customers=customers,
        calendar=calendar,
        notifications=gate,
        runner=runner,
        timezone=TZ,
        clock=clock,
    )
    auto_cancel = AutoCancelUnpaidUseCase(
        bookings=store,
        calendar=calendar,
        notifications=gate,
        runner=runner,
        timezone=TZ,
        clock=clock,
    )
    return SimpleNamespace(
        clock=clock,
        store=store,
        coupons=coupons,
        settings_store=settings_store,
        notifier=notifier,
        calendar=calendar,
        customers=customers,
        ledger=ledger,
        create=create,
        status=status,
        auto_cancel=auto_cancel,
        admin=AuthContext(admin_token="admin-token"),
        alice=AuthContext(line_access_token="alice-token"),
        bob=AuthContext(line_access_token="bob-token"),
        employee=AuthContext(line_access_token="emp-token"),
        anonymous=AuthContext(),
    )


@pytest.fixture
def env() -> SimpleNamespace:
    return build_env()
