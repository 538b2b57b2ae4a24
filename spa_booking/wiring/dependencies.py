from functools import lru_cache
import logging
from concurrent.futures import ThreadPoolExecutor
from zoneinfo import ZoneInfo

from spa_booking.core.config import settings
from spa_booking.application.ports.booking_store import BookingStorePort
from spa_booking.application.ports.calendar import CalendarSyncPort
from spa_booking.application.ports.catalog import CatalogPort
from spa_booking.application.ports.coupon_store import CouponStorePort
from spa_booking.application.ports.customer_directory import CustomerDirectoryPort
from spa_booking.application.ports.identity import EmployeeDirectoryPort, IdentityPort
from spa_booking.application.ports.notifier import NotificationPort
from spa_booking.application.ports.point_ledger import PointLedgerPort
from spa_booking.application.ports.settings_store import SettingsStorePort
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
from spa_booking.infrastructure.calendar.mock_calendar import MockCalendarSync
from spa_booking.infrastructure.catalog.cached_catalog import CachedCatalog
from spa_booking.infrastructure.catalog.catalog_store import MemoryCatalogStore, load_document, parse_coupons
from spa_booking.infrastructure.customers.memory_directory import MemoryCustomerDirectory
from spa_booking.infrastructure.identity.employee_directory import MemoryEmployeeDirectory
from spa_booking.infrastructure.identity.line_identity import LineIdentityResolver
from spa_booking.infrastructure.identity.mock_identity import MockIdentityResolver
from spa_booking.infrastructure.messaging.line_client import LineMessagingClient
from spa_booking.infrastructure.messaging.line_notifier import LineNotifier
from spa_booking.infrastructure.messaging.mock_notifier import MockNotifier
from spa_booking.infrastructure.messaging.telegram_client import TelegramClient
from spa_booking.infrastructure.points.memory_ledger import MemoryPointLedger
from spa_booking.infrastructure.settings.settings_store import CachedSettingsStore, DocumentSettingsStore
from spa_booking.infrastructure.store.json_store import JsonBookingStore
from spa_booking.infrastructure.store.memory_store import MemoryBookingStore, MemoryCouponStore

logger = logging.getLogger(__name__)


def _is_local() -> bool:
    return settings.ENV.lower() in {"dev", "local"}


def get_timezone() -> ZoneInfo:
    return ZoneInfo(settings.BUSINESS_TIMEZONE)


@lru_cache
def get_booking_store() -> BookingStorePort:
    if _is_local() or settings.PERSIST_BOOKINGS:
        logger.info("Using JsonBookingStore", extra={"reason": settings.DATA_DIR})
        return JsonBookingStore(settings.DATA_DIR)
    return MemoryBookingStore()


@lru_cache
def _catalog_document() -> dict:
    return load_document(settings.CATALOG_FILE) if settings.CATALOG_FILE else {}


@lru_cache
def _settings_document() -> dict:
    return load_document(settings.SETTINGS_FILE) if settings.SETTINGS_FILE else {}


@lru_cache
def get_catalog() -> CatalogPort:
    store = MemoryCatalogStore.from_document(_catalog_document())
    return CachedCatalog(store, ttl_seconds=settings.CATALOG_CACHE_TTL_SECONDS)


@lru_cache
def get_coupon_store() -> CouponStorePort:
    return MemoryCouponStore(parse_coupons(_catalog_document()))


@lru_cache
def get_settings_store() -> SettingsStorePort:
    return CachedSettingsStore(
        DocumentSettingsStore(_settings_document()),
        ttl_seconds=settings.SETTINGS_CACHE_TTL_SECONDS,
    )


@lru_cache
def get_identity() -> IdentityPort:
    allow_bypass = settings.ALLOW_DEV_AUTH_BYPASS and not settings.is_production
    if settings.ALLOW_DEV_AUTH_BYPASS and settings.is_production:
        logger.warning("ALLOW_DEV_AUTH_BYPASS ignored in production")
    if _is_local() and not settings.LINE_CHANNEL_ACCESS_TOKEN:
        logger.info("Using MockIdentityResolver (token missing, ENV=dev/local)")
        return MockIdentityResolver(
            admin_tokens=settings.admin_tokens,
            user_tokens=settings.dev_user_tokens,
            allow_dev_bypass=allow_bypass,
        )
    return LineIdentityResolver(
        admin_tokens=settings.admin_tokens,
        api_base_url=settings.LINE_API_BASE_URL,
        allow_dev_bypass=allow_bypass,
    )


@lru_cache
def get_employee_directory() -> EmployeeDirectoryPort:
    return MemoryEmployeeDirectory.from_document(_settings_document())


@lru_cache
def get_notifier() -> NotificationPort:
    telegram = None
    if settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_ADMIN_CHAT_ID:
        telegram = TelegramClient(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_ADMIN_CHAT_ID)

    if not settings.LINE_CHANNEL_ACCESS_TOKEN:
        if _is_local():
            logger.info("Using MockNotifier (token missing, ENV=dev/local)")
            return MockNotifier()
        raise ValueError("LINE_CHANNEL_ACCESS_TOKEN is required to send notifications.")

    line = LineMessagingClient(settings.LINE_CHANNEL_ACCESS_TOKEN, settings.LINE_API_BASE_URL)
    return LineNotifier(
        line=line,
        admin_line_ids=settings.admin_line_ids,
        telegram=telegram,
        currency=settings.CURRENCY_SYMBOL,
    )


@lru_cache
def get_point_ledger() -> PointLedgerPort:
    return MemoryPointLedger(get_settings_store())


@lru_cache
def get_customer_directory() -> CustomerDirectoryPort:
    return MemoryCustomerDirectory()


@lru_cache
def get_calendar() -> CalendarSyncPort:
    return MockCalendarSync()


@lru_cache
def get_side_effect_runner() -> SideEffectRunner:
    if settings.SIDE_EFFECT_WORKERS > 0:
        executor = ThreadPoolExecutor(max_workers=settings.SIDE_EFFECT_WORKERS, thread_name_prefix="side-effect")
        return SideEffectRunner(submit=executor.submit)
    return SideEffectRunner()


def get_authorizer() -> Authorizer:
    return Authorizer(identity=get_identity(), employees=get_employee_directory())


def get_notification_gate() -> NotificationGate:
    return NotificationGate(
        notifier=get_notifier(),
        settings_store=get_settings_store(),
        runner=get_side_effect_runner(),
    )


def get_create_booking_use_case() -> CreateBookingUseCase:
    return CreateBookingUseCase(
        authorizer=get_authorizer(),
        catalog_reader=CatalogReader(get_catalog()),
        pricing=PricingResolver(),
        coupon_validator=CouponValidator(get_coupon_store()),
        availability=AvailabilityChecker(get_booking_store(), get_settings_store()),
        bookings=get_booking_store(),
        coupons=get_coupon_store(),
        customers=get_customer_directory(),
        calendar=get_calendar(),
        notifications=get_notification_gate(),
        runner=get_side_effect_runner(),
        timezone=get_timezone(),
        production=settings.is_production,
    )


def get_status_transition_use_case() -> StatusTransitionUseCase:
    return StatusTransitionUseCase(
        authorizer=get_authorizer(),
        bookings=get_booking_store(),
        points=get_point_ledger(),
        customers=get_customer_directory(),
        calendar=get_calendar(),
        notifications=get_notification_gate(),
        runner=get_side_effect_runner(),
        timezone=get_timezone(),
    )


def get_auto_cancel_use_case() -> AutoCancelUnpaidUseCase:
    return AutoCancelUnpaidUseCase(
        bookings=get_booking_store(),
        calendar=get_calendar(),
        notifications=get_notification_gate(),
        runner=get_side_effect_runner(),
        timezone=get_timezone(),
    )
