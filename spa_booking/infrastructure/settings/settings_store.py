from __future__ import annotations

from typing import Any

from spa_booking.application.ports.settings_store import SettingsStorePort
from spa_booking.application.utils.ttl_cache import ReadThroughCache
from spa_booking.domain.entities.settings import BookingSettings, NotificationSettings, PointSettings


class DocumentSettingsStore(SettingsStorePort):
    """
    Settings parsed from a single document with three sections:
    "booking", "notifications" and "points". Missing sections use defaults.
    """

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self._document = dict(document or {})

    def update(self, section: str, data: dict[str, Any]) -> None:
        self._document[section] = dict(data)

    def get_booking_settings(self) -> BookingSettings:
        return BookingSettings.from_document(self._document.get("booking"))

    def get_notification_settings(self) -> NotificationSettings:
        return NotificationSettings.from_document(self._document.get("notifications"))

    def get_point_settings(self) -> PointSettings:
        return PointSettings.from_document(self._document.get("points"))


class CachedSettingsStore(SettingsStorePort):
    def __init__(self, inner: SettingsStorePort, ttl_seconds: float = 60.0) -> None:
        self._inner = inner
        self._cache: ReadThroughCache[object] = ReadThroughCache(ttl_seconds)

    def get_booking_settings(self) -> BookingSettings:
        return self._cache.get("booking", self._inner.get_booking_settings)

    def get_notification_settings(self) -> NotificationSettings:
        return self._cache.get("notifications", self._inner.get_notification_settings)

    def get_point_settings(self) -> PointSettings:
        return self._cache.get("points", self._inner.get_point_settings)

    def invalidate(self, section: str | None = None) -> None:
        self._cache.invalidate(section)
