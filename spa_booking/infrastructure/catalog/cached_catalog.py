from __future__ import annotations

from spa_booking.application.ports.catalog import CatalogPort
from spa_booking.application.utils.ttl_cache import ReadThroughCache
from spa_booking.domain.entities.catalog import RoomType, ServiceDefinition


class CachedCatalog(CatalogPort):
    """Read-through TTL cache in front of another catalog."""

    def __init__(self, inner: CatalogPort, ttl_seconds: float = 60.0) -> None:
        self._inner = inner
        self._cache: ReadThroughCache[object] = ReadThroughCache(ttl_seconds)

    def get_service(self, service_id: str) -> ServiceDefinition | None:
        return self._cache.get(("service", service_id), lambda: self._inner.get_service(service_id))

    def get_room_type(self, room_type_id: str) -> RoomType | None:
        return self._cache.get(("room_type", room_type_id), lambda: self._inner.get_room_type(room_type_id))

    def invalidate(self) -> None:
        self._cache.invalidate()
