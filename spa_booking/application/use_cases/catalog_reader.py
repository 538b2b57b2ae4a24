from __future__ import annotations

from spa_booking.application.exceptions import NotFound
from spa_booking.application.ports.catalog import CatalogPort
from spa_booking.domain.entities.catalog import RoomType, ServiceDefinition


class CatalogReader:
    """Loads authoritative catalog definitions; the only source of prices and durations."""

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    def load_service(self, service_id: str) -> ServiceDefinition:
        service = self._catalog.get_service(service_id)
        if service is None:
            raise NotFound("Selected service not found.")
        return service

    def load_room_type(self, room_type_id: str) -> RoomType:
        room_type = self._catalog.get_room_type(room_type_id)
        if room_type is None:
            raise NotFound("Room type not found.")
        return room_type
