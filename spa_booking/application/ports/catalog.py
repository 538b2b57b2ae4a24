from __future__ import annotations

from abc import ABC, abstractmethod

from spa_booking.domain.entities.catalog import RoomType, ServiceDefinition


class CatalogPort(ABC):
    @abstractmethod
    def get_service(self, service_id: str) -> ServiceDefinition | None:
        """Get canonical service definition by id."""
        raise NotImplementedError

    @abstractmethod
    def get_room_type(self, room_type_id: str) -> RoomType | None:
        """Get room type with its inventory units by id."""
        raise NotImplementedError
