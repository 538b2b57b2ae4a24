from __future__ import annotations

from abc import ABC, abstractmethod

from spa_booking.domain.entities.booking import CustomerInfo


class CustomerDirectoryPort(ABC):
    @abstractmethod
    def upsert_customer(self, customer: CustomerInfo, user_id: str | None) -> str:
        """Find or create the customer record. Returns its id."""
        raise NotImplementedError
