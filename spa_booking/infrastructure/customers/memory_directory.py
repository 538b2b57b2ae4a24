from __future__ import annotations

import threading
import uuid

from spa_booking.application.ports.customer_directory import CustomerDirectoryPort
from spa_booking.domain.entities.booking import CustomerInfo


class MemoryCustomerDirectory(CustomerDirectoryPort):
    """Customers keyed by LINE user id, falling back to phone number."""

    def __init__(self) -> None:
        self._customers: dict[str, dict[str, str | None]] = {}
        self._lock = threading.Lock()

    def get(self, customer_id: str) -> dict[str, str | None] | None:
        return self._customers.get(customer_id)

    def upsert_customer(self, customer: CustomerInfo, user_id: str | None) -> str:
        with self._lock:
            customer_id = self._find(customer, user_id) or user_id or uuid.uuid4().hex[:20]
            record = self._customers.setdefault(customer_id, {"userId": user_id})
            if customer.name:
                record["fullName"] = customer.name
            if customer.phone:
                record["phone"] = customer.phone
            if customer.picture_url:
                record["pictureUrl"] = customer.picture_url
            if user_id:
                record["userId"] = user_id
            return customer_id

    def _find(self, customer: CustomerInfo, user_id: str | None) -> str | None:
        if user_id and user_id in self._customers:
            return user_id
        if customer.phone:
            for customer_id, record in self._customers.items():
                if record.get("phone") == customer.phone:
                    return customer_id
        return None
