from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class TimeQueue:
    time: str
    count: int


@dataclass(frozen=True)
class BookingSettings:
    use_technician: bool = False
    max_per_slot: int = 1
    time_queues: tuple[TimeQueue, ...] = ()

    def capacity_for(self, time: str) -> int:
        for queue in self.time_queues:
            if queue.time == time:
                return queue.count
        return self.max_per_slot

    @staticmethod
    def from_document(data: dict[str, Any] | None) -> "BookingSettings":
        data = data or {}
        use_technician = bool(data.get("useTechnician", data.get("useBeautician", False)))
        total = data.get("totalTechnicians", data.get("totalBeauticians"))
        queues = tuple(
            TimeQueue(time=str(q["time"]), count=int(q["count"]))
            for q in data.get("timeQueues") or []
            if isinstance(q, dict) and "time" in q and isinstance(q.get("count"), int)
        )
        return BookingSettings(
            use_technician=use_technician,
            max_per_slot=int(total) if total else 1,
            time_queues=queues,
        )


@dataclass(frozen=True)
class NotificationSettings:
    all_enabled: bool = True
    customer_enabled: bool = True
    admin_enabled: bool = True
    customer_types: dict[str, bool] = field(default_factory=dict)
    admin_types: dict[str, bool] = field(default_factory=dict)

    def customer_allows(self, notification_type: str) -> bool:
        return self.all_enabled and self.customer_enabled and bool(self.customer_types.get(notification_type))

    def admin_allows(self, notification_type: str) -> bool:
        return self.all_enabled and self.admin_enabled and bool(self.admin_types.get(notification_type))

    @staticmethod
    def from_document(data: dict[str, Any] | None) -> "NotificationSettings":
        data = data or {}
        customer = dict(data.get("customerNotifications") or {})
        admin = dict(data.get("adminNotifications") or {})
        return NotificationSettings(
            all_enabled=(data.get("allNotifications") or {}).get("enabled") is not False,
            customer_enabled=customer.pop("enabled", True) is not False,
            admin_enabled=admin.pop("enabled", True) is not False,
            customer_types={k: bool(v) for k, v in customer.items()},
            admin_types={k: bool(v) for k, v in admin.items()},
        )


@dataclass(frozen=True)
class PointSettings:
    enable_purchase_points: bool = False
    points_per_currency: int = 100
    enable_visit_points: bool = False
    points_per_visit: int = 1

    @staticmethod
    def from_document(data: dict[str, Any] | None) -> "PointSettings":
        data = data or {}
        return PointSettings(
            enable_purchase_points=bool(data.get("enablePurchasePoints", False)),
            points_per_currency=int(data.get("pointsPerCurrency") or 100),
            enable_visit_points=bool(data.get("enableVisitPoints", False)),
            points_per_visit=int(data.get("pointsPerVisit") or 1),
        )
