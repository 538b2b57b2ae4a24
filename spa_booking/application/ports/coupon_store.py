from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from spa_booking.domain.entities.coupon import Coupon


class CouponStorePort(ABC):
    @abstractmethod
    def get_coupon(self, user_id: str, coupon_id: str) -> Coupon | None:
        raise NotImplementedError

    @abstractmethod
    def mark_used(self, user_id: str, coupon_id: str, booking_id: str, used_at: datetime) -> bool:
        """Mark coupon used. Returns False if it was already used or does not exist."""
        raise NotImplementedError
