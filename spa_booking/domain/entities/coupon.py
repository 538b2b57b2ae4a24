from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Coupon:
    coupon_id: str
    name: str = ""
    discount_type: str = ""  # "percentage" | "fixed"
    discount_value: float = 0
    used: bool = False
    used_at: datetime | None = None
    booking_id: str | None = None


@dataclass(frozen=True)
class AppliedCoupon:
    coupon_id: str
    name: str
    discount_type: str
    discount_value: float
    discount: int
