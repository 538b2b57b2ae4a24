from __future__ import annotations

import math

from spa_booking.application.exceptions import CouponAlreadyUsed, InvalidCoupon, InvalidCouponType
from spa_booking.application.ports.coupon_store import CouponStorePort
from spa_booking.domain.entities.coupon import AppliedCoupon


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def coupon_lock_key(user_id: str, coupon_id: str) -> str:
    return f"coupon:{user_id}:{coupon_id}"


class CouponValidator:
    def __init__(self, coupons: CouponStorePort) -> None:
        self._coupons = coupons

    def validate(self, user_id: str | None, coupon_id: str, subtotal: int) -> AppliedCoupon:
        """Check a user-scoped coupon and compute its discount against subtotal."""
        if not user_id:
            raise InvalidCoupon("Coupon requires a LINE user.")

        coupon = self._coupons.get_coupon(user_id, coupon_id)
        if coupon is None:
            raise InvalidCoupon("Invalid coupon.")
        if coupon.used:
            raise CouponAlreadyUsed("Coupon already used.")

        value = float(coupon.discount_value or 0)
        if coupon.discount_type == "percentage":
            discount = _round_half_up(subtotal * (value / 100))
        elif coupon.discount_type == "fixed":
            discount = _round_half_up(value)
        else:
            raise InvalidCouponType("Invalid coupon type.")

        return AppliedCoupon(
            coupon_id=coupon_id,
            name=coupon.name,
            discount_type=coupon.discount_type,
            discount_value=value,
            discount=max(0, min(discount, subtotal)),
        )
