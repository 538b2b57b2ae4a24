"""
Tests for coupon validation and discount computation.
"""

from __future__ import annotations

import pytest

from spa_booking.application.exceptions import CouponAlreadyUsed, InvalidCoupon, InvalidCouponType
from spa_booking.application.use_cases.coupons import CouponValidator
from spa_booking.domain.entities.coupon import Coupon
from spa_booking.infrastructure.store.memory_store import MemoryCouponStore


def _validator(*coupons: Coupon) -> CouponValidator:
    return CouponValidator(MemoryCouponStore({"U1": list(coupons)}))


def test_percentage_discount_rounds_half_up():
    validator = _validator(Coupon(coupon_id="P", name="15%", discount_type="percentage", discount_value=15))

    # 15% of 130 = 19.5 -> 20
    applied = validator.validate("U1", "P", 130)
    assert applied.discount == 20
    assert applied.name == "15%"


def test_fixed_discount_is_capped_at_subtotal():
    validator = _validator(Coupon(coupon_id="F", discount_type="fixed", discount_value=500))

    assert validator.validate("U1", "F", 300).discount == 300


def test_coupon_requires_user():
    validator = _validator(Coupon(coupon_id="F", discount_type="fixed", discount_value=50))

    with pytest.raises(InvalidCoupon):
        validator.validate(None, "F", 300)


def test_unknown_coupon_is_invalid():
    with pytest.raises(InvalidCoupon):
        _validator().validate("U1", "NOPE", 300)


def test_used_coupon_is_rejected():
    validator = _validator(Coupon(coupon_id="F", discount_type="fixed", discount_value=50, used=True))

    with pytest.raises(CouponAlreadyUsed):
        validator.validate("U1", "F", 300)


def test_unknown_discount_type_is_rejected():
    validator = _validator(Coupon(coupon_id="X", discount_type="bogo", discount_value=1))

    with pytest.raises(InvalidCouponType):
        validator.validate("U1", "X", 300)


def test_coupon_is_scoped_to_its_owner():
    validator = _validator(Coupon(coupon_id="F", discount_type="fixed", discount_value=50))

    with pytest.raises(InvalidCoupon):
        validator.validate("U2", "F", 300)


def test_mark_used_only_once():
    store = MemoryCouponStore({"U1": [Coupon(coupon_id="F", discount_type="fixed", discount_value=50)]})

    assert store.mark_used("U1", "F", "b1", None) is True
    assert store.mark_used("U1", "F", "b2", None) is False
    assert store.get_coupon("U1", "F").booking_id == "b1"
