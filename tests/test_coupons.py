from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from extensions import db
from staybook.errors import CouponError, CouponErrorCode
from staybook.models.coupon import Coupon, CouponRedemption, DiscountType
from staybook.services.coupon_service import CouponService

NOW = datetime(2025, 6, 1, 12, 0)


def build_coupon(**fields):
    fields.setdefault('code', 'TEST')
    fields.setdefault('discount_type', DiscountType.PERCENTAGE)
    fields.setdefault('discount_value', 10)
    fields.setdefault('is_active', True)
    return Coupon(**fields)


def rejection(coupon, subtotal=500, nights=3, **kwargs):
    kwargs.setdefault('now', NOW)
    with pytest.raises(CouponError) as exc:
        CouponService.validate(coupon, subtotal=subtotal, nights=nights, **kwargs)
    return exc.value.code


def test_fixed_discount_is_capped_at_subtotal(app):
    coupon = build_coupon(discount_type=DiscountType.FIXED, discount_value=50)
    assert CouponService.compute_discount(coupon, 40) == Decimal('40')


def test_percentage_discount_rounds_half_up_and_respects_cap(app):
    coupon = build_coupon(discount_value=10)
    assert CouponService.compute_discount(coupon, 755) == Decimal('76')

    coupon.max_discount = 50
    assert CouponService.compute_discount(coupon, 755) == Decimal('50')


def test_discount_never_decreases_with_subtotal(app):
    coupon = build_coupon(discount_value=15, max_discount=120)
    discounts = [CouponService.compute_discount(coupon, subtotal) for subtotal in range(0, 2000, 37)]
    assert discounts == sorted(discounts)
    assert all(Decimal('0') <= d <= Decimal('120') for d in discounts)


def test_exhausted_coupon_is_rejected(app):
    coupon = build_coupon(max_redemptions=1, current_redemptions=1)
    assert rejection(coupon) == CouponErrorCode.LIMIT_REACHED


def test_first_failing_check_wins(app):
    expired_and_inactive = build_coupon(is_active=False, valid_until=NOW - timedelta(days=1))
    assert rejection(expired_and_inactive) == CouponErrorCode.INACTIVE

    expired_and_short = build_coupon(valid_until=NOW - timedelta(days=1), min_nights=5)
    assert rejection(expired_and_short) == CouponErrorCode.EXPIRED

    short_and_small = build_coupon(min_nights=5, min_subtotal=1000)
    assert rejection(short_and_small) == CouponErrorCode.NIGHTS_OUT_OF_RANGE

    small_and_full = build_coupon(min_subtotal=1000, max_redemptions=1, current_redemptions=1)
    assert rejection(small_and_full) == CouponErrorCode.BELOW_MINIMUM


def test_validity_window(app):
    assert rejection(build_coupon(valid_from=NOW + timedelta(hours=1))) == CouponErrorCode.NOT_YET_VALID
    assert rejection(build_coupon(valid_until=NOW - timedelta(seconds=1))) == CouponErrorCode.EXPIRED

    coupon = build_coupon(valid_from=NOW - timedelta(days=1), valid_until=NOW + timedelta(days=1))
    assert CouponService.validate(coupon, subtotal=500, nights=3, now=NOW) == Decimal('50')


def test_nights_out_of_range(app):
    assert rejection(build_coupon(max_nights=2), nights=3) == CouponErrorCode.NIGHTS_OUT_OF_RANGE


def test_property_restriction(app):
    coupon = build_coupon(applicable_property_ids=[7])
    assert rejection(coupon, property_id=3) == CouponErrorCode.NOT_APPLICABLE
    assert CouponService.validate(coupon, subtotal=500, nights=3, property_id=7, now=NOW) == Decimal('50')


def test_lookup_is_case_insensitive(make_coupon):
    make_coupon(code='summer10')
    assert CouponService.get_coupon('Summer10').code == 'SUMMER10'

    with pytest.raises(CouponError) as exc:
        CouponService.get_coupon('WINTER')
    assert exc.value.code == CouponErrorCode.NOT_FOUND
    assert exc.value.status_code == 404


def test_redeem_stops_at_max_redemptions(property, make_coupon, make_reservation, future):
    coupon = make_coupon(max_redemptions=1)
    first = make_reservation(property, future(10), future(12))
    second = make_reservation(property, future(20), future(22))

    CouponService.redeem(coupon, first, Decimal('50'))
    db.session.commit()
    assert coupon.current_redemptions == 1

    with pytest.raises(CouponError) as exc:
        CouponService.redeem(coupon, second, Decimal('50'))
    assert exc.value.code == CouponErrorCode.LIMIT_REACHED
    db.session.rollback()

    assert CouponRedemption.query.count() == 1
    assert Coupon.query.get(coupon.id).current_redemptions == 1


def test_per_guest_limit(property, make_coupon, make_reservation, future):
    coupon = make_coupon(max_per_guest=1)
    reservation = make_reservation(property, future(10), future(12), guest_email='guest@example.com')
    CouponService.redeem(coupon, reservation, Decimal('25'))
    db.session.commit()

    code = rejection(coupon, guest_email='GUEST@example.com', now=datetime.utcnow())
    assert code == CouponErrorCode.GUEST_LIMIT_REACHED

    discount = CouponService.validate(coupon, subtotal=500, nights=3, guest_email='other@example.com')
    assert discount == Decimal('50')


def test_error_body_shape():
    body = CouponError(CouponErrorCode.EXPIRED, 'This code has expired').to_dict()
    assert body == {'valid': False, 'error': 'expired', 'message': 'This code has expired'}
