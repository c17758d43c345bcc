"""
Coupon Service
Validates coupon codes against a candidate booking and records redemptions.
"""

from datetime import datetime
from decimal import Decimal

from flask import current_app
from sqlalchemy import or_

from extensions import db
from staybook.errors import CouponError, CouponErrorCode
from staybook.models.coupon import Coupon, CouponRedemption, DiscountType
from staybook.services.pricing import round_amount, to_decimal


class CouponService:
    """Coupon validation and redemption"""

    @staticmethod
    def get_coupon(code, for_update=False):
        """Case-insensitive lookup; raises CouponError(not_found)"""
        if not code or not code.strip():
            raise CouponError(CouponErrorCode.NOT_FOUND, 'Coupon code is required')

        query = Coupon.query.filter(db.func.upper(Coupon.code) == Coupon.normalize_code(code))
        if for_update:
            query = query.with_for_update()

        coupon = query.first()
        if not coupon:
            raise CouponError(CouponErrorCode.NOT_FOUND, 'Invalid coupon code')
        return coupon

    @staticmethod
    def count_guest_redemptions(coupon, guest_email):
        return CouponRedemption.query.filter(
            CouponRedemption.coupon_id == coupon.id,
            db.func.lower(CouponRedemption.guest_email) == guest_email.strip().lower()
        ).count()

    @staticmethod
    def compute_discount(coupon, subtotal):
        """
        Discount for a subtotal, never more than the subtotal itself.

        Percentage discounts are rounded to a whole unit, then capped by
        max_discount when set.
        """
        subtotal = to_decimal(subtotal)
        value = to_decimal(coupon.discount_value)

        if coupon.discount_type == DiscountType.PERCENTAGE:
            discount = round_amount(subtotal * value / Decimal('100'))
        else:
            discount = value

        if coupon.max_discount is not None and discount > to_decimal(coupon.max_discount):
            discount = to_decimal(coupon.max_discount)

        return max(Decimal('0'), min(discount, subtotal))

    @staticmethod
    def validate(coupon, subtotal, nights, property_id=None, guest_email=None, now=None):
        """
        Check a coupon against a candidate booking.

        Checks run in a fixed order and the first failure is raised as a
        CouponError carrying its reason code.

        Returns:
            Decimal discount amount
        """
        now = now or datetime.utcnow()

        if not coupon.is_active:
            raise CouponError(CouponErrorCode.INACTIVE, 'This code is no longer active')

        if coupon.valid_from and now < coupon.valid_from:
            raise CouponError(CouponErrorCode.NOT_YET_VALID, 'This code is not valid yet')

        if coupon.valid_until and now > coupon.valid_until:
            raise CouponError(CouponErrorCode.EXPIRED, 'This code has expired')

        if coupon.min_nights and nights < coupon.min_nights:
            raise CouponError(CouponErrorCode.NIGHTS_OUT_OF_RANGE,
                              f'Minimum {coupon.min_nights} nights required')

        if coupon.max_nights and nights > coupon.max_nights:
            raise CouponError(CouponErrorCode.NIGHTS_OUT_OF_RANGE,
                              f'Maximum {coupon.max_nights} nights')

        if coupon.min_subtotal is not None and to_decimal(subtotal) < to_decimal(coupon.min_subtotal):
            raise CouponError(CouponErrorCode.BELOW_MINIMUM,
                              f'Minimum subtotal of {coupon.min_subtotal} required')

        if property_id is not None and coupon.applicable_property_ids:
            if int(property_id) not in coupon.applicable_property_ids:
                raise CouponError(CouponErrorCode.NOT_APPLICABLE,
                                  'This code does not apply to this property')

        if coupon.max_redemptions is not None and (coupon.current_redemptions or 0) >= coupon.max_redemptions:
            raise CouponError(CouponErrorCode.LIMIT_REACHED, 'Usage limit reached')

        if guest_email and coupon.max_per_guest is not None:
            if CouponService.count_guest_redemptions(coupon, guest_email) >= coupon.max_per_guest:
                raise CouponError(CouponErrorCode.GUEST_LIMIT_REACHED, 'Usage limit per guest reached')

        return CouponService.compute_discount(coupon, subtotal)

    @staticmethod
    def redeem(coupon, reservation, discount_amount):
        """
        Count one redemption inside the caller's transaction.

        The counter is bumped by a single conditional UPDATE so two bookings
        racing for the last redemption cannot both succeed. The caller owns
        the commit/rollback.
        """
        updated = Coupon.query.filter(
            Coupon.id == coupon.id,
            or_(Coupon.max_redemptions.is_(None),
                Coupon.current_redemptions < Coupon.max_redemptions)
        ).update(
            {Coupon.current_redemptions: Coupon.current_redemptions + 1},
            synchronize_session=False
        )

        if updated != 1:
            current_app.logger.warning(f'Coupon {coupon.code} hit its redemption limit at commit time')
            raise CouponError(CouponErrorCode.LIMIT_REACHED, 'Usage limit reached')

        redemption = CouponRedemption(
            coupon_id=coupon.id,
            reservation_id=reservation.id,
            guest_email=reservation.guest_email.strip().lower(),
            discount_applied=discount_amount,
            currency=reservation.currency,
        )
        db.session.add(redemption)
        db.session.expire(coupon, ['current_redemptions'])
        return redemption
