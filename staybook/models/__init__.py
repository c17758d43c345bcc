"""
Models package initialization
Import all models here for easy access
"""

from staybook.models.user import User
from staybook.models.property import Property
from staybook.models.blocked_date import BlockedDate, BlockedDateSource
from staybook.models.reservation import Reservation, ReservationStatus
from staybook.models.inquiry import Inquiry, InquiryStatus
from staybook.models.coupon import Coupon, CouponRedemption, DiscountType

__all__ = [
    'User',
    'Property',
    'BlockedDate',
    'BlockedDateSource',
    'Reservation',
    'ReservationStatus',
    'Inquiry',
    'InquiryStatus',
    'Coupon',
    'CouponRedemption',
    'DiscountType',
]
