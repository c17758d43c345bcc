"""
Coupon Models
"""

from extensions import db
from datetime import datetime
from enum import Enum


class DiscountType(str, Enum):
    """Coupon discount type enum"""
    PERCENTAGE = 'percentage'
    FIXED = 'fixed'


class Coupon(db.Model):
    """Discount code applicable to reservations"""

    __tablename__ = 'coupons'
    __table_args__ = (
        db.CheckConstraint('current_redemptions >= 0', name='ck_coupons_redemptions'),
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(200))

    # Discount
    discount_type = db.Column(db.Enum(DiscountType), nullable=False)
    discount_value = db.Column(db.Numeric(10, 2), nullable=False)
    max_discount = db.Column(db.Numeric(10, 2))

    # Constraints
    min_subtotal = db.Column(db.Numeric(10, 2))
    min_nights = db.Column(db.Integer)
    max_nights = db.Column(db.Integer)
    valid_from = db.Column(db.DateTime)
    valid_until = db.Column(db.DateTime)
    applicable_property_ids = db.Column(db.JSON, default=list)

    # Redemption limits
    max_redemptions = db.Column(db.Integer)
    max_per_guest = db.Column(db.Integer)
    current_redemptions = db.Column(db.Integer, default=0, nullable=False)

    is_active = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    redemptions = db.relationship('CouponRedemption', backref='coupon', lazy='dynamic')

    def __init__(self, **kwargs):
        """Initialize coupon; codes are stored upper-case"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
        if self.code:
            self.code = self.normalize_code(self.code)
        if self.current_redemptions is None:
            self.current_redemptions = 0

    @staticmethod
    def normalize_code(code):
        return code.strip().upper()

    def to_public_dict(self):
        """Fields safe to show to guests"""
        return {
            'id': self.id,
            'code': self.code,
            'name': self.name,
            'discount_type': self.discount_type.value,
            'discount_value': float(self.discount_value),
            'max_discount': float(self.max_discount) if self.max_discount is not None else None,
        }

    def to_dict(self):
        data = self.to_public_dict()
        data.update({
            'min_subtotal': float(self.min_subtotal) if self.min_subtotal is not None else None,
            'min_nights': self.min_nights,
            'max_nights': self.max_nights,
            'valid_from': self.valid_from.isoformat() if self.valid_from else None,
            'valid_until': self.valid_until.isoformat() if self.valid_until else None,
            'applicable_property_ids': self.applicable_property_ids or [],
            'max_redemptions': self.max_redemptions,
            'max_per_guest': self.max_per_guest,
            'current_redemptions': self.current_redemptions,
            'is_active': self.is_active,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        })
        return data

    def __repr__(self):
        return f'<Coupon {self.code}>'


class CouponRedemption(db.Model):
    """One successful application of a coupon to a reservation"""

    __tablename__ = 'coupon_redemptions'

    id = db.Column(db.Integer, primary_key=True)
    coupon_id = db.Column(db.Integer, db.ForeignKey('coupons.id'), nullable=False, index=True)
    reservation_id = db.Column(db.Integer, db.ForeignKey('reservations.id'), nullable=False, unique=True)
    guest_email = db.Column(db.String(255), nullable=False, index=True)
    discount_applied = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), default='CAD')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'coupon_id': self.coupon_id,
            'reservation_id': self.reservation_id,
            'guest_email': self.guest_email,
            'discount_applied': float(self.discount_applied),
            'currency': self.currency,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
