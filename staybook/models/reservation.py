"""
Reservation Model
"""

from extensions import db
from datetime import datetime
from enum import Enum

from staybook.services.availability import BlockedInterval


class ReservationStatus(str, Enum):
    """Reservation status enum"""
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    COMPLETED = 'completed'


class Reservation(db.Model):
    """Instant, confirmed booking of a property"""

    __tablename__ = 'reservations'
    __table_args__ = (
        db.CheckConstraint('check_in < check_out', name='ck_reservations_range'),
        db.Index('idx_reservations_property_dates', 'property_id', 'check_in', 'check_out'),
    )

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey('properties.id'), nullable=False)
    confirmation_code = db.Column(db.String(40), unique=True, nullable=False, index=True)
    status = db.Column(db.Enum(ReservationStatus), default=ReservationStatus.CONFIRMED, nullable=False)

    # Stay
    check_in = db.Column(db.Date, nullable=False)
    check_out = db.Column(db.Date, nullable=False)
    nights = db.Column(db.Integer, nullable=False)
    guests = db.Column(db.Integer, nullable=False, default=1)

    # Guest
    guest_first_name = db.Column(db.String(100), nullable=False)
    guest_last_name = db.Column(db.String(100), nullable=False)
    guest_email = db.Column(db.String(255), nullable=False, index=True)
    guest_phone = db.Column(db.String(40))
    guest_message = db.Column(db.Text)
    language = db.Column(db.String(5), default='fr')

    # Pricing snapshot
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    subtotal = db.Column(db.Numeric(10, 2), nullable=False)
    cleaning_fee = db.Column(db.Numeric(10, 2), default=0)
    service_fee = db.Column(db.Numeric(10, 2), default=0)
    taxes = db.Column(db.Numeric(10, 2), default=0)
    discount_amount = db.Column(db.Numeric(10, 2), default=0)
    coupon_code = db.Column(db.String(50))
    total = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), default='CAD')

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    cancelled_at = db.Column(db.DateTime)

    def __init__(self, **kwargs):
        """Initialize reservation"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_interval(self):
        return BlockedInterval(self.check_in, self.check_out, 'reservation', None)

    def cancel(self):
        """Cancel reservation, releasing its dates"""
        self.status = ReservationStatus.CANCELLED
        self.cancelled_at = datetime.utcnow()

    def to_dict(self, include_property=False):
        """Convert reservation to dictionary"""
        data = {
            'id': self.id,
            'property_id': self.property_id,
            'confirmation_code': self.confirmation_code,
            'status': self.status.value,
            'check_in': self.check_in.isoformat(),
            'check_out': self.check_out.isoformat(),
            'nights': self.nights,
            'guests': self.guests,
            'guest': {
                'first_name': self.guest_first_name,
                'last_name': self.guest_last_name,
                'email': self.guest_email,
                'phone': self.guest_phone,
            },
            'message': self.guest_message,
            'language': self.language,
            'pricing': {
                'price_per_night': float(self.price_per_night),
                'nights': self.nights,
                'subtotal': float(self.subtotal),
                'cleaning_fee': float(self.cleaning_fee or 0),
                'service_fee': float(self.service_fee or 0),
                'taxes': float(self.taxes or 0),
                'discount_amount': float(self.discount_amount or 0),
                'total': float(self.total),
                'currency': self.currency,
            },
            'coupon_code': self.coupon_code,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

        if include_property:
            data['property'] = self.property.to_dict()

        return data

    def __repr__(self):
        return f'<Reservation {self.confirmation_code}>'
