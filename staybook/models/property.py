"""
Property Model
"""

from extensions import db
from datetime import datetime


class Property(db.Model):
    """Rental property/listing"""

    __tablename__ = 'properties'

    id = db.Column(db.Integer, primary_key=True)
    slug = db.Column(db.String(120), unique=True, nullable=False, index=True)

    # Multilingual content
    name_fr = db.Column(db.String(200), nullable=False)
    name_en = db.Column(db.String(200))
    name_es = db.Column(db.String(200))
    description_fr = db.Column(db.Text)
    description_en = db.Column(db.Text)
    description_es = db.Column(db.Text)
    address = db.Column(db.String(255))

    # Pricing
    price_per_night = db.Column(db.Numeric(10, 2), nullable=False)
    cleaning_fee = db.Column(db.Numeric(10, 2), default=0)
    currency = db.Column(db.String(3), default='CAD')

    # Stay rules
    min_nights = db.Column(db.Integer, default=1)
    max_nights = db.Column(db.Integer)
    max_guests = db.Column(db.Integer, default=4)

    # External calendar
    ical_url = db.Column(db.String(500))
    ical_last_synced_at = db.Column(db.DateTime)
    ical_last_sync_error = db.Column(db.Text)

    # Flags
    is_active = db.Column(db.Boolean, default=True)
    is_featured = db.Column(db.Boolean, default=False)
    instant_booking = db.Column(db.Boolean, default=True)

    # Timestamps
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    blocked_dates = db.relationship('BlockedDate', backref='property', lazy='dynamic',
                                    cascade='all, delete-orphan')
    reservations = db.relationship('Reservation', backref='property', lazy='dynamic')
    inquiries = db.relationship('Inquiry', backref='property', lazy='dynamic')

    def __init__(self, **kwargs):
        """Initialize property"""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def display_name(self, language='fr'):
        """Name in the requested language, falling back to French"""
        if language == 'en':
            return self.name_en or self.name_fr
        if language == 'es':
            return self.name_es or self.name_fr
        return self.name_fr

    def to_dict(self):
        """Convert property to dictionary"""
        return {
            'id': self.id,
            'slug': self.slug,
            'name_fr': self.name_fr,
            'name_en': self.name_en,
            'name_es': self.name_es,
            'description_fr': self.description_fr,
            'description_en': self.description_en,
            'description_es': self.description_es,
            'address': self.address,
            'price_per_night': float(self.price_per_night),
            'cleaning_fee': float(self.cleaning_fee or 0),
            'currency': self.currency,
            'min_nights': self.min_nights,
            'max_nights': self.max_nights,
            'max_guests': self.max_guests,
            'ical_url': self.ical_url,
            'ical_last_synced_at': self.ical_last_synced_at.isoformat() if self.ical_last_synced_at else None,
            'ical_last_sync_error': self.ical_last_sync_error,
            'is_active': self.is_active,
            'is_featured': self.is_featured,
            'instant_booking': self.instant_booking,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Property {self.slug}>'
