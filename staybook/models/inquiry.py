from extensions import db
from datetime import datetime
from enum import Enum


class InquiryStatus(str, Enum):
    NEW = 'new'
    REPLIED = 'replied'
    CLOSED = 'closed'


class Inquiry(db.Model):
    """Non-binding stay request; does not reserve the calendar"""

    __tablename__ = 'inquiries'

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey('properties.id'), nullable=True)
    status = db.Column(db.Enum(InquiryStatus), default=InquiryStatus.NEW, nullable=False)

    check_in = db.Column(db.Date)
    check_out = db.Column(db.Date)
    guests = db.Column(db.Integer)

    guest_first_name = db.Column(db.String(100), nullable=False)
    guest_last_name = db.Column(db.String(100), nullable=False)
    guest_email = db.Column(db.String(255), nullable=False)
    guest_phone = db.Column(db.String(40))
    message = db.Column(db.Text, nullable=False)
    language = db.Column(db.String(5), default='fr')

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __init__(self, **kwargs):
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def to_dict(self):
        return {
            'id': self.id,
            'property_id': self.property_id,
            'status': self.status.value,
            'check_in': self.check_in.isoformat() if self.check_in else None,
            'check_out': self.check_out.isoformat() if self.check_out else None,
            'guests': self.guests,
            'guest': {
                'first_name': self.guest_first_name,
                'last_name': self.guest_last_name,
                'email': self.guest_email,
                'phone': self.guest_phone,
            },
            'message': self.message,
            'language': self.language,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Inquiry {self.id} - {self.guest_email}>'
