from extensions import db
from datetime import datetime
from enum import Enum

from staybook.services.availability import BlockedInterval


class BlockedDateSource(str, Enum):
    """Where a blocked interval came from"""
    MANUAL = 'manual'
    ICAL_IMPORT = 'ical-import'


class BlockedDate(db.Model):
    """Dates when property cannot be booked, as a half-open range [start_date, end_date)"""
    __tablename__ = 'blocked_dates'
    __table_args__ = (
        db.CheckConstraint('start_date < end_date', name='ck_blocked_dates_range'),
        db.Index('idx_blocked_dates_property_range', 'property_id', 'start_date', 'end_date'),
    )

    id = db.Column(db.Integer, primary_key=True)
    property_id = db.Column(db.Integer, db.ForeignKey('properties.id'), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)  # exclusive
    source = db.Column(db.Enum(BlockedDateSource), default=BlockedDateSource.MANUAL, nullable=False)
    reason = db.Column(db.String(255))  # Optional: why it's blocked
    external_uid = db.Column(db.String(255))  # UID of the imported VEVENT
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_interval(self):
        return BlockedInterval(self.start_date, self.end_date, self.source.value, self.reason)

    def to_dict(self):
        return {
            'id': self.id,
            'property_id': self.property_id,
            'start_date': self.start_date.isoformat(),
            'end_date': self.end_date.isoformat(),
            'source': self.source.value,
            'reason': self.reason,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<BlockedDate {self.property_id} {self.start_date}..{self.end_date}>'
