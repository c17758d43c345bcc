"""
Booking engine errors

Every error carries a stable ``error`` code so clients can show a precise
message instead of a generic failure.
"""

from enum import Enum


class BookingEngineError(Exception):
    """Base class for errors surfaced to API callers"""

    status_code = 400
    error = 'bad_request'

    def __init__(self, message, field=None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        data = {'error': self.error, 'message': self.message}
        if self.field:
            data['field'] = self.field
        return data


class ValidationError(BookingEngineError):
    """Bad input shape or range (malformed date, check_out <= check_in, ...)"""

    error = 'validation_error'


class AvailabilityConflict(BookingEngineError):
    """Requested stay overlaps a blocked interval or another reservation"""

    status_code = 409
    error = 'dates_unavailable'

    def __init__(self, message='Selected dates are not available', conflict_date=None):
        super().__init__(message)
        self.conflict_date = conflict_date

    def to_dict(self):
        data = super().to_dict()
        if self.conflict_date:
            data['conflict_date'] = self.conflict_date.isoformat()
        return data


class CouponErrorCode(str, Enum):
    """Reason codes for rejected coupons"""
    NOT_FOUND = 'not_found'
    INACTIVE = 'inactive'
    NOT_YET_VALID = 'not_yet_valid'
    EXPIRED = 'expired'
    NIGHTS_OUT_OF_RANGE = 'nights_out_of_range'
    BELOW_MINIMUM = 'below_minimum'
    NOT_APPLICABLE = 'not_applicable'
    LIMIT_REACHED = 'limit_reached'
    GUEST_LIMIT_REACHED = 'guest_limit_reached'


class CouponError(BookingEngineError):
    """Coupon rejected for a specific reason"""

    def __init__(self, code, message=None):
        super().__init__(message or code.value.replace('_', ' ').capitalize(), field='coupon_code')
        self.code = code
        self.error = code.value
        if code == CouponErrorCode.NOT_FOUND:
            self.status_code = 404

    def to_dict(self):
        return {'valid': False, 'error': self.error, 'message': self.message}


class SyncError(BookingEngineError):
    """External calendar could not be fetched or parsed"""

    status_code = 502
    error = 'sync_failed'


class PersistenceError(BookingEngineError):
    """Database failure while committing a booking"""

    status_code = 500
    error = 'persistence_error'
