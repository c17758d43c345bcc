"""
Request payload helpers
"""

import math
import re
from datetime import datetime, time, timezone

from staybook.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def require_fields(data, fields):
    """Raise ValidationError for the first missing field"""
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    for field in fields:
        if data.get(field) in (None, ''):
            raise ValidationError(f'{field} is required', field=field)


def parse_date(value, field, required=True):
    """Parse YYYY-MM-DD"""
    if value in (None, ''):
        if required:
            raise ValidationError(f'{field} is required', field=field)
        return None
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f'{field} must be a date in YYYY-MM-DD format', field=field)


def parse_datetime(value, field, end_of_day=False):
    """
    Parse an ISO date or datetime; a bare date can be pinned to the end of the day.
    Offsets are converted to naive UTC, matching the stored columns.
    """
    if value in (None, ''):
        return None
    text = str(value)
    try:
        if len(text) == 10:
            day = datetime.strptime(text, '%Y-%m-%d').date()
            return datetime.combine(day, time.max if end_of_day else time.min)
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f'{field} must be an ISO date or datetime', field=field)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_int(value, field, minimum=None, required=False):
    if value in (None, ''):
        if required:
            raise ValidationError(f'{field} is required', field=field)
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a whole number', field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f'{field} must be at least {minimum}', field=field)
    return number


def parse_amount(value, field, required=False):
    if value in (None, ''):
        if required:
            raise ValidationError(f'{field} is required', field=field)
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a number', field=field)
    if not math.isfinite(amount):
        raise ValidationError(f'{field} must be a finite number', field=field)
    if amount < 0:
        raise ValidationError(f'{field} cannot be negative', field=field)
    return amount


def parse_email(value, field='email'):
    email = str(value or '').strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f'{field} must be a valid email address', field=field)
    return email
