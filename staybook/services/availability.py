"""
Availability Service
Turns blocked intervals into the set of dates a guest cannot select.

All intervals are half-open: ``[start, end)``. The end date is the checkout
day of the departing guest and stays bookable as the next check-in.
"""

from collections import namedtuple
from datetime import date, timedelta
from typing import Iterable, List, Optional, Set

from staybook.errors import AvailabilityConflict, ValidationError


BlockedInterval = namedtuple('BlockedInterval', ['start', 'end', 'source', 'reason'])


class DateRange(namedtuple('DateRange', ['check_in', 'check_out'])):
    """Committed stay; check_out is exclusive"""

    __slots__ = ()

    @property
    def nights(self) -> int:
        return (self.check_out - self.check_in).days

    def to_dict(self):
        return {
            'check_in': self.check_in.isoformat(),
            'check_out': self.check_out.isoformat(),
            'nights': self.nights,
        }


def iter_dates(start: date, end: date):
    """Yield every date d with start <= d < end"""
    current = start
    while current < end:
        yield current
        current += timedelta(days=1)


def compute_disabled_dates(intervals: Iterable[BlockedInterval]) -> Set[date]:
    """Explode intervals into the set of blocked calendar dates"""
    disabled = set()
    for interval in intervals:
        disabled.update(iter_dates(interval.start, interval.end))
    return disabled


class DateRangeBlocker:
    """Answers "can this date be selected?" for one property"""

    def __init__(self, intervals: Iterable[BlockedInterval], today: Optional[date] = None):
        self.intervals = sorted(intervals, key=lambda i: (i.start, i.end))
        self.today = today or date.today()
        self._blocked = compute_disabled_dates(self.intervals)

    def is_blocked(self, day: date) -> bool:
        # Past dates are never selectable
        return day < self.today or day in self._blocked

    __contains__ = is_blocked

    def first_conflict(self, check_in: date, check_out: date) -> Optional[date]:
        """First blocked night in [check_in, check_out), if any"""
        for day in iter_dates(check_in, check_out):
            if self.is_blocked(day):
                return day
        return None

    def disabled_dates(self, window_start: date, window_end: date) -> List[date]:
        """Sorted disabled dates within [window_start, window_end)"""
        return [day for day in iter_dates(window_start, window_end) if self.is_blocked(day)]

    def intervals_between(self, window_start: date, window_end: date) -> List[BlockedInterval]:
        return [i for i in self.intervals if i.start < window_end and i.end > window_start]


def check_nights(nights, min_nights=None, max_nights=None):
    """Raise ValidationError when a night count is outside the property limits"""
    if min_nights and nights < min_nights:
        raise ValidationError(f'Minimum {min_nights} nights required', field='check_out')

    if max_nights and nights > max_nights:
        raise ValidationError(f'Maximum {max_nights} nights allowed', field='check_out')


def validate_stay(check_in, check_out, blocker, min_nights=None, max_nights=None):
    """
    Server-side check of a requested stay.

    Raises ValidationError for malformed ranges or night counts outside the
    property limits, and AvailabilityConflict when any night is blocked.
    Returns the DateRange on success.
    """
    if check_out <= check_in:
        raise ValidationError('check_out must be after check_in', field='check_out')

    if check_in < blocker.today:
        raise ValidationError('check_in cannot be in the past', field='check_in')

    stay = DateRange(check_in, check_out)
    check_nights(stay.nights, min_nights, max_nights)

    conflict = blocker.first_conflict(check_in, check_out)
    if conflict is not None:
        raise AvailabilityConflict(conflict_date=conflict)

    return stay
