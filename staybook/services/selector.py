"""
Availability Selector
Date-range picking state machine behind the guest calendar: builds a
check-in/check-out pair from clicked dates, rejecting disabled days.
"""

from enum import Enum

from staybook.services.availability import DateRange


class SelectionState(str, Enum):
    IDLE = 'idle'
    PARTIAL_RANGE = 'partial_range'
    COMPLETE_RANGE = 'complete_range'


class AvailabilitySelector:
    """
    Builds a check-in/check-out pair one clicked date at a time.

    Disabled dates are rejected without changing state. A completed range is
    passed to ``on_change``; clearing passes ``None``.
    """

    def __init__(self, blocker, min_nights=1, max_nights=None, on_change=None):
        self.blocker = blocker
        self.min_nights = min_nights or 1
        self.max_nights = max_nights
        self.on_change = on_change
        self.state = SelectionState.IDLE
        self.check_in = None
        self.check_out = None

    @property
    def date_range(self):
        if self.state != SelectionState.COMPLETE_RANGE:
            return None
        return DateRange(self.check_in, self.check_out)

    def select(self, day):
        """Feed one clicked date; returns False when the date is rejected"""
        if self.blocker.is_blocked(day):
            return False

        if self.state == SelectionState.COMPLETE_RANGE:
            self.clear()

        if self.state == SelectionState.IDLE or day <= self.check_in:
            self.check_in = day
            self.state = SelectionState.PARTIAL_RANGE
            return True

        if not self._can_complete(day):
            return False

        self.check_out = day
        self.state = SelectionState.COMPLETE_RANGE
        self._emit(self.date_range)
        return True

    def clear(self):
        self.state = SelectionState.IDLE
        self.check_in = None
        self.check_out = None
        self._emit(None)

    def _can_complete(self, day):
        nights = (day - self.check_in).days
        if nights < self.min_nights:
            return False
        if self.max_nights and nights > self.max_nights:
            return False
        return self.blocker.first_conflict(self.check_in, day) is None

    def _emit(self, value):
        if self.on_change is not None:
            self.on_change(value)
