from datetime import date

import pytest

from staybook.services.availability import BlockedInterval, DateRange, DateRangeBlocker
from staybook.services.selector import AvailabilitySelector, SelectionState


@pytest.fixture
def changes():
    return []


@pytest.fixture
def selector(changes):
    blocker = DateRangeBlocker(
        [BlockedInterval(date(2025, 7, 10), date(2025, 7, 15), 'manual', None)],
        today=date(2025, 7, 1),
    )
    return AvailabilitySelector(blocker, min_nights=1, max_nights=20, on_change=changes.append)


def test_two_clicks_complete_a_range(selector, changes):
    assert selector.select(date(2025, 7, 3))
    assert selector.state == SelectionState.PARTIAL_RANGE
    assert selector.date_range is None

    assert selector.select(date(2025, 7, 6))
    assert selector.state == SelectionState.COMPLETE_RANGE
    assert changes == [DateRange(date(2025, 7, 3), date(2025, 7, 6))]


def test_disabled_date_is_ignored(selector, changes):
    assert not selector.select(date(2025, 7, 12))
    assert not selector.select(date(2025, 6, 20))
    assert selector.state == SelectionState.IDLE
    assert changes == []


def test_range_across_blocked_nights_is_rejected(selector):
    selector.select(date(2025, 7, 5))
    assert not selector.select(date(2025, 7, 17))
    assert selector.state == SelectionState.PARTIAL_RANGE
    assert selector.check_in == date(2025, 7, 5)


def test_earlier_click_restarts_check_in(selector):
    selector.select(date(2025, 7, 5))
    selector.select(date(2025, 7, 4))
    assert selector.state == SelectionState.PARTIAL_RANGE
    assert selector.check_in == date(2025, 7, 4)


def test_click_after_complete_range_starts_over(selector, changes):
    selector.select(date(2025, 7, 3))
    selector.select(date(2025, 7, 6))
    selector.select(date(2025, 7, 20))

    assert changes[-1] is None
    assert selector.state == SelectionState.PARTIAL_RANGE
    assert selector.check_in == date(2025, 7, 20)
    assert selector.check_out is None


def test_night_limits_are_enforced(changes):
    blocker = DateRangeBlocker([], today=date(2025, 7, 1))
    selector = AvailabilitySelector(blocker, min_nights=3, max_nights=5, on_change=changes.append)

    selector.select(date(2025, 7, 2))
    assert not selector.select(date(2025, 7, 4))
    assert not selector.select(date(2025, 7, 8))
    assert selector.select(date(2025, 7, 7))
    assert selector.date_range.nights == 5


def test_blocked_start_cannot_be_picked_as_checkout(selector):
    selector.select(date(2025, 7, 7))
    assert not selector.select(date(2025, 7, 10))


def test_clear_emits_none(selector, changes):
    selector.select(date(2025, 7, 3))
    selector.clear()
    assert selector.state == SelectionState.IDLE
    assert changes == [None]
