"""
Services Package
Booking engine logic and external integrations
"""

from staybook.services.availability import DateRangeBlocker, DateRange, BlockedInterval, compute_disabled_dates
from staybook.services.pricing import PricingBreakdown, price
from staybook.services.selector import AvailabilitySelector, SelectionState

__all__ = [
    'DateRangeBlocker',
    'DateRange',
    'BlockedInterval',
    'compute_disabled_dates',
    'PricingBreakdown',
    'price',
    'AvailabilitySelector',
    'SelectionState',
]
