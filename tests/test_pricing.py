from datetime import date, datetime
from decimal import Decimal

import pytest

from staybook.errors import ValidationError
from staybook.services.pricing import count_nights, price, round_amount


def test_three_night_stay_breakdown():
    breakdown = price(250, date(2025, 8, 1), date(2025, 8, 4), cleaning_fee=85,
                      service_fee_rate=0.12, tax_rate=0.15)

    assert breakdown.nights == 3
    assert breakdown.subtotal == Decimal('750')
    assert breakdown.cleaning_fee == Decimal('85')
    assert breakdown.service_fee == Decimal('90')
    assert breakdown.taxes == Decimal('139')
    assert breakdown.total == Decimal('1064')
    assert breakdown.currency == 'CAD'


def test_same_inputs_give_same_breakdown():
    first = price(199.99, date(2025, 8, 1), date(2025, 8, 8), cleaning_fee=60)
    second = price(199.99, date(2025, 8, 1), date(2025, 8, 8), cleaning_fee=60)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_total_is_sum_of_parts():
    breakdown = price(137.5, date(2025, 9, 1), date(2025, 9, 5), cleaning_fee=40.5)
    assert breakdown.total == (breakdown.subtotal + breakdown.cleaning_fee
                               + breakdown.service_fee + breakdown.taxes)


def test_rounding_is_half_up():
    assert round_amount(Decimal('138.75')) == Decimal('139')
    assert round_amount(Decimal('0.5')) == Decimal('1')
    assert round_amount(Decimal('2.5')) == Decimal('3')
    assert round_amount(Decimal('2.49')) == Decimal('2')


def test_partial_day_counts_as_a_night():
    assert count_nights(datetime(2025, 8, 1, 15), datetime(2025, 8, 3, 11)) == 2
    assert count_nights(date(2025, 8, 1), date(2025, 8, 3)) == 2


def test_zero_nights_is_rejected():
    with pytest.raises(ValidationError):
        price(250, date(2025, 8, 1), date(2025, 8, 1))
    with pytest.raises(ValidationError):
        price(250, date(2025, 8, 4), date(2025, 8, 1))
