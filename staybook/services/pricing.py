"""
Pricing Engine
Itemized stay price: nights x rate + cleaning fee + service fee + taxes.

Every intermediate amount is rounded half-up to a whole currency unit before
it feeds the next step, so the order of operations below is part of the
contract.
"""

import math
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP

from staybook.errors import ValidationError

DEFAULT_SERVICE_FEE_RATE = Decimal('0.12')
DEFAULT_TAX_RATE = Decimal('0.15')

_UNIT = Decimal('1')


def to_decimal(value):
    if value is None:
        return Decimal('0')
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_amount(value):
    """Round half-up to the nearest whole currency unit"""
    return to_decimal(value).quantize(_UNIT, rounding=ROUND_HALF_UP)


def count_nights(check_in, check_out):
    """ceil of the number of days between check_in and check_out"""
    if isinstance(check_in, datetime) or isinstance(check_out, datetime):
        seconds = (check_out - check_in).total_seconds()
        return math.ceil(seconds / 86400)
    return (check_out - check_in).days


class PricingBreakdown:
    """Derived price of a stay; never persisted"""

    def __init__(self, price_per_night, nights, subtotal, cleaning_fee,
                 service_fee, taxes, total, currency):
        self.price_per_night = price_per_night
        self.nights = nights
        self.subtotal = subtotal
        self.cleaning_fee = cleaning_fee
        self.service_fee = service_fee
        self.taxes = taxes
        self.total = total
        self.currency = currency

    def __eq__(self, other):
        if not isinstance(other, PricingBreakdown):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f'<PricingBreakdown {self.nights} nights total={self.total} {self.currency}>'

    def to_dict(self):
        return {
            'price_per_night': float(self.price_per_night),
            'nights': self.nights,
            'subtotal': float(self.subtotal),
            'cleaning_fee': float(self.cleaning_fee),
            'service_fee': float(self.service_fee),
            'taxes': float(self.taxes),
            'total': float(self.total),
            'currency': self.currency,
        }


def price(nightly_rate, check_in, check_out, cleaning_fee=0,
          service_fee_rate=DEFAULT_SERVICE_FEE_RATE, tax_rate=DEFAULT_TAX_RATE,
          currency='CAD'):
    """
    Compute the price breakdown of a stay.

    Args:
        nightly_rate: price per night
        check_in: first night
        check_out: departure day (exclusive)
        cleaning_fee: flat fee added once
        service_fee_rate: fraction of the subtotal
        tax_rate: fraction of subtotal + cleaning fee + service fee

    Returns:
        PricingBreakdown
    """
    nights = count_nights(check_in, check_out)
    if nights < 1:
        raise ValidationError('check_out must be after check_in', field='check_out')

    rate = to_decimal(nightly_rate)
    cleaning = round_amount(cleaning_fee)

    subtotal = round_amount(rate * nights)
    service_fee = round_amount(subtotal * to_decimal(service_fee_rate))
    taxes = round_amount((subtotal + cleaning + service_fee) * to_decimal(tax_rate))
    total = subtotal + cleaning + service_fee + taxes

    return PricingBreakdown(
        price_per_night=rate,
        nights=nights,
        subtotal=subtotal,
        cleaning_fee=cleaning,
        service_fee=service_fee,
        taxes=taxes,
        total=total,
        currency=currency,
    )
