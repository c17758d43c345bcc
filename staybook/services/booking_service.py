"""
Booking Service
Turns a guest submission into a confirmed Reservation or a non-binding
Inquiry, depending on the host's instant-booking setting.
"""

import secrets
import string
import time
from datetime import date

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from extensions import db
from staybook.errors import AvailabilityConflict, BookingEngineError, PersistenceError, ValidationError
from staybook.models.blocked_date import BlockedDate
from staybook.models.inquiry import Inquiry, InquiryStatus
from staybook.models.property import Property
from staybook.models.reservation import Reservation, ReservationStatus
from staybook.services.availability import DateRangeBlocker, validate_stay
from staybook.services.coupon_service import CouponService
from staybook.services.email_service import EmailService
from staybook.services.pricing import price
from staybook.utils.validators import parse_date, parse_email

_BASE36 = string.digits + string.ascii_uppercase


def _base36(number):
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return ''.join(reversed(digits)) or '0'


def generate_confirmation_code(prefix=None):
    """e.g. SB-M3K9Q2ZT-7F2C"""
    prefix = prefix or current_app.config['CONFIRMATION_CODE_PREFIX']
    suffix = ''.join(secrets.choice(_BASE36) for _ in range(4))
    return f'{prefix}-{_base36(int(time.time() * 1000))}-{suffix}'


def load_blocker(property_id, today=None):
    """DateRangeBlocker over manual/imported blocks and active reservations"""
    intervals = [b.to_interval() for b in BlockedDate.query.filter_by(property_id=property_id).all()]
    intervals.extend(
        r.to_interval() for r in Reservation.query.filter(
            Reservation.property_id == property_id,
            Reservation.status != ReservationStatus.CANCELLED
        ).all()
    )
    return DateRangeBlocker(intervals, today=today)


def stay_pricing(property, check_in, check_out):
    config = current_app.config
    return price(
        property.price_per_night,
        check_in,
        check_out,
        cleaning_fee=property.cleaning_fee,
        service_fee_rate=config['SERVICE_FEE_RATE'],
        tax_rate=config['TAX_RATE'],
        currency=property.currency or config['DEFAULT_CURRENCY'],
    )


class BookingService:
    """Booking submission workflow"""

    @staticmethod
    def parse_submission(data):
        """Validate the submitted payload shape; returns a normalized dict"""
        if not isinstance(data, dict):
            raise ValidationError('Request body must be a JSON object')

        guest = data.get('guest') or {}
        for field in ('first_name', 'last_name', 'email'):
            if not str(guest.get(field) or '').strip():
                raise ValidationError(f'guest.{field} is required', field=f'guest.{field}')

        check_in = parse_date(data.get('check_in'), 'check_in', required=False)
        check_out = parse_date(data.get('check_out'), 'check_out', required=False)
        if check_in and check_out and check_out <= check_in:
            raise ValidationError('check_out must be after check_in', field='check_out')

        try:
            guests = int(data.get('guests', 1))
        except (TypeError, ValueError):
            raise ValidationError('guests must be a number', field='guests')
        if guests < 1:
            raise ValidationError('guests must be at least 1', field='guests')

        return {
            'check_in': check_in,
            'check_out': check_out,
            'guests': guests,
            'first_name': guest['first_name'].strip(),
            'last_name': guest['last_name'].strip(),
            'email': parse_email(guest['email'], 'guest.email'),
            'phone': guest.get('phone'),
            'message': data.get('message'),
            'coupon_code': (data.get('coupon_code') or '').strip() or None,
            'language': data.get('language') or 'fr',
        }

    @staticmethod
    def submit(property, data, today=None):
        """
        Create a Reservation (instant booking with both dates) or an Inquiry.

        Returns:
            (kind, record) where kind is 'reservation' or 'inquiry'
        """
        submission = BookingService.parse_submission(data)

        if property.max_guests and submission['guests'] > property.max_guests:
            raise ValidationError(f'Maximum {property.max_guests} guests allowed', field='guests')

        if property.instant_booking and submission['check_in'] and submission['check_out']:
            reservation = BookingService.create_reservation(property, submission, today=today)
            EmailService.send_reservation_confirmation(reservation, property)
            return 'reservation', reservation

        inquiry = BookingService.create_inquiry(property, submission)
        EmailService.send_inquiry_received(inquiry, property)
        return 'inquiry', inquiry

    @staticmethod
    def create_reservation(property, submission, today=None):
        """
        Reserve the stay and redeem the coupon in one transaction.

        The property row is locked first so concurrent bookings of the same
        property are checked and inserted one at a time.
        """
        check_in, check_out = submission['check_in'], submission['check_out']
        today = today or date.today()

        try:
            locked = db.session.query(Property).filter_by(id=property.id).with_for_update().one()

            blocker = load_blocker(locked.id, today=today)
            stay = validate_stay(
                check_in, check_out, blocker,
                min_nights=locked.min_nights,
                max_nights=locked.max_nights or current_app.config['DEFAULT_MAX_NIGHTS'],
            )

            breakdown = stay_pricing(locked, stay.check_in, stay.check_out)

            coupon = None
            discount = 0
            if submission['coupon_code']:
                coupon = CouponService.get_coupon(submission['coupon_code'], for_update=True)
                discount = CouponService.validate(
                    coupon,
                    subtotal=breakdown.subtotal,
                    nights=breakdown.nights,
                    property_id=locked.id,
                    guest_email=submission['email'],
                )

            reservation = Reservation(
                property_id=locked.id,
                confirmation_code=generate_confirmation_code(),
                status=ReservationStatus.CONFIRMED,
                check_in=stay.check_in,
                check_out=stay.check_out,
                nights=breakdown.nights,
                guests=submission['guests'],
                guest_first_name=submission['first_name'],
                guest_last_name=submission['last_name'],
                guest_email=submission['email'],
                guest_phone=submission['phone'],
                guest_message=submission['message'],
                language=submission['language'],
                price_per_night=breakdown.price_per_night,
                subtotal=breakdown.subtotal,
                cleaning_fee=breakdown.cleaning_fee,
                service_fee=breakdown.service_fee,
                taxes=breakdown.taxes,
                discount_amount=discount,
                coupon_code=coupon.code if coupon and discount else None,
                total=breakdown.total - discount,
                currency=breakdown.currency,
            )
            db.session.add(reservation)
            db.session.flush()

            if coupon is not None and discount:
                CouponService.redeem(coupon, reservation, discount)

            db.session.commit()
        except BookingEngineError:
            db.session.rollback()
            raise
        except IntegrityError as e:
            db.session.rollback()
            current_app.logger.warning(f'Reservation insert rejected for property {property.slug}: {str(e)}')
            raise AvailabilityConflict()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Reservation commit failed for property {property.slug}: {str(e)}')
            raise PersistenceError('Failed to save reservation')

        current_app.logger.info(
            f'Reservation {reservation.confirmation_code} confirmed for property {property.slug} '
            f'({reservation.check_in} - {reservation.check_out})'
        )
        return reservation

    @staticmethod
    def create_inquiry(property, submission):
        """Record a non-binding request; dates are not reserved"""
        if not (submission['message'] or '').strip():
            dates = ''
            if submission['check_in'] and submission['check_out']:
                dates = f" from {submission['check_in']} to {submission['check_out']}"
            submission['message'] = f'Availability request{dates}'

        inquiry = Inquiry(
            property_id=property.id,
            status=InquiryStatus.NEW,
            check_in=submission['check_in'],
            check_out=submission['check_out'],
            guests=submission['guests'],
            guest_first_name=submission['first_name'],
            guest_last_name=submission['last_name'],
            guest_email=submission['email'],
            guest_phone=submission['phone'],
            message=submission['message'],
            language=submission['language'],
        )

        try:
            db.session.add(inquiry)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Inquiry commit failed: {str(e)}')
            raise PersistenceError('Failed to save inquiry')

        current_app.logger.info(f'Inquiry {inquiry.id} received for property {property.slug}')
        return inquiry
