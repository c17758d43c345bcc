"""
Admin Routes
Plain create/update/delete operations on properties, blocked dates, coupons,
reservations and inquiries, plus the iCal import trigger.
"""

import re
from datetime import timedelta

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import jwt_required
from sqlalchemy.exc import IntegrityError
from extensions import db
from staybook.errors import BookingEngineError, ValidationError
from staybook.models.blocked_date import BlockedDate, BlockedDateSource
from staybook.models.coupon import Coupon, CouponRedemption, DiscountType
from staybook.models.inquiry import Inquiry, InquiryStatus
from staybook.models.property import Property
from staybook.models.reservation import Reservation, ReservationStatus
from staybook.services.ical_service import ICalService
from staybook.utils.decorators.admin_required import admin_required
from staybook.utils.validators import (
    parse_amount, parse_date, parse_datetime, parse_int, require_fields
)

admin_bp = Blueprint('admin', __name__)

SLUG_PATTERN = re.compile(r'^[a-z0-9]+(?:-[a-z0-9]+)*$')

PROPERTY_TEXT_FIELDS = [
    'name_fr', 'name_en', 'name_es',
    'description_fr', 'description_en', 'description_es',
    'address', 'ical_url',
]
PROPERTY_FLAGS = ['is_active', 'is_featured', 'instant_booking']


def apply_property_fields(property, data):
    for field in PROPERTY_TEXT_FIELDS:
        if field in data:
            setattr(property, field, data[field] or None)

    for field in PROPERTY_FLAGS:
        if field in data:
            setattr(property, field, bool(data[field]))

    if 'price_per_night' in data:
        property.price_per_night = parse_amount(data['price_per_night'], 'price_per_night', required=True)
    if 'cleaning_fee' in data:
        property.cleaning_fee = parse_amount(data['cleaning_fee'], 'cleaning_fee') or 0
    if 'currency' in data:
        property.currency = str(data['currency'] or current_app.config['DEFAULT_CURRENCY']).upper()[:3]
    if 'min_nights' in data:
        property.min_nights = parse_int(data['min_nights'], 'min_nights', minimum=1) or 1
    if 'max_nights' in data:
        property.max_nights = parse_int(data['max_nights'], 'max_nights', minimum=1)
    if 'max_guests' in data:
        property.max_guests = parse_int(data['max_guests'], 'max_guests', minimum=1)

    if property.max_nights and property.min_nights and property.max_nights < property.min_nights:
        raise ValidationError('max_nights must be greater than or equal to min_nights', field='max_nights')


def apply_coupon_fields(coupon, data):
    if 'name' in data:
        coupon.name = data['name']
    if 'discount_type' in data:
        try:
            coupon.discount_type = DiscountType(data['discount_type'])
        except ValueError:
            raise ValidationError('discount_type must be "percentage" or "fixed"', field='discount_type')
    if 'discount_value' in data:
        value = parse_amount(data['discount_value'], 'discount_value', required=True)
        if value <= 0:
            raise ValidationError('discount_value must be positive', field='discount_value')
        coupon.discount_value = value

    for field in ('max_discount', 'min_subtotal'):
        if field in data:
            setattr(coupon, field, parse_amount(data[field], field))
    for field in ('min_nights', 'max_nights', 'max_redemptions', 'max_per_guest'):
        if field in data:
            setattr(coupon, field, parse_int(data[field], field, minimum=1))

    if 'valid_from' in data:
        coupon.valid_from = parse_datetime(data['valid_from'], 'valid_from')
    if 'valid_until' in data:
        coupon.valid_until = parse_datetime(data['valid_until'], 'valid_until', end_of_day=True)
    if 'applicable_property_ids' in data:
        try:
            coupon.applicable_property_ids = [int(pid) for pid in (data['applicable_property_ids'] or [])]
        except (TypeError, ValueError):
            raise ValidationError('applicable_property_ids must be a list of ids', field='applicable_property_ids')
    if 'is_active' in data:
        coupon.is_active = bool(data['is_active'])

    if coupon.valid_from and coupon.valid_until and coupon.valid_until < coupon.valid_from:
        raise ValidationError('valid_until must be after valid_from', field='valid_until')


# ============================================================
# PROPERTIES
# ============================================================

@admin_bp.route('/properties', methods=['GET'])
@jwt_required()
@admin_required()
def list_properties():
    """All properties, including inactive ones"""
    properties = Property.query.order_by(Property.created_at.desc()).all()
    return jsonify({'properties': [p.to_dict() for p in properties]}), 200


@admin_bp.route('/properties', methods=['POST'])
@jwt_required()
@admin_required()
def create_property():
    """Create a property"""
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['slug', 'name_fr', 'price_per_night'])

        slug = str(data['slug']).strip().lower()
        if not SLUG_PATTERN.match(slug):
            raise ValidationError('slug may only contain lowercase letters, digits and dashes', field='slug')

        if Property.query.filter_by(slug=slug).first():
            return jsonify({'error': 'validation_error', 'message': 'Slug already in use', 'field': 'slug'}), 409

        property = Property(slug=slug, currency=current_app.config['DEFAULT_CURRENCY'])
        apply_property_fields(property, data)

        db.session.add(property)
        db.session.commit()

        return jsonify({'message': 'Property created successfully', 'property': property.to_dict()}), 201

    except BookingEngineError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create property: {str(e)}')
        return jsonify({'error': 'Failed to create property'}), 500


@admin_bp.route('/properties/<int:property_id>', methods=['PUT'])
@jwt_required()
@admin_required()
def update_property(property_id):
    """Update a property; the slug cannot change"""
    try:
        property = Property.query.get(property_id)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        data = request.get_json(silent=True) or {}

        if 'slug' in data and data['slug'] != property.slug:
            raise ValidationError('slug cannot be changed after creation', field='slug')

        apply_property_fields(property, data)
        db.session.commit()

        return jsonify({'message': 'Property updated successfully', 'property': property.to_dict()}), 200

    except BookingEngineError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update property {property_id}: {str(e)}')
        return jsonify({'error': 'Failed to update property'}), 500


# ============================================================
# BLOCKED DATES & CALENDAR SYNC
# ============================================================

@admin_bp.route('/properties/<int:property_id>/blocked-dates', methods=['GET'])
@jwt_required()
@admin_required()
def get_blocked_dates(property_id):
    """Get all blocked intervals for a property"""
    property = Property.query.get(property_id)

    if not property:
        return jsonify({'error': 'Property not found'}), 404

    blocked_dates = property.blocked_dates.order_by(BlockedDate.start_date).all()

    results = []
    for blocked in blocked_dates:
        data = blocked.to_dict()
        data['last_blocked_date'] = (blocked.end_date - timedelta(days=1)).isoformat()
        results.append(data)

    return jsonify({'property_id': property_id, 'blocked_dates': results}), 200


@admin_bp.route('/properties/<int:property_id>/blocked-dates', methods=['POST'])
@jwt_required()
@admin_required()
def block_dates(property_id):
    """
    Block a range of dates for a property.

    The admin enters the last blocked day; it is stored as an exclusive end.
    """
    try:
        property = Property.query.get(property_id)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        data = request.get_json(silent=True) or {}
        start_date = parse_date(data.get('start_date'), 'start_date')
        last_date = parse_date(data.get('end_date'), 'end_date', required=False) or start_date

        if last_date < start_date:
            raise ValidationError('end_date cannot be before start_date', field='end_date')

        blocked = BlockedDate(
            property_id=property_id,
            start_date=start_date,
            end_date=last_date + timedelta(days=1),
            source=BlockedDateSource.MANUAL,
            reason=data.get('reason')
        )

        db.session.add(blocked)
        db.session.commit()

        return jsonify({'message': 'Dates blocked', 'blocked_date': blocked.to_dict()}), 201

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to block dates for property {property_id}: {str(e)}')
        return jsonify({'error': 'Failed to block dates'}), 500


@admin_bp.route('/blocked-dates/<int:blocked_id>', methods=['DELETE'])
@jwt_required()
@admin_required()
def unblock_dates(blocked_id):
    """Delete a blocked interval"""
    try:
        blocked = BlockedDate.query.get(blocked_id)

        if not blocked:
            return jsonify({'error': 'Blocked date not found'}), 404

        db.session.delete(blocked)
        db.session.commit()

        return jsonify({'message': 'Dates unblocked'}), 200

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to delete blocked date {blocked_id}: {str(e)}')
        return jsonify({'error': 'Failed to unblock dates'}), 500


@admin_bp.route('/properties/<int:property_id>/sync-ical', methods=['POST'])
@jwt_required()
@admin_required()
def sync_ical(property_id):
    """Import the property's external calendar feed"""
    try:
        property = Property.query.get(property_id)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        imported_count = ICalService.sync_property(property)

        return jsonify({
            'success': True,
            'message': f'Imported {imported_count} blocked intervals from external calendar',
            'imported_count': imported_count
        }), 200

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Error syncing iCal for property {property_id}: {str(e)}')
        return jsonify({'error': 'Failed to sync calendar'}), 500


# ============================================================
# COUPONS
# ============================================================

@admin_bp.route('/coupons', methods=['GET'])
@jwt_required()
@admin_required()
def list_coupons():
    query = Coupon.query
    if request.args.get('active') == 'true':
        query = query.filter_by(is_active=True)
    coupons = query.order_by(Coupon.created_at.desc()).all()
    return jsonify({'coupons': [c.to_dict() for c in coupons]}), 200


@admin_bp.route('/coupons', methods=['POST'])
@jwt_required()
@admin_required()
def create_coupon():
    """Create a coupon; codes are unique regardless of case"""
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['code', 'discount_type', 'discount_value'])

        code = Coupon.normalize_code(str(data['code']))
        if Coupon.query.filter(db.func.upper(Coupon.code) == code).first():
            return jsonify({'error': 'validation_error', 'message': 'Code already exists', 'field': 'code'}), 409

        coupon = Coupon(code=code)
        apply_coupon_fields(coupon, data)

        db.session.add(coupon)
        db.session.commit()

        return jsonify({'message': 'Coupon created successfully', 'coupon': coupon.to_dict()}), 201

    except BookingEngineError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    except IntegrityError:
        db.session.rollback()
        return jsonify({'error': 'validation_error', 'message': 'Code already exists', 'field': 'code'}), 409

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to create coupon: {str(e)}')
        return jsonify({'error': 'Failed to create coupon'}), 500


@admin_bp.route('/coupons/<int:coupon_id>', methods=['PUT'])
@jwt_required()
@admin_required()
def update_coupon(coupon_id):
    """Update a coupon; the redemption counter is not editable"""
    try:
        coupon = Coupon.query.get(coupon_id)

        if not coupon:
            return jsonify({'error': 'Coupon not found'}), 404

        data = request.get_json(silent=True) or {}

        if data.get('code'):
            code = Coupon.normalize_code(str(data['code']))
            clash = Coupon.query.filter(db.func.upper(Coupon.code) == code, Coupon.id != coupon.id).first()
            if clash:
                return jsonify({'error': 'validation_error', 'message': 'Code already exists', 'field': 'code'}), 409
            coupon.code = code

        apply_coupon_fields(coupon, data)
        db.session.commit()

        return jsonify({'message': 'Coupon updated successfully', 'coupon': coupon.to_dict()}), 200

    except BookingEngineError as e:
        db.session.rollback()
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update coupon {coupon_id}: {str(e)}')
        return jsonify({'error': 'Failed to update coupon'}), 500


@admin_bp.route('/coupons/<int:coupon_id>/redemptions', methods=['GET'])
@jwt_required()
@admin_required()
def get_coupon_redemptions(coupon_id):
    coupon = Coupon.query.get(coupon_id)

    if not coupon:
        return jsonify({'error': 'Coupon not found'}), 404

    redemptions = coupon.redemptions.order_by(CouponRedemption.created_at.desc()).all()
    return jsonify({
        'coupon': coupon.to_dict(),
        'redemptions': [r.to_dict() for r in redemptions]
    }), 200


# ============================================================
# RESERVATIONS & INQUIRIES
# ============================================================

@admin_bp.route('/reservations', methods=['GET'])
@jwt_required()
@admin_required()
def list_reservations():
    query = Reservation.query
    property_id = request.args.get('property_id', type=int)
    if property_id:
        query = query.filter_by(property_id=property_id)
    reservations = query.order_by(Reservation.created_at.desc()).all()
    return jsonify({'reservations': [r.to_dict() for r in reservations]}), 200


@admin_bp.route('/reservations/<int:reservation_id>/status', methods=['PUT'])
@jwt_required()
@admin_required()
def update_reservation_status(reservation_id):
    """Change reservation status; cancelling releases the dates"""
    try:
        reservation = Reservation.query.get(reservation_id)

        if not reservation:
            return jsonify({'error': 'Reservation not found'}), 404

        data = request.get_json(silent=True) or {}
        try:
            status = ReservationStatus(data.get('status'))
        except ValueError:
            raise ValidationError('Unknown reservation status', field='status')

        if reservation.status == ReservationStatus.CANCELLED and status != ReservationStatus.CANCELLED:
            raise ValidationError('Cancelled reservations cannot be reopened', field='status')

        if status == ReservationStatus.CANCELLED:
            reservation.cancel()
        else:
            reservation.status = status
        db.session.commit()

        return jsonify({'message': 'Reservation updated', 'reservation': reservation.to_dict()}), 200

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Failed to update reservation {reservation_id}: {str(e)}')
        return jsonify({'error': 'Failed to update reservation'}), 500


@admin_bp.route('/inquiries', methods=['GET'])
@jwt_required()
@admin_required()
def list_inquiries():
    query = Inquiry.query
    property_id = request.args.get('property_id', type=int)
    if property_id:
        query = query.filter_by(property_id=property_id)
    inquiries = query.order_by(Inquiry.created_at.desc()).all()
    return jsonify({'inquiries': [i.to_dict() for i in inquiries]}), 200


@admin_bp.route('/inquiries/<int:inquiry_id>/status', methods=['PUT'])
@jwt_required()
@admin_required()
def update_inquiry_status(inquiry_id):
    inquiry = Inquiry.query.get(inquiry_id)

    if not inquiry:
        return jsonify({'error': 'Inquiry not found'}), 404

    data = request.get_json(silent=True) or {}
    try:
        inquiry.status = InquiryStatus(data.get('status'))
    except ValueError:
        return jsonify({'error': 'validation_error', 'message': 'Unknown inquiry status', 'field': 'status'}), 400

    db.session.commit()
    return jsonify({'message': 'Inquiry updated', 'inquiry': inquiry.to_dict()}), 200
