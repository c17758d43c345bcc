"""
Property Routes
Public availability, pricing and calendar feed of a property
"""

from datetime import date, timedelta

from flask import Blueprint, Response, current_app, jsonify, request
from extensions import db, limiter
from staybook.errors import BookingEngineError, ValidationError
from staybook.models.property import Property
from staybook.services.availability import check_nights
from staybook.services.booking_service import load_blocker, stay_pricing
from staybook.services.ical_service import ICalService
from staybook.utils.validators import parse_date, parse_int

properties_bp = Blueprint('properties', __name__)

MAX_AVAILABILITY_WINDOW_DAYS = 731


def get_active_property(slug):
    return Property.query.filter_by(slug=slug, is_active=True).first()


@properties_bp.route('/<slug>', methods=['GET'])
@limiter.limit("100 per hour")
def get_property(slug):
    """Get single active property by slug"""
    try:
        property = get_active_property(slug)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        return jsonify({'property': property.to_dict()}), 200

    except Exception as e:
        current_app.logger.error(f'Failed to load property {slug}: {str(e)}')
        return jsonify({'error': 'Failed to load property'}), 500


@properties_bp.route('/<slug>/availability', methods=['GET'])
@limiter.limit("300 per hour")
def get_availability(slug):
    """Blocked intervals (manual, imported, reserved) and disabled days of a window"""
    try:
        property = get_active_property(slug)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        today = date.today()
        start_date = parse_date(request.args.get('start_date'), 'start_date', required=False) or today
        end_date = parse_date(request.args.get('end_date'), 'end_date', required=False)
        if end_date is None:
            end_date = start_date + timedelta(days=current_app.config['AVAILABILITY_WINDOW_DAYS'])

        if end_date <= start_date:
            raise ValidationError('end_date must be after start_date', field='end_date')
        if (end_date - start_date).days > MAX_AVAILABILITY_WINDOW_DAYS:
            raise ValidationError('Availability window is too large', field='end_date')

        blocker = load_blocker(property.id, today=today)

        return jsonify({
            'property_id': property.id,
            'start_date': start_date.isoformat(),
            'end_date': end_date.isoformat(),
            'blocked_dates': [
                {
                    'start': interval.start.isoformat(),
                    'end': interval.end.isoformat(),
                    'source': interval.source,
                    'reason': interval.reason,
                }
                for interval in blocker.intervals_between(start_date, end_date)
            ],
            'disabled_dates': [day.isoformat() for day in blocker.disabled_dates(start_date, end_date)],
        }), 200

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        current_app.logger.error(f'Failed to compute availability for {slug}: {str(e)}')
        return jsonify({'error': 'Failed to load availability'}), 500


@properties_bp.route('/<slug>/pricing', methods=['GET'])
@limiter.limit("300 per hour")
def get_pricing(slug):
    """Price breakdown for a stay"""
    try:
        property = get_active_property(slug)

        if not property:
            return jsonify({'error': 'Property not found'}), 404

        check_in = parse_date(request.args.get('check_in'), 'check_in')
        check_out = parse_date(request.args.get('check_out'), 'check_out')
        guests = parse_int(request.args.get('guests'), 'guests', minimum=1) or 1

        if check_out <= check_in:
            raise ValidationError('check_out must be after check_in', field='check_out')

        check_nights(
            (check_out - check_in).days,
            min_nights=property.min_nights,
            max_nights=property.max_nights or current_app.config['DEFAULT_MAX_NIGHTS'],
        )

        if property.max_guests and guests > property.max_guests:
            raise ValidationError(f'Maximum {property.max_guests} guests allowed', field='guests')

        data = stay_pricing(property, check_in, check_out).to_dict()
        data.update({
            'property_id': property.id,
            'check_in': check_in.isoformat(),
            'check_out': check_out.isoformat(),
            'guests': guests,
        })
        return jsonify(data), 200

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        current_app.logger.error(f'Failed to price stay for {slug}: {str(e)}')
        return jsonify({'error': 'Failed to compute pricing'}), 500


@properties_bp.route('/<slug>/calendar.ics', methods=['GET'])
def export_calendar(slug):
    """iCal feed of blocked and reserved dates, for external platforms"""
    try:
        property = Property.query.filter_by(slug=slug).first()

        if not property:
            return Response('Property not found', status=404, mimetype='text/plain')

        return Response(
            ICalService.export_calendar(property),
            status=200,
            mimetype='text/calendar',
            headers={'Content-Disposition': f'attachment; filename="{property.slug}-calendar.ics"'},
        )

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Error generating iCal for {slug}: {str(e)}')
        return Response('Error generating calendar', status=500, mimetype='text/plain')
