"""
Bookings Blueprint
"""

from flask import Blueprint, current_app, jsonify, request
from extensions import db, limiter
from staybook.errors import BookingEngineError
from staybook.models.property import Property
from staybook.models.reservation import Reservation
from staybook.services.booking_service import BookingService

bookings_bp = Blueprint('bookings', __name__)


def find_property(data):
    """Resolve the target property from property_id or property_slug"""
    query = Property.query.filter_by(is_active=True)
    if data.get('property_id') is not None:
        try:
            return query.filter_by(id=int(data['property_id'])).first()
        except (TypeError, ValueError):
            return None
    if data.get('property_slug'):
        return query.filter_by(slug=data['property_slug']).first()
    return None


@bookings_bp.route('/', methods=['POST'])
@limiter.limit("20 per hour")
def create_booking():
    """Submit a booking: instant reservation or inquiry, per host settings"""
    try:
        data = request.get_json(silent=True) or {}

        if data.get('property_id') is None and not data.get('property_slug'):
            return jsonify({'error': 'validation_error', 'message': 'property_id is required',
                            'field': 'property_id'}), 400

        property = find_property(data)
        if not property:
            return jsonify({'error': 'Property not found'}), 404

        kind, record = BookingService.submit(property, data)

        if kind == 'reservation':
            return jsonify({
                'type': 'reservation',
                'message': 'Reservation confirmed',
                'confirmation_code': record.confirmation_code,
                'reservation': record.to_dict()
            }), 201

        return jsonify({
            'type': 'inquiry',
            'message': 'Inquiry received',
            'inquiry': record.to_dict()
        }), 201

    except BookingEngineError as e:
        return jsonify(e.to_dict()), e.status_code

    except Exception as e:
        db.session.rollback()
        current_app.logger.error(f'Booking submission failed: {str(e)}')
        return jsonify({'error': 'Internal Server Error', 'message': 'Booking could not be completed'}), 500


@bookings_bp.route('/<confirmation_code>', methods=['GET'])
@limiter.limit("60 per hour")
def get_reservation(confirmation_code):
    """Look up a reservation by its confirmation code"""
    try:
        reservation = Reservation.query.filter_by(confirmation_code=confirmation_code.upper()).first()

        if not reservation:
            return jsonify({'error': 'Reservation not found'}), 404

        return jsonify({'reservation': reservation.to_dict(include_property=True)}), 200

    except Exception as e:
        current_app.logger.error(f'Failed to load reservation {confirmation_code}: {str(e)}')
        return jsonify({'error': 'Failed to load reservation'}), 500
