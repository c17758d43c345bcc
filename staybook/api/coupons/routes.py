"""
Coupon Routes
"""

from flask import Blueprint, current_app, jsonify, request
from extensions import limiter
from staybook.errors import BookingEngineError, CouponError
from staybook.services.coupon_service import CouponService
from staybook.utils.validators import parse_amount, parse_email, parse_int, require_fields

coupons_bp = Blueprint('coupons', __name__)


@coupons_bp.route('/validate', methods=['POST'])
@limiter.limit("60 per hour")
def validate_coupon():
    """Check a coupon code against a candidate booking"""
    try:
        data = request.get_json(silent=True) or {}
        require_fields(data, ['code', 'subtotal', 'nights'])

        subtotal = parse_amount(data['subtotal'], 'subtotal', required=True)
        nights = parse_int(data['nights'], 'nights', minimum=1, required=True)
        property_id = parse_int(data.get('property_id'), 'property_id')
        guest_email = parse_email(data['guest_email'], 'guest_email') if data.get('guest_email') else None

        coupon = CouponService.get_coupon(data['code'])
        discount = CouponService.validate(
            coupon,
            subtotal=subtotal,
            nights=nights,
            property_id=property_id,
            guest_email=guest_email,
        )

        return jsonify({
            'valid': True,
            'discount_amount': float(discount),
            'coupon': coupon.to_public_dict()
        }), 200

    except CouponError as e:
        current_app.logger.info(f"Coupon {data.get('code')} rejected: {e.error}")
        return jsonify(e.to_dict()), e.status_code

    except BookingEngineError as e:
        body = e.to_dict()
        body['valid'] = False
        return jsonify(body), e.status_code

    except Exception as e:
        current_app.logger.error(f'Coupon validation failed: {str(e)}')
        return jsonify({'valid': False, 'error': 'Internal Server Error'}), 500
