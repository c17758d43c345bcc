"""
Authentication Routes
Per-admin credentials (bcrypt) exchanged for JWT access tokens
"""

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required
from extensions import limiter
from staybook.models.user import User

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/admin/login', methods=['POST'])
@limiter.limit("5 per minute")
def admin_login():
    """Admin login - checks if user is admin"""
    try:
        data = request.get_json(silent=True) or {}

        if not data.get('email') or not data.get('password'):
            return jsonify({'error': 'Email and password are required'}), 400

        user = User.query.filter_by(email=data['email'].strip().lower()).first()

        if not user or not user.check_password(data['password']):
            return jsonify({'error': 'Invalid email or password'}), 401

        if not user.is_admin:
            return jsonify({'error': 'Admin access required'}), 403

        if not user.is_active:
            return jsonify({'error': 'Account is deactivated'}), 403

        user.update_last_login()

        access_token = create_access_token(identity=str(user.id))

        return jsonify({
            'message': 'Login successful',
            'user': user.to_dict(),
            'access_token': access_token
        }), 200

    except Exception as e:
        current_app.logger.error(f'Admin login failed: {str(e)}')
        return jsonify({'error': 'Login failed'}), 500


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    """Get current admin account"""
    user = User.query.get(int(get_jwt_identity()))

    if not user:
        return jsonify({'error': 'User not found'}), 404

    return jsonify({'user': user.to_dict()}), 200
