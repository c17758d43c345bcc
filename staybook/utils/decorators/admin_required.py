from functools import wraps

from flask import jsonify
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from staybook.models.user import User


def admin_required():
    """Allow the request only for an active admin account"""
    def wrapper(fn):
        @wraps(fn)
        def decorator(*args, **kwargs):
            verify_jwt_in_request()
            user = User.query.get(int(get_jwt_identity()))

            if not user or not user.is_active:
                return jsonify({'error': 'Unauthorized', 'message': 'Account not found or deactivated'}), 401

            if not user.is_admin:
                return jsonify({'error': 'Forbidden', 'message': 'Admin access required'}), 403

            return fn(*args, **kwargs)
        return decorator
    return wrapper
