"""
API Package
"""

# Import all blueprints for easy access
from staybook.api.auth import auth_bp
from staybook.api.properties import properties_bp
from staybook.api.bookings import bookings_bp
from staybook.api.coupons import coupons_bp
from staybook.api.admin import admin_bp

__all__ = [
    'auth_bp',
    'properties_bp',
    'bookings_bp',
    'coupons_bp',
    'admin_bp',
]
