"""
Bookings Blueprint
"""

from staybook.api.bookings.routes import bookings_bp

__all__ = ['bookings_bp']
