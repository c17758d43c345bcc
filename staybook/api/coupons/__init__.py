"""
Coupons Blueprint
"""

from staybook.api.coupons.routes import coupons_bp

__all__ = ['coupons_bp']
