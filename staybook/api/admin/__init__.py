"""
Admin Blueprint
"""

from staybook.api.admin.routes import admin_bp

__all__ = ['admin_bp']
