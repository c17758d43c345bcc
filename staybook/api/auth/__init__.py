"""
Authentication Blueprint
"""

from staybook.api.auth.routes import auth_bp

__all__ = ['auth_bp']
