"""
Properties Blueprint
"""

from staybook.api.properties.routes import properties_bp

__all__ = ['properties_bp']
