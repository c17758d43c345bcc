"""
Flask Application Factory
"""

import logging
import os

from flask import Flask, jsonify
from config import config
from extensions import db, migrate, jwt, bcrypt, cors, limiter, mail
from staybook.errors import BookingEngineError


def create_app(config_name=None):
    """Application factory pattern"""

    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    bcrypt.init_app(app)
    cors.init_app(app, resources={
        r"/api/*": {
            "origins": app.config['CORS_ORIGINS'],
            "methods": ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"]
        }
    })
    limiter.init_app(app)
    mail.init_app(app)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Create database tables
    with app.app_context():
        from staybook import models  # noqa: F401
        db.create_all()

    return app


def register_blueprints(app):
    """Register Flask blueprints"""
    from staybook.api.auth import auth_bp
    from staybook.api.properties import properties_bp
    from staybook.api.bookings import bookings_bp
    from staybook.api.coupons import coupons_bp
    from staybook.api.admin import admin_bp

    # API v1
    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(properties_bp, url_prefix='/api/properties')
    app.register_blueprint(bookings_bp, url_prefix='/api/bookings')
    app.register_blueprint(coupons_bp, url_prefix='/api/coupons')
    app.register_blueprint(admin_bp, url_prefix='/api/admin')

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({'status': 'healthy', 'message': 'API is running'}), 200

    @app.route('/')
    def index():
        return jsonify({
            'message': 'StayBook booking engine API',
            'version': '1.0.0',
            'endpoints': {
                'auth': '/api/auth',
                'properties': '/api/properties',
                'bookings': '/api/bookings',
                'coupons': '/api/coupons',
                'admin': '/api/admin'
            }
        }), 200


def register_error_handlers(app):
    """Register error handlers"""

    @app.errorhandler(BookingEngineError)
    def booking_engine_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(400)
    def bad_request(error):
        return jsonify({'error': 'Bad Request', 'message': str(error)}), 400

    @app.errorhandler(401)
    def unauthorized(error):
        return jsonify({'error': 'Unauthorized', 'message': 'Authentication required'}), 401

    @app.errorhandler(403)
    def forbidden(error):
        return jsonify({'error': 'Forbidden', 'message': 'Insufficient permissions'}), 403

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({'error': 'Not Found', 'message': 'Resource not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({'error': 'Method Not Allowed', 'message': str(error)}), 405

    @app.errorhandler(429)
    def rate_limited(error):
        return jsonify({'error': 'Too Many Requests', 'message': str(error.description)}), 429

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        return jsonify({'error': 'Internal Server Error', 'message': 'An unexpected error occurred'}), 500
