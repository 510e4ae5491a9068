# server/linkgate/__init__.py

import logging
import os
import uuid
from datetime import datetime

from flask import Flask, g, jsonify, request
from flask_cors import CORS
from sqlalchemy.exc import SQLAlchemyError

from .config import Config, config_by_name
from .extensions import db, migrate, limiter

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def resolve_config(config=None):
    if config is None:
        config = os.environ.get("FLASK_ENV", "production")
    if isinstance(config, str):
        return config_by_name.get(config, Config)
    return config


def create_app(config=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)
    app.config.from_object(resolve_config(config))

    initialize_extensions(app)

    with app.app_context():
        initialize_database(app)

    initialize_engine(app)
    register_middleware(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_commands(app)

    logger.info(f"Application initialized in {app.config.get('FLASK_ENV', 'production')} mode")

    return app


def initialize_extensions(app):
    """Initialize Flask extensions"""
    db.init_app(app)
    migrate.init_app(app, db, directory=os.path.join(os.path.dirname(__file__), "migrations"))
    limiter.init_app(app)

    cors_origins = app.config.get("CORS_ORIGINS") or [app.config.get("PUBLIC_BASE_URL")]
    cors_origins = list(filter(None, dict.fromkeys(cors_origins)))

    # Only the JSON endpoints are meant for browsers on other origins
    CORS(app,
         resources={r"/s/[^/]+/preview": {"origins": cors_origins}, r"/health": {"origins": "*"}},
         methods=['GET', 'OPTIONS'],
         max_age=3600)

    logger.info(f"CORS initialized with origins: {cors_origins}")


def initialize_database(app):
    """Create tables that do not exist yet"""
    from .models import ShortLink, DestinationRule, ClickEvent  # noqa: F401

    try:
        db.create_all()
        logger.info("Database tables created/verified")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization error: {e}", exc_info=True)
        if app.config.get('FLASK_ENV') == 'production':
            raise


def initialize_engine(app):
    """Build the resolution engine and the background worker it feeds"""
    from .services.background import BackgroundWorker
    from .services.click_service import ClickRecorder, RecordClick
    from .services.link_store import DeactivateLink, LinkStore
    from .services.resolution_service import init_engine

    init_engine(app)

    worker = BackgroundWorker(app)
    worker.register(RecordClick, ClickRecorder.record)
    worker.register(DeactivateLink, LinkStore.deactivate)

    logger.info(f"Click recording: {'async' if worker.async_mode else 'inline'}")


def register_middleware(app):
    """Register application middleware"""

    @app.before_request
    def assign_request_id():
        g.request_id = request.headers.get('X-Request-ID', str(uuid.uuid4()))

        if app.config.get('FLASK_ENV') == 'development':
            logger.debug(f"{request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def after_request(response):
        """Add security headers to all responses"""
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        if app.config.get('FLASK_ENV') == 'production' and request.is_secure:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        request_id = getattr(g, 'request_id', None)
        if request_id:
            response.headers['X-Request-ID'] = request_id

        return response


def register_blueprints(app):
    """Register all application blueprints"""
    from .routes import redirect_bp, health_bp

    app.register_blueprint(redirect_bp)
    app.register_blueprint(health_bp)

    @app.route('/')
    def index():
        return jsonify({
            'service': 'linkgate',
            'status': 'online',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'endpoints': {
                'resolve': 'GET|POST /s/<code>',
                'preview': 'GET /s/<code>/preview',
                'health': 'GET /health',
                'ready': 'GET /ready',
            }
        })


def _error(error: str, message: str, status: int):
    return jsonify({
        'success': False,
        'error': {'code': error, 'message': message}
    }), status


def register_error_handlers(app):
    """Register error handlers for the application"""

    @app.errorhandler(400)
    def bad_request(error):
        logger.warning(f"Bad request: {error}")
        return _error('BAD_REQUEST', getattr(error, 'description', None) or 'Invalid request', 400)

    @app.errorhandler(403)
    def forbidden(error):
        return _error('FORBIDDEN', 'You do not have permission to access this resource', 403)

    @app.errorhandler(404)
    def not_found(error):
        return _error('NOT_FOUND', 'The requested resource was not found', 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        return _error('METHOD_NOT_ALLOWED', f'The {request.method} method is not allowed for this endpoint', 405)

    @app.errorhandler(410)
    def gone(error):
        return _error('GONE', 'This resource is no longer available', 410)

    @app.errorhandler(429)
    def rate_limit_exceeded(error):
        return _error('RATE_LIMITED', 'Too many attempts. Please try again later', 429)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return _error('SERVER_ERROR', 'An unexpected error occurred. Please try again later.', 500)

    @app.errorhandler(Exception)
    def unhandled_exception(error):
        from werkzeug.exceptions import HTTPException

        if isinstance(error, HTTPException):
            return _error(error.name.upper().replace(' ', '_'), error.description, error.code)

        logger.error(f"Unhandled exception: {error}", exc_info=True)

        if app.config.get('FLASK_ENV') == 'production':
            return _error('SERVER_ERROR', 'An unexpected error occurred', 500)
        return _error(type(error).__name__, str(error), 500)


def register_commands(app):
    from .cli import links_cli

    app.cli.add_command(links_cli)
