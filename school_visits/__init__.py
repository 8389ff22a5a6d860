# __init__.py
"""
Application factory for the school visits service.
Creates and configures the Flask application using the application factory pattern.
"""

import os
import logging
from datetime import datetime
from logging.handlers import RotatingFileHandler

from flask import Flask, jsonify, request
from flask_cors import CORS
from flask.logging import default_handler
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

from school_visits.config import config_by_name
from school_visits.extensions import init_extensions, check_database_health, db
from school_visits.services.errors import VisitServiceError

SERVICE_LOGGERS = ('visit_service', 'check_in_service', 'qr_code_service', 'dashboard_service',
                   'visits', 'check_in')


def setup_logging(app):
    """
    Console logging plus a rotating logs/app.log, shared by app.logger and the
    named service loggers. LOG_TO_FILE=False skips the file handler.
    """
    log_format = logging.Formatter(
        '%(asctime)s %(levelname)s %(name)s %(threadName)s : %(message)s'
    )
    level = logging.DEBUG if app.debug else logging.INFO

    handlers = []

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(log_format)
    console_handler.setLevel(level)
    handlers.append(console_handler)

    # File handler with rotation
    if app.config.get('LOG_TO_FILE', True):
        log_dir = app.config['LOG_DIR']
        os.makedirs(log_dir, exist_ok=True)

        file_handler = RotatingFileHandler(
            os.path.join(log_dir, 'app.log'),
            maxBytes=1024 * 1024 * 10,  # 10MB
            backupCount=5
        )
        file_handler.setFormatter(log_format)
        file_handler.setLevel(logging.INFO)
        handlers.append(file_handler)

    # Service loggers share the app handlers, configured once per process
    app.logger.removeHandler(default_handler)
    for target in [app.logger] + [logging.getLogger(name) for name in SERVICE_LOGGERS]:
        target.setLevel(level)
        if not target.handlers:
            for handler in handlers:
                target.addHandler(handler)

    # Suppress excessive SQLAlchemy logging
    sa_logger = logging.getLogger('sqlalchemy.engine')
    sa_logger.setLevel(logging.WARNING)
    sa_logger.propagate = False


def register_cors(app):
    """CORS headers on every response, preflight OPTIONS answered with 204."""
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get('CORS_ORIGIN', '*')}},
        methods=app.config['CORS_ALLOW_METHODS'],
        allow_headers=app.config['CORS_ALLOW_HEADERS'],
        send_wildcard=app.config.get('CORS_ORIGIN', '*') == '*',
    )

    @app.before_request
    def answer_preflight():
        if request.method == 'OPTIONS':
            return app.response_class(status=204)


def register_blueprints(app):
    """Mount the visit, check-in and dashboard routes."""
    from .controllers.visits import visits_bp
    from .controllers.check_in import check_in_bp
    from .controllers.dashboard import dashboard_bp

    app.register_blueprint(visits_bp, url_prefix='/visits')
    app.register_blueprint(check_in_bp, url_prefix='/visits')
    app.register_blueprint(dashboard_bp, url_prefix='/dashboard')

    app.logger.debug("Blueprints registered: visits, check_in, dashboard")


def register_error_handlers(app):
    """Every error leaves the API as {error, error_code} JSON."""

    @app.errorhandler(VisitServiceError)
    def handle_service_error(e):
        if e.status_code >= 500:
            app.logger.error(f"Service error: {e.message}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(e):
        return jsonify({'error': e.description, 'error_code': e.name.lower().replace(' ', '_')}), e.code

    @app.errorhandler(Exception)
    def handle_exception(e):
        app.logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
        db.session.rollback()
        return jsonify({
            'error': 'Internal server error',
            'error_code': 'server_error'
        }), 500


def register_health_checks(app):
    """Liveness at /health, store connectivity at /health/database (503 when down)."""

    @app.route('/health')
    def health_check():
        return jsonify({
            'status': 'ok',
            'service': 'school-visits',
            'version': app.config.get('VERSION', '1.0.0'),
            'checked_at': datetime.now().isoformat()
        })

    @app.route('/health/database')
    def database_health_check():
        healthy, message = check_database_health()
        status_code = 200 if healthy else 503

        return jsonify({
            'status': 'healthy' if healthy else 'unhealthy',
            'database': db.engine.dialect.name,
            'message': message,
            'checked_at': datetime.now().isoformat()
        }), status_code


def register_shell_context(app):
    """Expose db and Visit in `flask shell`."""

    @app.shell_context_processor
    def make_shell_context():
        from school_visits.models import Visit
        return {'db': db, 'Visit': Visit}


def create_app(config_name=None):
    """
    Build the visits application.

    Args:
        config_name (str): key of config_by_name, defaults to FLASK_ENV or 'development'

    Returns:
        Flask: configured application
    """
    load_dotenv()

    config_name = config_name or os.environ.get('FLASK_ENV', 'development')
    config_class = config_by_name[config_name]
    if hasattr(config_class, 'validate'):
        config_class.validate()

    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app)
    app.logger.info(f"Creating visits app ({config_name})")

    init_extensions(app)

    register_cors(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_health_checks(app)
    register_shell_context(app)

    from .cli import register_cli_commands
    register_cli_commands(app)

    return app
