"""
Main Flask application for the shared expense tracker API.
"""
import os
import logging

import click
from flask import Flask, jsonify, request, redirect

from extensions import db, migrate, limiter, cors
from email_service import init_mail
from config import config, get_config_name
from blueprints import register_blueprints
from services.errors import ServiceError
from store import get_store

logger = logging.getLogger(__name__)

CORS_HEADERS = ['Content-Type', 'Authorization', 'X-Invitation-Token']


def _engine_options(app):
    """SQLAlchemy engine options with driver-level timeouts for the configured database."""
    options = dict(app.config.get('SQLALCHEMY_ENGINE_OPTIONS') or {})
    uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    timeout = app.config.get('STORE_TIMEOUT_SECONDS', 10)

    if uri.startswith('sqlite'):
        if ':memory:' not in uri:
            options.setdefault('connect_args', {'timeout': timeout})
    elif uri.startswith('postgresql'):
        options.setdefault('connect_args', {
            'connect_timeout': timeout,
            'options': f'-c statement_timeout={timeout * 1000}',
        })
    return options


def create_app(config_name=None):
    """Application factory.

    Args:
        config_name: 'development', 'production' or 'testing'
                     (defaults to the FLASK_ENV based choice)
    """
    config_name = config_name or get_config_name()

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    logging.basicConfig(level=app.config.get('LOG_LEVEL', 'INFO'))

    # Render-style URLs use the deprecated postgres:// scheme
    uri = app.config.get('SQLALCHEMY_DATABASE_URI') or ''
    if uri.startswith('postgres://'):
        app.config['SQLALCHEMY_DATABASE_URI'] = uri.replace('postgres://', 'postgresql://', 1)

    if config_name == 'production':
        if not app.config.get('JWT_SECRET_KEY'):
            raise RuntimeError('JWT_SECRET_KEY must be set in production')
        if not app.config.get('SQLALCHEMY_DATABASE_URI'):
            raise RuntimeError('DATABASE_URL must be set in production')

    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = _engine_options(app)

    # Initialize extensions with app
    db.init_app(app)
    migrate.init_app(app, db)  # Flask-Migrate for database migrations
    limiter.init_app(app)  # Reads RATELIMIT_* from app.config
    init_mail(app)  # Flask-Mail for invitations
    cors.init_app(
        app,
        resources={r'/api/*': {'origins': app.config['ALLOWED_ORIGINS']}},
        allow_headers=CORS_HEADERS,
        supports_credentials=True,
    )

    register_blueprints(app)
    register_security_middleware(app)
    register_error_handlers(app)
    register_commands(app)

    @app.route('/health', methods=['GET'])
    def health():
        """Liveness check including a database round-trip."""
        try:
            get_store().ping()
        except ServiceError as e:
            return jsonify({'status': 'unavailable', 'error': e.message}), e.status_code
        return jsonify({'status': 'ok', 'message': 'SplitHalf API is running'})

    logger.info(f"App created with {config_name} config")
    return app


# ============================================================================
# Security Middleware
# ============================================================================

def register_security_middleware(app):

    @app.before_request
    def enforce_https():
        """Redirect HTTP to HTTPS in production."""
        if not app.debug and not app.testing:
            # Check X-Forwarded-Proto header (set by reverse proxies like Render)
            if request.headers.get('X-Forwarded-Proto') == 'http':
                url = request.url.replace('http://', 'https://', 1)
                return redirect(url, code=301)

    @app.after_request
    def add_security_headers(response):
        """Add security headers to all responses."""
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # Strict Transport Security (HTTPS only in production)
        if not app.debug and not app.testing:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response


# ============================================================================
# Error Handlers
# ============================================================================

def register_error_handlers(app):

    @app.errorhandler(ServiceError)
    def handle_service_error(e):
        return jsonify({'error': e.message}), e.status_code

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({'error': 'Not found'}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({'error': 'Method not allowed'}), 405

    @app.errorhandler(429)
    def rate_limited(e):
        return jsonify({'error': 'Too many requests. Please try again later.'}), 429

    @app.errorhandler(500)
    def internal_error(e):
        logger.error(f"Unhandled error on {request.method} {request.path}: {e}")
        return jsonify({'error': 'Internal server error'}), 500


# ============================================================================
# CLI Commands
# ============================================================================

def register_commands(app):

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables if they don't exist.

        Schema changes go through Flask-Migrate ('flask db migrate' / 'flask db upgrade').
        """
        db.create_all()
        click.echo('Database initialized!')

    @app.cli.command('expire-invitations')
    @click.option('--dry-run', is_flag=True, help='Only count overdue invitations')
    def expire_invitations_command(dry_run):
        """Mark overdue pending invitations as expired.

        Examples:
            flask expire-invitations
            flask expire-invitations --dry-run
        """
        from datetime import datetime
        from models import Invitation, INVITATION_PENDING
        from services.couple_service import CoupleService

        store = get_store()
        if dry_run:
            overdue = store.find_many(
                Invitation,
                Invitation.expires_at < datetime.utcnow(),
                status=INVITATION_PENDING,
            )
            click.echo(f'{len(overdue)} overdue invitations')
            return

        expired = CoupleService(store).expire_overdue_invitations()
        click.echo(f'Expired {expired} invitations')


if __name__ == '__main__':
    app = create_app()

    with app.app_context():
        db.create_all()

    # Default to 5001 for local development (avoids macOS AirPlay Receiver conflict)
    port = int(os.environ.get('PORT', 5001))

    # Allow disabling auto-reload for stable testing (NO_RELOAD=1 python app.py)
    use_reloader = os.environ.get('NO_RELOAD') != '1'

    app.run(debug=app.debug, host='0.0.0.0', port=port, use_reloader=use_reloader)
