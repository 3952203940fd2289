"""
Configuration classes for Flask application.

Usage:
    from config import config
    app.config.from_object(config[config_name])
"""
import os
from datetime import timedelta


class Config:
    """Base configuration with defaults."""

    # Security
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key-change-in-production')

    # Session tokens (JWT)
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY', os.environ.get('SECRET_KEY', 'dev-secret-key'))
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    # Invitations
    INVITATION_EXPIRES = timedelta(days=7)

    # Database
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Every store call is bounded: waiting for a pooled connection and the
    # driver-level timeout both use this value.
    STORE_TIMEOUT_SECONDS = int(os.environ.get('STORE_TIMEOUT_SECONDS', 10))
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_timeout': STORE_TIMEOUT_SECONDS,
    }

    # CORS
    ALLOWED_ORIGINS = ['http://localhost:3000', 'http://localhost:3001']

    # Rate limiting (Flask-Limiter config keys)
    RATELIMIT_DEFAULT = os.environ.get('RATE_LIMIT', '600 per hour')
    # Use Redis for persistent rate limiting if REDIS_URL is set, otherwise memory
    RATELIMIT_STORAGE_URI = os.environ.get('REDIS_URL', 'memory://')

    # Mail configuration (optional - for invitations)
    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'noreply@splithalf.app')

    # Site URL for invitation links
    SITE_URL = os.environ.get('SITE_URL', 'http://localhost:3000')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()


class DevelopmentConfig(Config):
    """Development configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL',
        'sqlite:///splithalf.db'
    )


class ProductionConfig(Config):
    """Production configuration."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL')

    # No fallback secret in production; create_app refuses to start without one
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')

    ALLOWED_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('ALLOWED_ORIGINS', '').split(',')
        if origin.strip()
    ]


class TestingConfig(Config):
    """Testing configuration."""

    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET_KEY = 'test-jwt-secret'

    # Disable rate limiting for tests
    RATELIMIT_ENABLED = False

    # Never talk to an SMTP server from tests
    MAIL_SUPPRESS_SEND = True


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config_name():
    """Get configuration name from environment."""
    flask_env = os.environ.get('FLASK_ENV', os.environ.get('ENVIRONMENT', 'development'))
    if flask_env == 'production':
        return 'production'
    elif os.environ.get('TESTING'):
        return 'testing'
    return 'development'
