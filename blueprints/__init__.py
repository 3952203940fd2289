"""
Flask blueprints for organizing routes by domain.
"""
from blueprints.api_v1 import api_v1_bp, LEGACY_PREFIX


def register_blueprints(app):
    """Register all blueprints with the Flask app.

    The API is served at /api/v1 and, for older clients, at /api.
    """
    app.register_blueprint(api_v1_bp)
    app.register_blueprint(api_v1_bp, url_prefix=LEGACY_PREFIX, name='api_legacy')
