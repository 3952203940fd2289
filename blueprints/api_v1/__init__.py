"""
API v1 Blueprint.

Provides the REST API with JWT authentication. The blueprint is registered at
/api/v1 and again at the legacy /api prefix.
"""
from flask import Blueprint, jsonify, request

api_v1_bp = Blueprint('api_v1', __name__, url_prefix='/api/v1')

LEGACY_PREFIX = '/api'


def error_response(error):
    """Translate a service error into a JSON response."""
    return jsonify({'error': error.message}), error.status_code


def get_json_body():
    """Request body as a dict, or None when it is missing or not an object."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return None
    return data


# Import routes to register them with the blueprint
from blueprints.api_v1 import auth  # noqa: F401, E402
from blueprints.api_v1 import couples  # noqa: F401, E402
from blueprints.api_v1 import expenses  # noqa: F401, E402
from blueprints.api_v1 import transfers  # noqa: F401, E402
from blueprints.api_v1 import settings  # noqa: F401, E402
from blueprints.api_v1 import reports  # noqa: F401, E402
from blueprints.api_v1 import budgets  # noqa: F401, E402
from blueprints.api_v1 import templates  # noqa: F401, E402
