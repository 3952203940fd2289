"""
Settings API routes.

Endpoints:
- GET /api/v1/settings - Get user settings (defaults when never saved)
- PUT /api/v1/settings - Save user settings
"""
from flask import jsonify, g

from api_decorators import jwt_required
from services.errors import ServiceError
from services.settings_service import SettingsService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


@api_v1_bp.route('/settings', methods=['GET'])
@jwt_required
def api_get_settings():
    """Get the user's settings.

    Returns:
        {"settings": {"theme": "system", "currency": "USD", "notifications": true, ...}}
    """
    try:
        settings = SettingsService(get_store()).get_settings(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'settings': settings})


@api_v1_bp.route('/settings', methods=['PUT'])
@jwt_required
def api_update_settings():
    """Save the user's settings.

    Request body:
        {
            "theme": "dark",          # system | light | dark
            "currency": "INR",
            "notifications": false
        }

    Returns:
        {"settings": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        settings = SettingsService(get_store()).update_settings(g.current_user_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'settings': settings.to_dict()})
