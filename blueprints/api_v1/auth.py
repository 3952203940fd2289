"""
Authentication API routes.

Endpoints:
- POST /api/v1/auth/verify - Sign in with an identity provider assertion
- POST /api/v1/auth/logout - Logout (stateless)
- GET /api/v1/auth/me - Get current user
- PUT /api/v1/auth/upi - Set or clear the UPI payment handle
"""
import logging

from flask import request, jsonify, g

from extensions import limiter
from api_decorators import generate_access_token, jwt_required
from email_service import send_invitation_email
from services.couple_service import CoupleService
from services.errors import ServiceError
from services.identity_service import IdentityService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body

logger = logging.getLogger(__name__)


def _identity_service():
    store = get_store()
    return IdentityService(store, CoupleService(store, send_invitation=send_invitation_email))


@api_v1_bp.route('/auth/verify', methods=['POST'])
@limiter.limit("20 per minute")
def api_verify():
    """Sign in with the identity provider's user and get a session token.

    Request body:
        {
            "firebase_uid": "...",
            "email": "user@example.com",
            "name": "User Name",
            "auth_provider": "firebase" | "google",
            "profile_picture": "https://...",    # optional
            "email_verified": true,               # optional
            "invitation_token": "..."             # optional
        }

    The invitation token may also be sent in the X-Invitation-Token header.

    Returns:
        {
            "token": "...",
            "user": {...},
            "couple": {...} or null   # set when an invitation was accepted
        }
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    assertion = dict(data)
    assertion['external_uid'] = data.get('firebase_uid') or data.get('external_uid')

    invitation_token = data.get('invitation_token') or request.headers.get('X-Invitation-Token')

    try:
        user, couple = _identity_service().sign_in(assertion, invitation_token=invitation_token)
    except ServiceError as e:
        return error_response(e)

    logger.info(f"User {user.id} signed in via {user.auth_provider}")

    return jsonify({
        'token': generate_access_token(user.id),
        'user': user.to_dict(),
        'couple': couple.to_dict() if couple else None,
    })


@api_v1_bp.route('/auth/logout', methods=['POST'])
def api_logout():
    """Logout. Tokens are stateless; the client discards its token.

    Returns:
        {"message": "Logged out successfully"}
    """
    return jsonify({'message': 'Logged out successfully'})


@api_v1_bp.route('/auth/me', methods=['GET'])
@jwt_required
def api_get_current_user():
    """Get the signed-in user.

    Returns:
        {"user": {...}}
    """
    try:
        user = _identity_service().get_user(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'user': user.to_dict()})


@api_v1_bp.route('/auth/upi', methods=['PUT'])
@jwt_required
def api_update_upi():
    """Set or clear the UPI payment handle.

    Request body:
        {"upi_id": "name@bank"}   # empty string clears it

    Returns:
        {"user": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        user = _identity_service().update_payment_handle(g.current_user_id, data.get('upi_id'))
    except ServiceError as e:
        return error_response(e)

    return jsonify({'user': user.to_dict()})
