"""
Couple API routes.

Endpoints:
- GET /api/v1/couples - Get current couple, partner and pending invitation
- POST /api/v1/couples/invite - Invite a partner by email
- POST /api/v1/couples/accept - Accept an invitation
- POST /api/v1/couples/reject - Reject an invitation
- POST /api/v1/couples/disconnect - Leave the active couple
"""
from flask import current_app, jsonify, g

from api_decorators import jwt_required
from email_service import build_invite_url, send_invitation_email
from services.couple_service import CoupleService
from services.errors import ServiceError
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


def _couple_service():
    return CoupleService(
        get_store(),
        send_invitation=send_invitation_email,
        invitation_expires=current_app.config['INVITATION_EXPIRES'],
    )


def _partner_to_dict(user):
    """Public view of the partner."""
    return {
        'id': user.id,
        'name': user.name,
        'email': user.email,
        'profile_picture': user.profile_picture,
        'upi_id': user.upi_id,
    }


@api_v1_bp.route('/couples', methods=['GET'])
@jwt_required
def api_get_couple():
    """Get the current user's couple.

    Returns:
        {
            "couple": {...} or null,
            "partner": {...} or null,
            "invitation": {...} or null
        }
    """
    try:
        current = _couple_service().get_current(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    if current is None:
        return jsonify({'couple': None, 'partner': None, 'invitation': None})

    partner = current['partner']
    invitation = current['invitation']

    return jsonify({
        'couple': current['couple'].to_dict(),
        'partner': _partner_to_dict(partner) if partner else None,
        'invitation': invitation.to_dict() if invitation else None,
    })


@api_v1_bp.route('/couples/invite', methods=['POST'])
@jwt_required
def api_invite_partner():
    """Invite another user to form a couple.

    Request body:
        {"email": "partner@example.com"}

    Returns:
        {
            "couple": {...},
            "invitation": {...},   # includes the token
            "invite_url": "https://...",
            "email_sent": true/false
        }
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        couple, invitation, email_sent = _couple_service().invite(
            g.current_user_id, data.get('email')
        )
    except ServiceError as e:
        return error_response(e)

    return jsonify({
        'couple': couple.to_dict(),
        'invitation': invitation.to_dict(include_token=True),
        'invite_url': build_invite_url(invitation.token),
        'email_sent': email_sent,
    }), 201


@api_v1_bp.route('/couples/accept', methods=['POST'])
@jwt_required
def api_accept_invitation():
    """Accept an invitation.

    Request body:
        {"token": "..."}

    Returns:
        {"couple": {...}, "partner": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        couple, partner = _couple_service().accept(g.current_user_id, data.get('token'))
    except ServiceError as e:
        return error_response(e)

    return jsonify({
        'message': 'Invitation accepted',
        'couple': couple.to_dict(),
        'partner': _partner_to_dict(partner) if partner else None,
    })


@api_v1_bp.route('/couples/reject', methods=['POST'])
@jwt_required
def api_reject_invitation():
    """Reject an invitation.

    Request body:
        {"token": "..."}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        _couple_service().reject(g.current_user_id, data.get('token'))
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Invitation rejected'})


@api_v1_bp.route('/couples/disconnect', methods=['POST'])
@jwt_required
def api_disconnect_couple():
    """Leave the active couple."""
    try:
        _couple_service().disconnect(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Disconnected successfully'})
