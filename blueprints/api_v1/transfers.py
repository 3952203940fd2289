"""
Transfer API routes.

Endpoints:
- GET /api/v1/transfers - List transfers
- POST /api/v1/transfers - Create transfer
- PUT /api/v1/transfers/<id> - Update transfer
- DELETE /api/v1/transfers/<id> - Delete transfer
"""
from flask import jsonify, g

from api_decorators import jwt_required
from services.errors import ServiceError
from services.ledger_service import LedgerService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


@api_v1_bp.route('/transfers', methods=['GET'])
@jwt_required
def api_list_transfers():
    """List transfers, newest first.

    Returns:
        {"transfers": [...], "count": 3}
    """
    try:
        transfers = LedgerService(get_store()).list_transfers(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({
        'transfers': [transfer.to_dict() for transfer in transfers],
        'count': len(transfers),
    })


@api_v1_bp.route('/transfers', methods=['POST'])
@jwt_required
def api_create_transfer():
    """Record a payment from one partner to the other.

    Request body:
        {
            "amount": 50.00,
            "from_user": "person2",
            "to_user": "person1",
            "description": "Settling up"   # optional
        }

    Returns:
        {"transfer": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        transfer = LedgerService(get_store()).create_transfer(g.current_user_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'transfer': transfer.to_dict()}), 201


@api_v1_bp.route('/transfers/<transfer_id>', methods=['PUT'])
@jwt_required
def api_update_transfer(transfer_id):
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        transfer = LedgerService(get_store()).update_transfer(g.current_user_id, transfer_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'transfer': transfer.to_dict()})


@api_v1_bp.route('/transfers/<transfer_id>', methods=['DELETE'])
@jwt_required
def api_delete_transfer(transfer_id):
    try:
        LedgerService(get_store()).delete_transfer(g.current_user_id, transfer_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Transfer deleted successfully'})
