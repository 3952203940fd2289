"""
Expense API routes.

Endpoints:
- GET /api/v1/expenses - List expenses
- POST /api/v1/expenses - Create expense
- PUT /api/v1/expenses/<id> - Update expense
- DELETE /api/v1/expenses/<id> - Delete expense
- POST /api/v1/expenses/<id>/comments - Add a comment
"""
from flask import jsonify, g

from api_decorators import jwt_required
from services.errors import ServiceError
from services.ledger_service import LedgerService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


@api_v1_bp.route('/expenses', methods=['GET'])
@jwt_required
def api_list_expenses():
    """List the user's and their couple's expenses, newest first.

    Returns:
        {"expenses": [...], "count": 12}
    """
    try:
        expenses = LedgerService(get_store()).list_expenses(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({
        'expenses': [expense.to_dict() for expense in expenses],
        'count': len(expenses),
    })


@api_v1_bp.route('/expenses', methods=['POST'])
@jwt_required
def api_create_expense():
    """Create a new expense.

    Request body:
        {
            "description": "Groceries",
            "total_amount": 85.50,
            "category": "Food",
            "paid_by": "person1",
            "split_type": "equal",        # equal | ratio | exact
            "person1_share": 42.75,       # optional for equal splits
            "person2_share": 42.75,
            "notes": "Weekly shop"        # optional
        }

    Returns:
        {"expense": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        expense = LedgerService(get_store()).create_expense(g.current_user_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'expense': expense.to_dict()}), 201


@api_v1_bp.route('/expenses/<expense_id>', methods=['PUT'])
@jwt_required
def api_update_expense(expense_id):
    """Update an expense. Takes the same body as create.

    Returns:
        {"expense": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        expense = LedgerService(get_store()).update_expense(g.current_user_id, expense_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'expense': expense.to_dict()})


@api_v1_bp.route('/expenses/<expense_id>', methods=['DELETE'])
@jwt_required
def api_delete_expense(expense_id):
    """Delete an expense."""
    try:
        LedgerService(get_store()).delete_expense(g.current_user_id, expense_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Expense deleted successfully'})


@api_v1_bp.route('/expenses/<expense_id>/comments', methods=['POST'])
@jwt_required
def api_add_comment(expense_id):
    """Add a comment to an expense.

    Request body:
        {"text": "Was this the big shop?"}

    Returns:
        {"comment": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        comment = LedgerService(get_store()).add_comment(
            g.current_user_id, expense_id, data.get('text')
        )
    except ServiceError as e:
        return error_response(e)

    return jsonify({'comment': comment}), 201
