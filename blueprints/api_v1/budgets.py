"""
Budget API routes.

Endpoints:
- GET /api/v1/budgets - List budgets with spending status (?month=&year=)
- POST /api/v1/budgets - Create or update the budget for a category and month
- PUT /api/v1/budgets/<id> - Update a budget
- DELETE /api/v1/budgets/<id> - Delete a budget
"""
from flask import request, jsonify, g

from api_decorators import jwt_required
from services.budget_service import BudgetService
from services.errors import ServiceError
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


@api_v1_bp.route('/budgets', methods=['GET'])
@jwt_required
def api_list_budgets():
    """List the couple's budgets for a month.

    Query Parameters:
        month (int): 1-12, defaults to the current month
        year (int): Defaults to the current year

    Returns:
        {"budgets": [{..., "spent": 40.0, "remaining": 60.0,
                      "percent_used": 40.0, "alert_reached": false}]}
    """
    try:
        budgets = BudgetService(get_store()).list_budgets(
            g.current_user_id,
            month=request.args.get('month'),
            year=request.args.get('year'),
        )
    except ServiceError as e:
        return error_response(e)

    return jsonify({'budgets': budgets})


@api_v1_bp.route('/budgets', methods=['POST'])
@api_v1_bp.route('/budgets/<budget_id>', methods=['PUT'])
@jwt_required
def api_upsert_budget(budget_id=None):
    """Create or update a budget.

    Request body:
        {
            "category": "Food",
            "amount": 400.00,
            "month": 3,
            "year": 2025,
            "alert_percent": 80    # optional
        }

    Returns:
        {"budget": {...}} with 201 when created, 200 when updated
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        budget, created = BudgetService(get_store()).upsert_budget(
            g.current_user_id, data, budget_id=budget_id
        )
    except ServiceError as e:
        return error_response(e)

    return jsonify({'budget': budget.to_dict()}), 201 if created else 200


@api_v1_bp.route('/budgets/<budget_id>', methods=['DELETE'])
@jwt_required
def api_delete_budget(budget_id):
    try:
        BudgetService(get_store()).delete_budget(g.current_user_id, budget_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Budget deleted successfully'})
