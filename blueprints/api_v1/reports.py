"""
Report API routes.

Endpoints:
- GET /api/v1/reports/monthly/<year>/<month> - Monthly spending and balance
- GET /api/v1/reports/categories/<year>/<month> - Spending per category
"""
from flask import jsonify, g

from api_decorators import jwt_required
from services.errors import ServiceError
from services.report_service import ReportService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response


@api_v1_bp.route('/reports/monthly/<year>/<month>', methods=['GET'])
@jwt_required
def api_monthly_report(year, month):
    """Monthly report for the user's ledger.

    Returns:
        {
            "total_spent": 250.0,
            "person1_paid": 150.0,
            "person2_paid": 100.0,
            "category_totals": {"Food": 120.0, ...},
            "expenses": [...],
            "transfers": [...],
            "balance": {
                "person1_net": 25.0,
                "person2_net": -25.0,
                "who_owes_who": "Person 2 owes Person 1",
                "amount_owed": 25.0,
                "person1_status": "positive",
                "person2_status": "negative"
            }
        }
    """
    try:
        report = ReportService(get_store()).monthly_report(g.current_user_id, year, month)
    except ServiceError as e:
        return error_response(e)

    return jsonify(report)


@api_v1_bp.route('/reports/categories/<year>/<month>', methods=['GET'])
@jwt_required
def api_category_report(year, month):
    """Spending per category, largest first.

    Returns:
        {"categories": [{"category": "Food", "total": 120.0, "count": 4}, ...]}
    """
    try:
        categories = ReportService(get_store()).category_report(g.current_user_id, year, month)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'categories': categories})
