"""
Expense template API routes.

Endpoints:
- GET /api/v1/templates - List templates
- POST /api/v1/templates - Create template
- PUT /api/v1/templates/<id> - Update template
- DELETE /api/v1/templates/<id> - Delete template
"""
from flask import jsonify, g

from api_decorators import jwt_required
from services.errors import ServiceError
from services.template_service import TemplateService
from store import get_store
from blueprints.api_v1 import api_v1_bp, error_response, get_json_body


@api_v1_bp.route('/templates', methods=['GET'])
@jwt_required
def api_list_templates():
    """List templates owned by the user or shared with their couple.

    Returns:
        {"templates": [...]}
    """
    try:
        templates = TemplateService(get_store()).list_templates(g.current_user_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'templates': [template.to_dict() for template in templates]})


@api_v1_bp.route('/templates', methods=['POST'])
@jwt_required
def api_create_template():
    """Create a template.

    Request body:
        {
            "name": "Rent",
            "description": "Monthly rent",
            "total_amount": 1200.00,
            "category": "Housing",
            "paid_by": "person1",
            "split_type": "equal"
        }

    Returns:
        {"template": {...}}
    """
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        template = TemplateService(get_store()).create_template(g.current_user_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'template': template.to_dict()}), 201


@api_v1_bp.route('/templates/<template_id>', methods=['PUT'])
@jwt_required
def api_update_template(template_id):
    data = get_json_body()
    if data is None:
        return jsonify({'error': 'Request body required'}), 400

    try:
        template = TemplateService(get_store()).update_template(g.current_user_id, template_id, data)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'template': template.to_dict()})


@api_v1_bp.route('/templates/<template_id>', methods=['DELETE'])
@jwt_required
def api_delete_template(template_id):
    try:
        TemplateService(get_store()).delete_template(g.current_user_id, template_id)
    except ServiceError as e:
        return error_response(e)

    return jsonify({'message': 'Template deleted successfully'})
