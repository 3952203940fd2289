"""
Template service.

Reusable expense templates, shared with the user's couple.
"""
from datetime import datetime

from models import ExpenseTemplate
from services.errors import InvalidInput, NotFound
from services.ledger_service import clean_split_fields
from services.lookups import find_active_couple, ledger_scope
from utils import require_id


def clean_template_fields(data):
    """Validate a template payload: a name plus the expense split fields."""
    if not isinstance(data, dict):
        raise InvalidInput('Request body required')

    name = (data.get('name') or '').strip()
    if not name:
        raise InvalidInput('Template name is required')

    fields = clean_split_fields(data)
    fields['name'] = name[:100]
    fields['description'] = (data.get('description') or '').strip()[:200]
    return fields


class TemplateService:
    """Service for expense template CRUD."""

    def __init__(self, store):
        self.store = store

    def _scope(self, user_id):
        couple = find_active_couple(self.store, user_id)
        return ledger_scope(ExpenseTemplate, user_id, couple)

    def list_templates(self, user_id):
        return self.store.find_many(
            ExpenseTemplate,
            self._scope(user_id),
            order_by=ExpenseTemplate.name,
        )

    def create_template(self, user_id, data):
        fields = clean_template_fields(data)
        couple = find_active_couple(self.store, user_id)
        now = datetime.utcnow()

        return self.store.insert_one(ExpenseTemplate(
            user_id=user_id,
            couple_id=couple.id if couple else None,
            created_at=now,
            updated_at=now,
            **fields
        ))

    def update_template(self, user_id, template_id, data):
        """
        Raises:
            InvalidInput: Malformed ID or payload
            NotFound: Template not in the user's scope
        """
        template_id = require_id(template_id, 'template ID')
        fields = clean_template_fields(data)

        if not self.store.update_one(ExpenseTemplate, fields, self._scope(user_id), id=template_id):
            raise NotFound('Template not found')
        return self.store.find_one(ExpenseTemplate, id=template_id)

    def delete_template(self, user_id, template_id):
        template_id = require_id(template_id, 'template ID')

        if not self.store.delete_one(ExpenseTemplate, self._scope(user_id), id=template_id):
            raise NotFound('Template not found')
