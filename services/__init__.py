"""
Service layer for the shared expense tracker.

Services encapsulate business logic separate from route handlers. Each one
receives a ``store.Store`` in its constructor:

- identity_service.IdentityService: sign-in, session user, payment handle
- couple_service.CoupleService: couple and invitation lifecycle
- ledger_service.LedgerService: expenses, comments and transfers
- report_service.ReportService: monthly balance and category reports
- budget_service.BudgetService: category budgets and their status
- settings_service.SettingsService: per-user preferences
- template_service.TemplateService: reusable expense templates

Service modules are imported directly (``from services.ledger_service import
LedgerService``); the shared error classes are re-exported here.
"""
from services.errors import (
    ServiceError,
    NotAuthenticated,
    InvalidInput,
    Forbidden,
    NotFound,
    Conflict,
    Expired,
    InternalFailure,
)

__all__ = [
    'ServiceError',
    'NotAuthenticated',
    'InvalidInput',
    'Forbidden',
    'NotFound',
    'Conflict',
    'Expired',
    'InternalFailure',
]
