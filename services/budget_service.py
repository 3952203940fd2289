"""
Budget service.

Monthly per-category spending limits for a couple, reported together with
what the couple has spent against them.
"""
import logging
from datetime import datetime, MAXYEAR

from budget_utils import calculate_budget_status
from models import Budget, Expense, DEFAULT_ALERT_PERCENT
from services.errors import InvalidInput, NotFound
from services.lookups import find_active_couple
from utils import month_window, parse_amount, require_id

logger = logging.getLogger(__name__)


def _current_period():
    now = datetime.utcnow()
    return now.month, now.year


def resolve_period(month=None, year=None):
    """Month and year from query values, falling back to the current month."""
    default_month, default_year = _current_period()
    try:
        month = int(month)
        if not 1 <= month <= 12:
            month = default_month
    except (TypeError, ValueError):
        month = default_month
    try:
        year = int(year)
        if not 1 <= year < MAXYEAR:
            year = default_year
    except (TypeError, ValueError):
        year = default_year
    return month, year


def clean_budget_fields(data):
    """
    Validate a budget payload.

    Raises:
        InvalidInput: Missing category, negative amount, month outside 1-12,
                      year out of range, alert percent outside 0-100
    """
    if not isinstance(data, dict):
        raise InvalidInput('Request body required')

    category = (data.get('category') or '').strip()
    if not category:
        raise InvalidInput('Category is required')

    amount = parse_amount(data.get('amount'), 'Amount', allow_zero=True)

    default_month, default_year = _current_period()
    try:
        month = int(data.get('month', default_month))
        year = int(data.get('year', default_year))
    except (TypeError, ValueError):
        raise InvalidInput('Month and year must be numbers')
    if not 1 <= month <= 12:
        raise InvalidInput('Month must be between 1 and 12')
    if not 1 <= year < MAXYEAR:
        raise InvalidInput('Year is out of range')

    alert_percent = data.get('alert_percent')
    if alert_percent is None:
        alert_percent = DEFAULT_ALERT_PERCENT
    try:
        alert_percent = float(alert_percent)
    except (TypeError, ValueError):
        raise InvalidInput('Alert percent must be a number')
    if isinstance(data.get('alert_percent'), bool) or not 0 <= alert_percent <= 100:
        raise InvalidInput('Alert percent must be between 0 and 100')

    return {
        'category': category[:50],
        'amount': amount,
        'month': month,
        'year': year,
        'alert_percent': alert_percent,
    }


class BudgetService:
    """Service for couple budgets."""

    def __init__(self, store):
        self.store = store

    def _require_couple(self, user_id, message):
        couple = find_active_couple(self.store, user_id)
        if couple is None:
            raise InvalidInput(message)
        return couple

    def list_budgets(self, user_id, month=None, year=None):
        """
        Get the couple's budgets for a month with spending status.

        Args:
            user_id (str): The user ID
            month, year: Period; invalid or missing values mean the current month

        Returns:
            list: Budget dicts with spent, remaining, percent_used and
                  alert_reached added (empty when the user has no couple)
        """
        couple = find_active_couple(self.store, user_id)
        if couple is None:
            return []

        month, year = resolve_period(month, year)
        start, end = month_window(year, month)

        budgets = self.store.find_many(
            Budget,
            couple_id=couple.id,
            month=month,
            year=year,
            order_by=Budget.category,
        )
        if not budgets:
            return []

        spending = {
            row['group']: row['total'] or 0
            for row in self.store.aggregate_sum(
                Expense, 'category', 'total_amount',
                Expense.couple_id == couple.id,
                Expense.created_at >= start,
                Expense.created_at < end,
            )
        }

        results = []
        for budget in budgets:
            status = calculate_budget_status(
                budget.amount,
                spending.get(budget.category, 0),
                budget.alert_percent,
            )
            data = budget.to_dict()
            data.update({
                'spent': float(status['spent']),
                'remaining': float(status['remaining']),
                'percent_used': status['percent_used'],
                'alert_reached': status['alert_reached'],
            })
            results.append(data)
        return results

    def upsert_budget(self, user_id, data, budget_id=None):
        """
        Create or update a budget.

        Without ``budget_id`` the (category, month, year) key decides: an
        existing budget for that key is updated, otherwise one is created.
        With ``budget_id`` that budget is updated in place.

        Returns:
            tuple: (Budget, created)

        Raises:
            InvalidInput: No active couple, malformed ID or payload
            NotFound: ``budget_id`` does not belong to the couple
            Conflict: Another budget already uses the key
        """
        couple = self._require_couple(user_id, 'You must be in a couple to set budgets')
        fields = clean_budget_fields(data)

        if budget_id is not None:
            budget_id = require_id(budget_id, 'budget ID')
            if not self.store.update_one(Budget, fields, id=budget_id, couple_id=couple.id):
                raise NotFound('Budget not found')
            return self.store.find_one(Budget, id=budget_id), False

        key = {
            'couple_id': couple.id,
            'category': fields['category'],
            'month': fields['month'],
            'year': fields['year'],
        }
        existing = self.store.find_one(Budget, **key)
        if existing:
            self.store.update_one(
                Budget,
                {'amount': fields['amount'], 'alert_percent': fields['alert_percent']},
                id=existing.id,
            )
            return self.store.find_one(Budget, id=existing.id), False

        now = datetime.utcnow()
        budget = self.store.insert_one(Budget(
            amount=fields['amount'],
            alert_percent=fields['alert_percent'],
            created_at=now,
            updated_at=now,
            **key
        ))
        logger.info(f"Couple {couple.id} budget created: {budget.category} {budget.year}-{budget.month:02d}")
        return budget, True

    def delete_budget(self, user_id, budget_id):
        """
        Raises:
            InvalidInput: No active couple or malformed ID
            NotFound: Budget does not belong to the couple
        """
        couple = self._require_couple(user_id, 'You must be in a couple')
        budget_id = require_id(budget_id, 'budget ID')

        if not self.store.delete_one(Budget, id=budget_id, couple_id=couple.id):
            raise NotFound('Budget not found')
