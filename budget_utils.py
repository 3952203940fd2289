"""Budget calculation utilities for the shared expense tracker."""

from decimal import Decimal

from models import DEFAULT_ALERT_PERCENT
from utils import to_money


def effective_alert_percent(alert_percent):
    """Alert threshold with the default applied when unset or zero."""
    if not alert_percent:
        return float(DEFAULT_ALERT_PERCENT)
    return float(alert_percent)


def calculate_budget_status(budget_amount, spent_amount, alert_percent=None):
    """
    Calculate budget status for one category in one month.

    Args:
        budget_amount: Monthly limit (Decimal, float or str)
        spent_amount: Spending in the category this month
        alert_percent: Threshold percentage (defaults to 80 when unset or zero)

    Returns:
        dict with budget status:
        {
            'spent': Decimal,
            'remaining': Decimal,
            'percent_used': float,   # 0 when the budget amount is 0
            'alert_reached': bool,
        }
    """
    budget_amount = to_money(budget_amount)
    spent = to_money(spent_amount)

    if budget_amount == 0:
        percent_used = 0.0
    else:
        percent_used = float(spent / budget_amount * Decimal('100'))

    return {
        'spent': spent,
        'remaining': budget_amount - spent,
        'percent_used': percent_used,
        'alert_reached': percent_used >= effective_alert_percent(alert_percent),
    }
