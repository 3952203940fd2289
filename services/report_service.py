"""
Report service.

Builds the monthly balance report and the per-category spending report for a
user's ledger scope.
"""
from models import Expense, Transfer
from services.lookups import find_active_couple, ledger_scope
from utils import calculate_balance, month_window, summarize_expenses


class ReportService:
    """Service for monthly reports."""

    def __init__(self, store):
        self.store = store

    def _month_records(self, model, user_id, couple, start, end):
        return self.store.find_many(
            model,
            ledger_scope(model, user_id, couple),
            model.created_at >= start,
            model.created_at < end,
            order_by=model.created_at.desc(),
        )

    def monthly_report(self, user_id, year, month):
        """
        Get spending and the balance for one calendar month.

        ``person1_paid`` and ``person2_paid`` count expenses only; transfers
        are reflected in the ``balance`` block.

        Args:
            user_id (str): The user ID
            year (int): Report year
            month (int): Report month (1-12)

        Returns:
            dict: total_spent, person1_paid, person2_paid, category_totals,
                  expenses, transfers, balance (JSON-ready)

        Raises:
            InvalidInput: If year or month is out of range
        """
        start, end = month_window(year, month)
        couple = find_active_couple(self.store, user_id)

        expenses = self._month_records(Expense, user_id, couple, start, end)
        transfers = self._month_records(Transfer, user_id, couple, start, end)

        summary = summarize_expenses(expenses)

        return {
            'year': start.year,
            'month': start.month,
            'total_spent': float(summary['total_spent']),
            'person1_paid': float(summary['person1_paid']),
            'person2_paid': float(summary['person2_paid']),
            'category_totals': {
                category: float(total)
                for category, total in summary['category_totals'].items()
            },
            'expenses': [expense.to_dict() for expense in expenses],
            'transfers': [transfer.to_dict() for transfer in transfers],
            'balance': calculate_balance(expenses, transfers),
        }

    def category_report(self, user_id, year, month):
        """
        Get spending per category for one calendar month.

        Returns:
            list: [{'category', 'total', 'count'}] sorted by total, largest first
        """
        start, end = month_window(year, month)
        couple = find_active_couple(self.store, user_id)

        rows = self.store.aggregate_sum(
            Expense, 'category', 'total_amount',
            ledger_scope(Expense, user_id, couple),
            Expense.created_at >= start,
            Expense.created_at < end,
        )

        return [
            {
                'category': row['group'],
                'total': float(row['total'] or 0),
                'count': row['count'],
            }
            for row in rows
        ]
