"""
Utility functions for the shared expense tracker.

Balance calculation, money parsing and identifier validation.
"""
import re
from datetime import datetime, MAXYEAR
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from services.errors import InvalidInput

CENTS = Decimal('0.01')
ZERO = Decimal('0.00')

ID_REGEX = re.compile(r'^[0-9a-f]{32}$')

# Email validation regex pattern
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def is_valid_email(email):
    """Validate email format using regex."""
    return EMAIL_REGEX.match(email or '') is not None


def require_id(value, label='ID'):
    """
    Validate a record identifier.

    Args:
        value (str): Identifier from the request path or body
        label (str): Name used in the error message (e.g. 'expense ID')

    Returns:
        str: The normalized identifier

    Raises:
        InvalidInput: If the identifier is malformed
    """
    if not isinstance(value, str) or not ID_REGEX.match(value.lower()):
        raise InvalidInput(f'Invalid {label}')
    return value.lower()


def to_money(value):
    """Convert a number or numeric string to a Decimal rounded to cents."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_amount(value, field, allow_zero=False):
    """
    Parse a monetary amount from request data.

    Raises:
        InvalidInput: If the value is missing, not numeric, or not positive
                      (non-negative when allow_zero is True)
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(f'{field} is required')
    try:
        amount = to_money(value)
    except (InvalidOperation, ValueError):
        raise InvalidInput(f'{field} must be a number')

    if not amount.is_finite():
        raise InvalidInput(f'{field} must be a number')
    if allow_zero and amount < 0:
        raise InvalidInput(f'{field} cannot be negative')
    if not allow_zero and amount <= 0:
        raise InvalidInput(f'{field} must be positive')
    return amount


def month_window(year, month):
    """
    Calendar-month window [first of month, first of next month).

    Raises:
        InvalidInput: If month is outside 1-12 or year is out of range
    """
    try:
        year = int(year)
        month = int(month)
    except (TypeError, ValueError):
        raise InvalidInput('Year and month must be numbers')

    if not 1 <= year < MAXYEAR or not 1 <= month <= 12:
        raise InvalidInput('Invalid year or month')

    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def summarize_expenses(expenses):
    """
    Aggregate spending for a list of expenses.

    Returns:
        dict: total_spent, person1_paid, person2_paid and category_totals
              (all Decimal)
    """
    total_spent = ZERO
    paid = {'person1': ZERO, 'person2': ZERO}
    category_totals = {}

    for expense in expenses:
        amount = to_money(expense.total_amount)
        total_spent += amount
        paid[expense.paid_by if expense.paid_by == 'person1' else 'person2'] += amount
        category_totals[expense.category] = category_totals.get(expense.category, ZERO) + amount

    return {
        'total_spent': total_spent,
        'person1_paid': paid['person1'],
        'person2_paid': paid['person2'],
        'category_totals': category_totals,
    }


def calculate_balance(expenses, transfers):
    """
    Calculate who owes whom from a period's expenses and transfers.

    Each expense credits its payer with the full amount and charges each
    person their share. A transfer is a balancing payment: the sender's paid
    total goes up and the receiver's goes down by the transferred amount.

    Args:
        expenses (list): Expense records (total_amount, paid_by, person1_share,
                         person2_share)
        transfers (list): Transfer records (amount, from_user)

    Returns:
        dict: person1_net, person2_net, who_owes_who, amount_owed,
              person1_status, person2_status
    """
    paid = {'person1': ZERO, 'person2': ZERO}
    owes = {'person1': ZERO, 'person2': ZERO}

    for expense in expenses:
        owes['person1'] += to_money(expense.person1_share)
        owes['person2'] += to_money(expense.person2_share)
        payer = 'person1' if expense.paid_by == 'person1' else 'person2'
        paid[payer] += to_money(expense.total_amount)

    for transfer in transfers:
        amount = to_money(transfer.amount)
        sender = 'person1' if transfer.from_user == 'person1' else 'person2'
        receiver = 'person2' if sender == 'person1' else 'person1'
        paid[sender] += amount
        paid[receiver] -= amount

    person1_net = paid['person1'] - owes['person1']
    person2_net = paid['person2'] - owes['person2']

    if person1_net > person2_net:
        amount_owed = abs(person2_net)
        who_owes_who = 'Person 2 owes Person 1'
        person1_status, person2_status = 'positive', 'negative'
    elif person2_net > person1_net:
        amount_owed = abs(person1_net)
        who_owes_who = 'Person 1 owes Person 2'
        person1_status, person2_status = 'negative', 'positive'
    else:
        amount_owed = ZERO
        who_owes_who = 'You are all settled up!'
        person1_status = person2_status = 'even'

    return {
        'person1_net': float(person1_net),
        'person2_net': float(person2_net),
        'who_owes_who': who_owes_who,
        'amount_owed': float(amount_owed),
        'person1_status': person1_status,
        'person2_status': person2_status,
    }
