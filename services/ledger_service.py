"""
Ledger service.

Handles expense, comment and transfer CRUD. Records are visible to their
owner and, once tagged with a couple, to both members of that couple.
"""
import logging
from datetime import datetime
from decimal import ROUND_DOWN

from models import Expense, Transfer, User, PERSON_TAGS, SPLIT_TYPES, generate_id
from services.errors import InvalidInput, NotFound
from services.lookups import find_active_couple, ledger_scope
from utils import CENTS, parse_amount, require_id

logger = logging.getLogger(__name__)

MAX_COMMENT_LENGTH = 1000


def split_equally(total):
    """Split a total in two; the odd cent goes to person1."""
    person2_share = (total / 2).quantize(CENTS, rounding=ROUND_DOWN)
    return total - person2_share, person2_share


def clean_split_fields(data):
    """
    Validate the amount, payer and split of an expense-like payload.

    For an ``equal`` split without shares, the shares are computed.

    Returns:
        dict: total_amount, category, paid_by, split_type, person1_share,
              person2_share

    Raises:
        InvalidInput: If any field is missing or the shares don't add up
    """
    total = parse_amount(data.get('total_amount'), 'Total amount')

    category = (data.get('category') or '').strip()
    if not category:
        raise InvalidInput('Category is required')

    paid_by = data.get('paid_by')
    if paid_by not in PERSON_TAGS:
        raise InvalidInput('Paid by must be person1 or person2')

    split_type = data.get('split_type') or 'equal'
    if split_type not in SPLIT_TYPES:
        raise InvalidInput(f'Split type must be one of: {", ".join(SPLIT_TYPES)}')

    has_shares = data.get('person1_share') is not None or data.get('person2_share') is not None
    if split_type == 'equal' and not has_shares:
        person1_share, person2_share = split_equally(total)
    else:
        person1_share = parse_amount(data.get('person1_share'), 'Person 1 share', allow_zero=True)
        person2_share = parse_amount(data.get('person2_share'), 'Person 2 share', allow_zero=True)

        if person1_share + person2_share != total:
            raise InvalidInput('Shares must add up to the total amount')
        if split_type == 'equal' and abs(person1_share - person2_share) > CENTS:
            raise InvalidInput('Equal split shares must match')

    return {
        'total_amount': total,
        'category': category[:50],
        'paid_by': paid_by,
        'split_type': split_type,
        'person1_share': person1_share,
        'person2_share': person2_share,
    }


def clean_expense_fields(data):
    """Validate a full expense payload (split fields plus description and notes)."""
    if not isinstance(data, dict):
        raise InvalidInput('Request body required')

    description = (data.get('description') or '').strip()
    if not description:
        raise InvalidInput('Description is required')

    fields = clean_split_fields(data)
    fields['description'] = description[:200]

    notes = data.get('notes')
    if notes is not None:
        fields['notes'] = str(notes).strip() or None
    return fields


def clean_transfer_fields(data):
    """Validate a transfer payload."""
    if not isinstance(data, dict):
        raise InvalidInput('Request body required')

    amount = parse_amount(data.get('amount'), 'Amount')

    from_user = data.get('from_user')
    to_user = data.get('to_user')
    if from_user not in PERSON_TAGS or to_user not in PERSON_TAGS:
        raise InvalidInput('From and to must be person1 or person2')
    if from_user == to_user:
        raise InvalidInput('Cannot transfer to the same person')

    return {
        'amount': amount,
        'from_user': from_user,
        'to_user': to_user,
        'description': (data.get('description') or '').strip()[:200],
    }


class LedgerService:
    """Service for expense and transfer operations."""

    def __init__(self, store):
        self.store = store

    def _scope(self, model, user_id):
        couple = find_active_couple(self.store, user_id)
        return couple, ledger_scope(model, user_id, couple)

    # ------------------------------------------------------------------
    # Expenses
    # ------------------------------------------------------------------

    def list_expenses(self, user_id):
        """
        Get the user's expenses, newest first.

        Returns:
            list: Expense records the user owns or that belong to their couple
        """
        _, scope = self._scope(Expense, user_id)
        return self.store.find_many(Expense, scope, order_by=Expense.created_at.desc())

    def create_expense(self, user_id, data):
        """
        Record a new expense, tagged with the user's active couple if any.

        Raises:
            InvalidInput: If validation fails
        """
        fields = clean_expense_fields(data)
        couple = find_active_couple(self.store, user_id)
        now = datetime.utcnow()

        expense = self.store.insert_one(Expense(
            user_id=user_id,
            couple_id=couple.id if couple else None,
            comments=[],
            created_at=now,
            updated_at=now,
            **fields
        ))
        logger.info(f"User {user_id} created expense {expense.id}")
        return expense

    def update_expense(self, user_id, expense_id, data):
        """
        Replace an expense's fields.

        Raises:
            InvalidInput: Malformed ID or payload
            NotFound: Expense not in the user's scope
        """
        expense_id = require_id(expense_id, 'expense ID')
        fields = clean_expense_fields(data)

        _, scope = self._scope(Expense, user_id)
        matched = self.store.update_one(Expense, fields, scope, id=expense_id)
        if not matched:
            raise NotFound('Expense not found')

        return self.store.find_one(Expense, id=expense_id)

    def delete_expense(self, user_id, expense_id):
        """
        Raises:
            InvalidInput: Malformed ID
            NotFound: Expense not in the user's scope
        """
        expense_id = require_id(expense_id, 'expense ID')

        _, scope = self._scope(Expense, user_id)
        if not self.store.delete_one(Expense, scope, id=expense_id):
            raise NotFound('Expense not found')
        logger.info(f"User {user_id} deleted expense {expense_id}")

    def add_comment(self, user_id, expense_id, text):
        """
        Append a comment to an expense.

        Returns:
            dict: The stored comment

        Raises:
            InvalidInput: Malformed ID, empty or over-long text
            NotFound: Expense not in the user's scope
        """
        expense_id = require_id(expense_id, 'expense ID')

        text = (text or '').strip() if isinstance(text, str) else ''
        if not text:
            raise InvalidInput('Comment text is required')
        if len(text) > MAX_COMMENT_LENGTH:
            raise InvalidInput(f'Comment is too long (max {MAX_COMMENT_LENGTH} characters)')

        _, scope = self._scope(Expense, user_id)
        expense = self.store.find_one(Expense, scope, id=expense_id)
        if expense is None:
            raise NotFound('Expense not found')

        author = self.store.find_one(User, id=user_id)
        comment = {
            'id': generate_id(),
            'user_id': user_id,
            'user_name': author.name if author else '',
            'text': text,
            'created_at': datetime.utcnow().isoformat(),
        }

        comments = list(expense.comments or []) + [comment]
        self.store.update_one(Expense, {'comments': comments}, id=expense.id)
        return comment

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def list_transfers(self, user_id):
        """Get the user's transfers, newest first."""
        _, scope = self._scope(Transfer, user_id)
        return self.store.find_many(Transfer, scope, order_by=Transfer.created_at.desc())

    def create_transfer(self, user_id, data):
        """Record a transfer between the two partners."""
        fields = clean_transfer_fields(data)
        couple = find_active_couple(self.store, user_id)
        now = datetime.utcnow()

        transfer = self.store.insert_one(Transfer(
            user_id=user_id,
            couple_id=couple.id if couple else None,
            created_at=now,
            updated_at=now,
            **fields
        ))
        logger.info(f"User {user_id} created transfer {transfer.id}")
        return transfer

    def update_transfer(self, user_id, transfer_id, data):
        transfer_id = require_id(transfer_id, 'transfer ID')
        fields = clean_transfer_fields(data)

        _, scope = self._scope(Transfer, user_id)
        if not self.store.update_one(Transfer, fields, scope, id=transfer_id):
            raise NotFound('Transfer not found')

        return self.store.find_one(Transfer, id=transfer_id)

    def delete_transfer(self, user_id, transfer_id):
        transfer_id = require_id(transfer_id, 'transfer ID')

        _, scope = self._scope(Transfer, user_id)
        if not self.store.delete_one(Transfer, scope, id=transfer_id):
            raise NotFound('Transfer not found')
        logger.info(f"User {user_id} deleted transfer {transfer_id}")
