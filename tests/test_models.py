"""
Tests for model helpers and serialization.
"""
import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from models import Couple, Invitation, Expense, Settings, generate_id


pytestmark = pytest.mark.unit


def test_generate_id_is_hex_and_unique():
    ids = {generate_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(len(i) == 32 and int(i, 16) >= 0 for i in ids)


def test_partner_id():
    couple = Couple(user1_id='a' * 32, user2_id='b' * 32)

    assert couple.partner_id('a' * 32) == 'b' * 32
    assert couple.partner_id('b' * 32) == 'a' * 32


def test_pending_couple_has_no_partner():
    assert Couple(user1_id='a' * 32).partner_id('a' * 32) is None


class TestInvitation:

    def test_is_expired(self):
        now = datetime(2025, 3, 1, 12, 0)
        invitation = Invitation(expires_at=now)

        assert invitation.is_expired(now + timedelta(seconds=1))
        assert not invitation.is_expired(now)

    def test_token_hidden_by_default(self):
        invitation = Invitation(token='t' * 64, expires_at=datetime(2025, 3, 8))

        assert 'token' not in invitation.to_dict()
        assert invitation.to_dict(include_token=True)['token'] == 't' * 64


def test_expense_to_dict_uses_floats(store, alice):
    expense = store.insert_one(Expense(
        user_id=alice.id,
        description='Groceries',
        total_amount=Decimal('45.50'),
        category='Food',
        paid_by='person1',
        split_type='equal',
        person1_share=Decimal('22.75'),
        person2_share=Decimal('22.75'),
    ))

    data = expense.to_dict()

    assert data['total_amount'] == 45.5
    assert data['person1_share'] == 22.75
    assert data['comments'] == []
    assert data['couple_id'] is None


def test_settings_defaults():
    assert Settings.defaults() == {'theme': 'system', 'currency': 'USD', 'notifications': True}
