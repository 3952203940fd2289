"""
Tests for the persistence adapter.
"""
import pytest
from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from models import User, Settings, Expense
from services.errors import Conflict, InternalFailure


pytestmark = pytest.mark.unit


def add_expense(store, user, amount, category):
    return store.insert_one(Expense(
        user_id=user.id,
        description=f'{category} purchase',
        total_amount=Decimal(amount),
        category=category,
        paid_by='person1',
        split_type='exact',
        person1_share=Decimal(amount),
        person2_share=Decimal('0'),
    ))


class TestInsertAndFind:

    def test_insert_assigns_hex_id(self, store, alice):
        assert len(alice.id) == 32
        assert int(alice.id, 16) >= 0
        assert store.find_one(User, id=alice.id).email == alice.email

    def test_find_one_missing(self, store):
        assert store.find_one(User, id='0' * 32) is None

    def test_duplicate_unique_field_is_conflict(self, store, alice):
        with pytest.raises(Conflict):
            store.insert_one(User(email=alice.email, name='Copy', external_uid='uid-other'))

        # Session is usable after the failure
        assert store.find_one(User, id=alice.id) is not None

    def test_find_many_ordering(self, store, make_user):
        make_user(email='b@example.com')
        make_user(email='a@example.com')

        users = store.find_many(User, order_by=User.email)

        assert [u.email for u in users] == ['a@example.com', 'b@example.com']


class TestUpdate:

    def test_update_returns_matched_count(self, store, alice):
        assert store.update_one(User, {'name': 'Alicia'}, id=alice.id) == 1
        assert store.find_one(User, id=alice.id).name == 'Alicia'

    def test_update_guard_matches_nothing(self, store, alice):
        assert store.update_one(User, {'name': 'X'}, id=alice.id, email='other@example.com') == 0
        assert store.find_one(User, id=alice.id).name == 'Alice Smith'

    def test_upsert_inserts_with_insert_only_fields(self, store, alice):
        matched = store.update_one(
            Settings, {'currency': 'EUR'},
            upsert=True,
            on_insert={'theme': 'dark'},
            user_id=alice.id,
        )

        settings = store.find_one(Settings, user_id=alice.id)
        assert matched == 1
        assert settings.currency == 'EUR'
        assert settings.theme == 'dark'

    def test_upsert_updates_without_insert_only_fields(self, store, alice):
        store.insert_one(Settings(user_id=alice.id, theme='light', currency='USD'))

        store.update_one(
            Settings, {'currency': 'EUR'},
            upsert=True,
            on_insert={'theme': 'dark'},
            user_id=alice.id,
        )

        settings = store.find_one(Settings, user_id=alice.id)
        assert settings.currency == 'EUR'
        assert settings.theme == 'light'
        assert len(store.find_many(Settings)) == 1

    def test_delete_returns_count(self, store, alice):
        assert store.delete_one(User, id=alice.id) == 1
        assert store.delete_one(User, id=alice.id) == 0


class TestTransaction:

    def test_commits_on_success(self, store, alice, bob):
        with store.transaction():
            store.update_one(User, {'name': 'A'}, id=alice.id)
            store.update_one(User, {'name': 'B'}, id=bob.id)

        store.session.expire_all()
        assert store.find_one(User, id=alice.id).name == 'A'
        assert store.find_one(User, id=bob.id).name == 'B'

    def test_rolls_back_on_error(self, store, alice, bob):
        with pytest.raises(RuntimeError):
            with store.transaction():
                store.update_one(User, {'name': 'A'}, id=alice.id)
                raise RuntimeError('boom')

        assert store.find_one(User, id=alice.id).name == 'Alice Smith'
        assert not store.in_transaction

    def test_nested_blocks_join_outer(self, store, alice):
        with pytest.raises(RuntimeError):
            with store.transaction():
                with store.transaction():
                    store.update_one(User, {'name': 'Inner'}, id=alice.id)
                raise RuntimeError('outer fails')

        assert store.find_one(User, id=alice.id).name == 'Alice Smith'


class TestAggregateSum:

    def test_groups_sums_and_sorts(self, store, alice):
        add_expense(store, alice, '10.00', 'Food')
        add_expense(store, alice, '25.50', 'Travel')
        add_expense(store, alice, '20.00', 'Food')

        rows = store.aggregate_sum(Expense, 'category', 'total_amount', user_id=alice.id)

        assert [r['group'] for r in rows] == ['Food', 'Travel']
        assert Decimal(str(rows[0]['total'])) == Decimal('30.00')
        assert rows[0]['count'] == 2
        assert Decimal(str(rows[1]['total'])) == Decimal('25.50')
        assert rows[1]['count'] == 1


class TestFailures:

    def test_driver_error_becomes_internal_failure(self, store):
        error = OperationalError('SELECT 1', {}, Exception('database is locked'))
        with patch.object(store.session, 'execute', side_effect=error):
            with pytest.raises(InternalFailure) as exc:
                store.ping()

        assert exc.value.status_code == 503

    def test_ping(self, store):
        store.ping()
