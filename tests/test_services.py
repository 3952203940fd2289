"""
Unit tests for the identity, ledger and settings services.
"""
import pytest
from decimal import Decimal

from models import User, Settings, Expense
from services.errors import InvalidInput, NotFound, Conflict, NotAuthenticated
from services.identity_service import IdentityService
from services.ledger_service import LedgerService, split_equally, clean_split_fields
from services.settings_service import SettingsService


pytestmark = pytest.mark.unit


class TestIdentityService:

    def test_sign_in_normalizes_email(self, store):
        user, couple = IdentityService(store).sign_in({
            'external_uid': 'uid-1',
            'email': ' New.User@Example.COM ',
        })

        assert user.email == 'new.user@example.com'
        assert user.name == 'new.user'
        assert user.auth_provider == 'firebase'
        assert couple is None

    def test_unsupported_provider(self, store):
        with pytest.raises(InvalidInput):
            IdentityService(store).sign_in({
                'external_uid': 'uid-1',
                'email': 'x@example.com',
                'auth_provider': 'myspace',
            })

    def test_sign_in_does_not_steal_email(self, store, alice):
        with pytest.raises(Conflict):
            IdentityService(store).sign_in({'external_uid': 'uid-other', 'email': alice.email})

        assert len(store.find_many(User)) == 1

    def test_get_user(self, store, alice):
        service = IdentityService(store)

        assert service.get_user(alice.id).id == alice.id
        with pytest.raises(NotAuthenticated):
            service.get_user(None)
        with pytest.raises(NotFound):
            service.get_user('0' * 32)

    @pytest.mark.parametrize('handle', ['alice@okaxis', 'a.b-c@paytm'])
    def test_valid_payment_handles(self, store, alice, handle):
        assert IdentityService(store).update_payment_handle(alice.id, handle).upi_id == handle

    @pytest.mark.parametrize('handle', ['alice', '@bank', 'a@', 123])
    def test_invalid_payment_handles(self, store, alice, handle):
        with pytest.raises(InvalidInput):
            IdentityService(store).update_payment_handle(alice.id, handle)


class TestSplitFields:

    @pytest.mark.parametrize('total,expected', [
        ('100.00', ('50.00', '50.00')),
        ('100.01', ('50.01', '50.00')),
        ('0.01', ('0.01', '0.00')),
        ('33.33', ('16.67', '16.66')),
    ])
    def test_split_equally(self, total, expected):
        person1, person2 = split_equally(Decimal(total))

        assert (person1, person2) == (Decimal(expected[0]), Decimal(expected[1]))
        assert person1 + person2 == Decimal(total)

    def test_split_type_defaults_to_equal(self):
        fields = clean_split_fields({'total_amount': 10, 'category': 'Food', 'paid_by': 'person2'})

        assert fields['split_type'] == 'equal'
        assert fields['person1_share'] == Decimal('5.00')

    def test_equal_split_allows_one_cent_difference(self):
        fields = clean_split_fields({
            'total_amount': '0.03', 'category': 'Food', 'paid_by': 'person1',
            'person1_share': '0.02', 'person2_share': '0.01',
        })

        assert fields['person2_share'] == Decimal('0.01')


class TestLedgerService:

    def test_expense_visible_after_partner_joins_only_if_tagged(self, store, couple_service, alice, bob):
        ledger = LedgerService(store)
        solo = ledger.create_expense(alice.id, {
            'description': 'Before couple', 'total_amount': 10, 'category': 'Food', 'paid_by': 'person1',
        })
        _, invitation, _ = couple_service.invite(alice.id, bob.email)
        couple_service.accept(bob.id, invitation.token)
        shared = ledger.create_expense(alice.id, {
            'description': 'After couple', 'total_amount': 10, 'category': 'Food', 'paid_by': 'person1',
        })

        seen_by_bob = {e.id for e in ledger.list_expenses(bob.id)}

        assert shared.id in seen_by_bob
        assert solo.id not in seen_by_bob

    def test_comment_on_unknown_expense(self, store, alice):
        with pytest.raises(NotFound):
            LedgerService(store).add_comment(alice.id, '9' * 32, 'hello')

    def test_update_keeps_comments(self, store, alice):
        ledger = LedgerService(store)
        expense = ledger.create_expense(alice.id, {
            'description': 'Lunch', 'total_amount': 12, 'category': 'Food', 'paid_by': 'person1',
        })
        ledger.add_comment(alice.id, expense.id, 'tasty')

        ledger.update_expense(alice.id, expense.id, {
            'description': 'Lunch out', 'total_amount': 14, 'category': 'Food', 'paid_by': 'person1',
        })

        stored = store.find_one(Expense, id=expense.id)
        assert stored.description == 'Lunch out'
        assert [c['text'] for c in stored.comments] == ['tasty']


class TestSettingsService:

    def test_link_couple_keeps_preferences(self, store, alice):
        service = SettingsService(store)
        service.update_settings(alice.id, {'theme': 'dark', 'notifications': False})

        service.link_couple(alice.id, 'f' * 32)

        settings = store.find_one(Settings, user_id=alice.id)
        assert settings.couple_id == 'f' * 32
        assert settings.theme == 'dark'
        assert settings.notifications is False

    def test_link_couple_creates_defaults(self, store, alice):
        SettingsService(store).link_couple(alice.id, 'f' * 32)

        settings = store.find_one(Settings, user_id=alice.id)
        assert settings.theme == 'system'
        assert settings.currency == 'USD'
        assert settings.notifications is True
