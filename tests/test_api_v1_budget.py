"""
Tests for API v1 budget endpoints.

Tests:
- GET /api/v1/budgets - List budgets with status
- POST /api/v1/budgets - Create or update budget
- PUT /api/v1/budgets/<id> - Update budget
- DELETE /api/v1/budgets/<id> - Delete budget
"""
import pytest
from datetime import datetime
from decimal import Decimal

from models import Expense, Budget


pytestmark = pytest.mark.api


BUDGET = {'category': 'Food', 'amount': 200, 'month': 3, 'year': 2025}


def add_spending(store, user, couple, amount, category, when):
    amount = Decimal(amount)
    store.insert_one(Expense(
        user_id=user.id,
        couple_id=couple.id,
        description='Spending',
        total_amount=amount,
        category=category,
        paid_by='person1',
        split_type='equal',
        person1_share=amount / 2,
        person2_share=amount / 2,
        created_at=when,
        updated_at=when,
    ))


class TestUpsertBudget:

    def test_create_then_update(self, client, store, active_couple, alice, bob, auth_headers):
        created = client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice))

        assert created.status_code == 201
        budget = created.get_json()['budget']
        assert budget['couple_id'] == active_couple.id
        assert budget['alert_percent'] == 80

        # Same (category, month, year) from the partner updates instead of duplicating
        updated = client.post('/api/v1/budgets', json=dict(BUDGET, amount=250, alert_percent=90),
                              headers=auth_headers(bob))

        assert updated.status_code == 200
        assert updated.get_json()['budget']['id'] == budget['id']
        assert updated.get_json()['budget']['amount'] == 250.0
        assert len(store.find_many(Budget)) == 1

    def test_put_by_id(self, client, active_couple, alice, auth_headers):
        budget_id = client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice)).get_json()['budget']['id']

        response = client.put(f'/api/v1/budgets/{budget_id}', json=dict(BUDGET, amount=120),
                              headers=auth_headers(alice))

        assert response.status_code == 200
        assert response.get_json()['budget']['amount'] == 120.0

    def test_put_unknown_id(self, client, active_couple, alice, auth_headers):
        response = client.put(f'/api/v1/budgets/{"1" * 32}', json=BUDGET, headers=auth_headers(alice))
        assert response.status_code == 404

    def test_requires_couple(self, client, alice, auth_headers):
        response = client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice))

        assert response.status_code == 400
        assert response.get_json()['error'] == 'You must be in a couple to set budgets'

    @pytest.mark.parametrize('overrides', [
        {'amount': -1},
        {'month': 13},
        {'year': 0},
        {'year': 10000},
        {'category': ''},
        {'alert_percent': 150},
    ])
    def test_validation(self, client, active_couple, alice, auth_headers, overrides):
        response = client.post('/api/v1/budgets', json=dict(BUDGET, **overrides), headers=auth_headers(alice))
        assert response.status_code == 400


class TestListBudgets:

    def test_status_from_couple_spending(self, client, store, active_couple, alice, bob, auth_headers):
        client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice))
        client.post('/api/v1/budgets', json=dict(BUDGET, category='Fun', amount=0), headers=auth_headers(alice))
        add_spending(store, alice, active_couple, '100.00', 'Food', datetime(2025, 3, 5))
        add_spending(store, bob, active_couple, '70.00', 'Food', datetime(2025, 3, 25))
        add_spending(store, bob, active_couple, '500.00', 'Food', datetime(2025, 4, 1))

        response = client.get('/api/v1/budgets?month=3&year=2025', headers=auth_headers(bob))

        budgets = {b['category']: b for b in response.get_json()['budgets']}
        assert budgets['Food']['spent'] == 170.0
        assert budgets['Food']['remaining'] == 30.0
        assert budgets['Food']['percent_used'] == 85.0
        assert budgets['Food']['alert_reached'] is True
        assert budgets['Fun']['percent_used'] == 0
        assert budgets['Fun']['alert_reached'] is False

    def test_without_couple_is_empty(self, client, alice, auth_headers):
        response = client.get('/api/v1/budgets', headers=auth_headers(alice))

        assert response.status_code == 200
        assert response.get_json()['budgets'] == []

    @pytest.mark.parametrize('query', ['month=99&year=abc', 'month=99&year=10000'])
    def test_invalid_period_defaults_to_current_month(self, client, active_couple, alice, auth_headers, query):
        now = datetime.utcnow()
        client.post('/api/v1/budgets', json=dict(BUDGET, month=now.month, year=now.year),
                    headers=auth_headers(alice))

        response = client.get(f'/api/v1/budgets?{query}', headers=auth_headers(alice))

        assert response.status_code == 200
        assert len(response.get_json()['budgets']) == 1


class TestDeleteBudget:

    def test_delete(self, client, store, active_couple, alice, auth_headers):
        budget_id = client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice)).get_json()['budget']['id']

        response = client.delete(f'/api/v1/budgets/{budget_id}', headers=auth_headers(alice))

        assert response.status_code == 200
        assert store.find_many(Budget) == []

    def test_other_couples_budget(self, client, store, active_couple, alice, make_user, auth_headers):
        budget_id = client.post('/api/v1/budgets', json=BUDGET, headers=auth_headers(alice)).get_json()['budget']['id']

        from services.couple_service import CoupleService
        dave = make_user(email='dave@example.com')
        erin = make_user(email='erin@example.com')
        service = CoupleService(store)
        _, invitation, _ = service.invite(dave.id, erin.email)
        service.accept(erin.id, invitation.token)

        response = client.delete(f'/api/v1/budgets/{budget_id}', headers=auth_headers(dave))

        assert response.status_code == 404
        assert len(store.find_many(Budget)) == 1

    def test_malformed_id(self, client, active_couple, alice, auth_headers):
        response = client.delete('/api/v1/budgets/123', headers=auth_headers(alice))
        assert response.status_code == 400
