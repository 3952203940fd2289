"""
Shared pytest fixtures for the shared expense tracker tests.
"""
import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)


# Centralized test user details
TEST_USERS = {
    'alice': {
        'email': 'alice@example.com',
        'name': 'Alice Smith',
        'external_uid': 'uid-alice',
    },
    'bob': {
        'email': 'bob@example.com',
        'name': 'Bob Johnson',
        'external_uid': 'uid-bob',
    },
    'carol': {
        'email': 'carol@example.com',
        'name': 'Carol Davis',
        'external_uid': 'uid-carol',
    },
}


# ============================================================================
# Flask App Fixtures
# ============================================================================

@pytest.fixture(scope='session')
def app():
    """Create Flask app for testing (in-memory SQLite)."""
    from app import create_app
    return create_app('testing')


@pytest.fixture
def db(app):
    """Fresh schema for every test, inside an app context."""
    from extensions import db as _db
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def store(db):
    """Store bound to the test session."""
    from store import Store
    return Store(db.session)


@pytest.fixture
def client(app, db):
    """Flask test client sharing the test's app context."""
    return app.test_client()


# ============================================================================
# Users and Sessions
# ============================================================================

@pytest.fixture
def make_user(store):
    """Factory creating users directly in the store."""
    from models import User

    def _make_user(key=None, email=None, name='Test User', external_uid=None):
        details = dict(TEST_USERS.get(key, {}))
        email = email or details.get('email')
        return store.insert_one(User(
            email=email,
            name=details.get('name', name),
            external_uid=external_uid or details.get('external_uid') or f'uid-{email}',
            auth_provider='firebase',
        ))

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user('alice')


@pytest.fixture
def bob(make_user):
    return make_user('bob')


@pytest.fixture
def carol(make_user):
    return make_user('carol')


@pytest.fixture
def auth_headers(db):
    """Factory returning Authorization headers for a user."""
    from api_decorators import generate_access_token

    def _auth_headers(user):
        return {'Authorization': f'Bearer {generate_access_token(user.id)}'}

    return _auth_headers


# ============================================================================
# Couples
# ============================================================================

@pytest.fixture
def couple_service(store):
    from services.couple_service import CoupleService
    return CoupleService(store)


@pytest.fixture
def active_couple(couple_service, alice, bob):
    """Alice (person1) invited Bob, and Bob accepted."""
    _, invitation, _ = couple_service.invite(alice.id, bob.email)
    couple, _ = couple_service.accept(bob.id, invitation.token)
    return couple
