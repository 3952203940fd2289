"""
Identity service.

Maps a sign-in assertion from the external identity provider onto a local user
record. The assertion is validated structurally only; its signature is not
checked here.
"""
import logging
import re
from datetime import datetime

from models import User
from services.couple_service import CoupleService
from services.errors import InvalidInput, NotFound, Conflict, NotAuthenticated
from utils import is_valid_email

logger = logging.getLogger(__name__)

AUTH_PROVIDERS = ('firebase', 'google', 'email', 'apple')

# UPI virtual payment address, e.g. "name@bank"
UPI_REGEX = re.compile(r'^[a-zA-Z0-9._-]{2,256}@[a-zA-Z][a-zA-Z0-9.-]{1,63}$')


class IdentityService:
    """Service for sign-in and the signed-in user's profile."""

    def __init__(self, store, couple_service=None):
        self.store = store
        self.couples = couple_service or CoupleService(store)

    @staticmethod
    def _clean_assertion(assertion):
        if not isinstance(assertion, dict):
            raise InvalidInput('Request body required')

        external_uid = (assertion.get('external_uid') or '').strip()
        if not external_uid:
            raise InvalidInput('Identity provider UID is required')

        email = (assertion.get('email') or '').strip().lower()
        if not email:
            raise InvalidInput('Email is required')
        if not is_valid_email(email):
            raise InvalidInput('Invalid email address')

        provider = (assertion.get('auth_provider') or 'firebase').strip().lower()
        if provider not in AUTH_PROVIDERS:
            raise InvalidInput(f'Unsupported auth provider: {provider}')

        return {
            'external_uid': external_uid,
            'email': email,
            'name': (assertion.get('name') or '').strip()[:100] or email.split('@')[0],
            'auth_provider': provider,
            'profile_picture': assertion.get('profile_picture') or None,
            'email_verified': bool(assertion.get('email_verified', False)),
        }

    def sign_in(self, assertion, invitation_token=None):
        """
        Create or refresh the local user for an identity assertion.

        Args:
            assertion (dict): external_uid, email, name, auth_provider,
                              profile_picture, email_verified
            invitation_token (str, optional): Invitation to accept on the way in

        Returns:
            tuple: (User, Couple or None) where the couple is set only when
                   an invitation was accepted during this sign-in

        Raises:
            InvalidInput: Missing or malformed assertion fields
            Conflict: Another account already holds the email
        """
        fields = self._clean_assertion(assertion)
        now = datetime.utcnow()

        user = self.store.find_one(User, external_uid=fields['external_uid'])
        if user is None:
            holder = self.store.find_one(User, email=fields['email'])
            if holder is not None:
                raise Conflict('An account with this email already exists')

            user = self.store.insert_one(User(
                created_at=now,
                updated_at=now,
                **fields
            ))
            logger.info(f"Created user {user.id} for {fields['email']}")
        else:
            self.store.update_one(
                User,
                {
                    'name': fields['name'],
                    'profile_picture': fields['profile_picture'],
                    'auth_provider': fields['auth_provider'],
                    'email_verified': fields['email_verified'],
                    'updated_at': now,
                },
                id=user.id,
            )
            user = self.store.find_one(User, id=user.id)

        couple = None
        if invitation_token:
            couple = self.couples.auto_accept(user.id, invitation_token)

        return user, couple

    def get_user(self, user_id):
        """
        Get the signed-in user.

        Raises:
            NotAuthenticated: No user ID in the session
            NotFound: The user no longer exists
        """
        if not user_id:
            raise NotAuthenticated()

        user = self.store.find_one(User, id=user_id)
        if user is None:
            raise NotFound('User not found')
        return user

    def update_payment_handle(self, user_id, upi_id):
        """
        Set or clear the user's UPI payment handle.

        An empty value clears the handle.

        Raises:
            InvalidInput: Malformed handle
            NotFound: The user no longer exists
        """
        if upi_id is not None and not isinstance(upi_id, str):
            raise InvalidInput('UPI ID must be a string')

        upi_id = (upi_id or '').strip() or None
        if upi_id and not UPI_REGEX.match(upi_id):
            raise InvalidInput('Invalid UPI ID (expected name@bank)')

        user = self.get_user(user_id)
        self.store.update_one(User, {'upi_id': upi_id}, id=user.id)

        logger.info(f"User {user.id} {'updated' if upi_id else 'cleared'} payment handle")
        return self.store.find_one(User, id=user.id)
