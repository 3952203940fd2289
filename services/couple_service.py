"""
Couple service.

Pairs two users through token-based invitations.

Couple:      pending -> active -> inactive   (pending couples are deleted on reject)
Invitation:  pending -> accepted | rejected | expired

Multi-record transitions run inside one store transaction and use
status-guarded updates ("... where status = 'pending'"), so two requests racing
on the same invitation cannot both succeed.
"""
import logging
import secrets
from datetime import datetime, timedelta

from sqlalchemy import or_

from models import (
    User, Couple, Invitation,
    COUPLE_PENDING, COUPLE_ACTIVE, COUPLE_INACTIVE,
    INVITATION_PENDING, INVITATION_ACCEPTED, INVITATION_REJECTED, INVITATION_EXPIRED,
)
from services.errors import (
    ServiceError, InvalidInput, Forbidden, NotFound, Conflict, Expired,
)
from services.lookups import find_active_couple
from services.settings_service import SettingsService
from utils import is_valid_email

logger = logging.getLogger(__name__)

INVITATION_EXPIRES = timedelta(days=7)


class CoupleService:
    """Service for the couple and invitation lifecycle."""

    def __init__(self, store, settings_service=None, send_invitation=None,
                 invitation_expires=INVITATION_EXPIRES):
        """
        Args:
            store (Store): The persistence adapter
            settings_service (SettingsService, optional): Used to link settings
                on acceptance; built from the store when omitted
            send_invitation (callable, optional): ``(invitation, inviter) -> bool``
                delivering the invitation; failures never abort the invite
            invitation_expires (timedelta): Invitation lifetime
        """
        self.store = store
        self.settings = settings_service or SettingsService(store)
        self.send_invitation = send_invitation
        self.invitation_expires = invitation_expires

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def _get_user(self, user_id):
        user = self.store.find_one(User, id=user_id)
        if not user:
            raise NotFound('User not found')
        return user

    def _get_invitation(self, token):
        if not token or not isinstance(token, str):
            raise InvalidInput('Invitation token is required')

        invitation = self.store.find_one(Invitation, token=token.strip())
        if not invitation:
            raise NotFound('Invitation not found')
        return invitation

    def get_current(self, user_id):
        """
        Get the user's couple with partner and pending invitation.

        The active couple wins; otherwise the most recent pending couple the
        user created is returned.

        Returns:
            dict or None: {'couple', 'partner', 'invitation'} model instances
                          (partner and invitation may be None)
        """
        couple = find_active_couple(self.store, user_id)
        if couple is None:
            pending = self.store.find_many(
                Couple,
                user1_id=user_id,
                status=COUPLE_PENDING,
                order_by=Couple.created_at.desc(),
            )
            couple = pending[0] if pending else None

        if couple is None:
            return None

        partner = None
        partner_id = couple.partner_id(user_id)
        if partner_id:
            partner = self.store.find_one(User, id=partner_id)

        invitation = self.store.find_one(
            Invitation, couple_id=couple.id, status=INVITATION_PENDING
        )

        return {'couple': couple, 'partner': partner, 'invitation': invitation}

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def invite(self, inviter_id, invitee_email):
        """
        Invite another registered user to form a couple.

        Creates a pending couple and its invitation. The two inserts form one
        saga step: if the invitation cannot be stored, the couple is deleted
        again before the error propagates.

        Args:
            inviter_id (str): The inviting user's ID
            invitee_email (str): Email of the user being invited

        Returns:
            tuple: (Couple, Invitation, email_sent)

        Raises:
            InvalidInput: Malformed email, or inviting yourself
            NotFound: No user has the invitee email
            Conflict: Either user already has an active couple, or a live
                      invitation to this email already exists
        """
        email = (invitee_email or '').strip().lower()
        if not email:
            raise InvalidInput('Invitee email is required')
        if not is_valid_email(email):
            raise InvalidInput('Invalid email address')

        inviter = self._get_user(inviter_id)

        if find_active_couple(self.store, inviter.id):
            raise Conflict('You already have an active couple. Please disconnect first.')

        invitee = self.store.find_one(User, email=email)
        if not invitee:
            raise NotFound('User with this email not found')

        if invitee.id == inviter.id:
            raise InvalidInput('You cannot invite yourself')

        if find_active_couple(self.store, invitee.id):
            raise Conflict('This user already has an active couple')

        now = datetime.utcnow()
        self._expire_stale_invitations(inviter.id, email, now)

        couple = self.store.insert_one(Couple(
            user1_id=inviter.id,
            status=COUPLE_PENDING,
            created_at=now,
            updated_at=now,
        ))

        try:
            invitation = self.store.insert_one(Invitation(
                couple_id=couple.id,
                inviter_id=inviter.id,
                invitee_email=email,
                token=secrets.token_hex(32),
                status=INVITATION_PENDING,
                expires_at=now + self.invitation_expires,
                created_at=now,
                updated_at=now,
            ))
        except ServiceError:
            logger.warning(f"Invitation insert failed; removing pending couple {couple.id}")
            self.store.delete_one(Couple, id=couple.id, status=COUPLE_PENDING)
            raise

        logger.info(f"User {inviter.id} invited {email} (couple {couple.id})")

        email_sent = False
        if self.send_invitation:
            try:
                email_sent = bool(self.send_invitation(invitation, inviter))
            except Exception as e:
                logger.warning(f"Failed to send invitation email to {email}: {e}")

        return couple, invitation, email_sent

    def _expire_stale_invitations(self, inviter_id, email, now):
        """Reject a duplicate live invitation; retire expired ones still pending."""
        existing = self.store.find_many(
            Invitation,
            inviter_id=inviter_id,
            invitee_email=email,
            status=INVITATION_PENDING,
        )
        for invitation in existing:
            if not invitation.is_expired(now):
                raise Conflict('An invitation has already been sent to this email')

        for invitation in existing:
            with self.store.transaction():
                self.store.update_one(
                    Invitation, {'status': INVITATION_EXPIRED},
                    id=invitation.id, status=INVITATION_PENDING,
                )
                self.store.delete_one(Couple, id=invitation.couple_id, status=COUPLE_PENDING)

    def accept(self, user_id, token):
        """
        Accept an invitation and activate the couple.

        Args:
            user_id (str): The accepting user's ID
            token (str): The invitation token

        Returns:
            tuple: (Couple, partner User)

        Raises:
            NotFound: Unknown token
            Expired: Invitation is past its expiry (it is marked expired)
            InvalidInput: Invitation already processed
            Forbidden: Invitation was sent to a different email
            Conflict: Either user already has an active couple, or the
                      invitation was processed concurrently
        """
        invitation = self._get_invitation(token)

        now = datetime.utcnow()
        if invitation.is_expired(now):
            self.store.update_one(
                Invitation, {'status': INVITATION_EXPIRED, 'updated_at': now},
                id=invitation.id, status=INVITATION_PENDING,
            )
            logger.info(f"Invitation {invitation.id} expired on acceptance attempt")
            raise Expired('Invitation has expired')

        if invitation.status != INVITATION_PENDING:
            raise InvalidInput('Invitation is no longer valid')

        user = self._get_user(user_id)
        if user.email.lower() != invitation.invitee_email.lower():
            raise Forbidden('This invitation is not for you')

        if find_active_couple(self.store, user.id):
            raise Conflict('You already have an active couple')

        if find_active_couple(self.store, invitation.inviter_id):
            raise Conflict('The inviter already has an active couple')

        with self.store.transaction():
            activated = self.store.update_one(
                Couple, {'user2_id': user.id, 'status': COUPLE_ACTIVE, 'updated_at': now},
                id=invitation.couple_id, status=COUPLE_PENDING,
            )
            if not activated:
                raise Conflict('Invitation is no longer valid')

            accepted = self.store.update_one(
                Invitation, {'status': INVITATION_ACCEPTED, 'updated_at': now},
                id=invitation.id, status=INVITATION_PENDING,
            )
            if not accepted:
                raise Conflict('Invitation is no longer valid')

            self.settings.link_couple(invitation.inviter_id, invitation.couple_id)
            self.settings.link_couple(user.id, invitation.couple_id)

        couple = self.store.find_one(Couple, id=invitation.couple_id)
        partner = self.store.find_one(User, id=couple.user1_id)

        logger.info(f"User {user.id} accepted invitation {invitation.id}; couple {couple.id} active")
        return couple, partner

    def reject(self, user_id, token):
        """
        Reject an invitation; the pending couple is deleted.

        Raises:
            NotFound: Unknown token
            Forbidden: Invitation was sent to a different email
            InvalidInput: Invitation already processed
            Conflict: Invitation was processed concurrently
        """
        invitation = self._get_invitation(token)

        user = self._get_user(user_id)
        if user.email.lower() != invitation.invitee_email.lower():
            raise Forbidden('This invitation is not for you')

        if invitation.status != INVITATION_PENDING:
            raise InvalidInput('Invitation is no longer valid')

        with self.store.transaction():
            rejected = self.store.update_one(
                Invitation, {'status': INVITATION_REJECTED},
                id=invitation.id, status=INVITATION_PENDING,
            )
            if not rejected:
                raise Conflict('Invitation is no longer valid')

            self.store.delete_one(Couple, id=invitation.couple_id, status=COUPLE_PENDING)

        logger.info(f"User {user.id} rejected invitation {invitation.id}")
        return invitation

    def disconnect(self, user_id):
        """
        Deactivate the user's active couple.

        Raises:
            NotFound: The user has no active couple
        """
        couple = find_active_couple(self.store, user_id)
        if couple is None:
            raise NotFound('No active couple found')

        with self.store.transaction():
            matched = self.store.update_one(
                Couple, {'status': COUPLE_INACTIVE},
                or_(Couple.user1_id == user_id, Couple.user2_id == user_id),
                id=couple.id, status=COUPLE_ACTIVE,
            )
            if not matched:
                raise NotFound('No active couple found')

            self.settings.unlink_couple(couple.id)

        logger.info(f"User {user_id} disconnected couple {couple.id}")
        return couple

    def expire_overdue_invitations(self, now=None):
        """
        Mark every overdue pending invitation expired and drop its pending couple.

        Returns:
            int: Number of invitations expired
        """
        now = now or datetime.utcnow()
        overdue = self.store.find_many(
            Invitation,
            Invitation.expires_at < now,
            status=INVITATION_PENDING,
        )

        expired = 0
        for invitation in overdue:
            with self.store.transaction():
                if self.store.update_one(
                    Invitation, {'status': INVITATION_EXPIRED},
                    id=invitation.id, status=INVITATION_PENDING,
                ):
                    self.store.delete_one(Couple, id=invitation.couple_id, status=COUPLE_PENDING)
                    expired += 1

        logger.info(f"Expired {expired} overdue invitations")
        return expired

    def auto_accept(self, user_id, token):
        """
        Accept an invitation presented at sign-in, skipping quietly.

        Returns:
            Couple or None: The activated couple, or None when the invitation
                            is missing, expired, addressed to someone else,
                            already processed, or either user is already in
                            a couple
        """
        try:
            couple, _ = self.accept(user_id, token)
        except (InvalidInput, NotFound, Expired, Forbidden, Conflict) as e:
            logger.warning(f"Skipped auto-accept for user {user_id}: {e.message}")
            return None
        return couple
