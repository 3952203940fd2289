"""
Database models for the shared expense tracker.

Every record is keyed by an immutable 32-character hex identifier assigned at
creation. References between records use the same identifier type.
"""
import uuid
from datetime import datetime

from extensions import db


# Couple status values
COUPLE_PENDING = 'pending'
COUPLE_ACTIVE = 'active'
COUPLE_INACTIVE = 'inactive'

# Invitation status values (pending -> accepted | rejected | expired)
INVITATION_PENDING = 'pending'
INVITATION_ACCEPTED = 'accepted'
INVITATION_REJECTED = 'rejected'
INVITATION_EXPIRED = 'expired'

# Ledger tags
PERSON_TAGS = ('person1', 'person2')
SPLIT_TYPES = ('equal', 'ratio', 'exact')

# Settings defaults
DEFAULT_THEME = 'system'
DEFAULT_CURRENCY = 'USD'
DEFAULT_NOTIFICATIONS = True

DEFAULT_ALERT_PERCENT = 80


def generate_id():
    """Generate a new record identifier."""
    return uuid.uuid4().hex


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    """User signed in through the external identity provider."""

    __tablename__ = 'users'

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False, default='')
    auth_provider = db.Column(db.String(30), nullable=False, default='firebase')
    external_uid = db.Column(db.String(128), unique=True, nullable=False, index=True)
    email_verified = db.Column(db.Boolean, default=False, nullable=False)
    profile_picture = db.Column(db.String(500), nullable=True)
    upi_id = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert user to dictionary for JSON."""
        return {
            'id': self.id,
            'email': self.email,
            'name': self.name,
            'auth_provider': self.auth_provider,
            'email_verified': self.email_verified,
            'profile_picture': self.profile_picture,
            'upi_id': self.upi_id,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<User {self.id}: {self.email}>'


class Couple(db.Model):
    """Pairing of two users for shared finances."""

    __tablename__ = 'couples'

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    user1_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False, index=True)
    user2_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=True, index=True)
    status = db.Column(db.String(20), default=COUPLE_PENDING, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def partner_id(self, user_id):
        """Return the other member's ID (None while the invitation is pending)."""
        return self.user2_id if self.user1_id == user_id else self.user1_id

    def to_dict(self):
        """Convert couple to dictionary for JSON."""
        return {
            'id': self.id,
            'user1_id': self.user1_id,
            'user2_id': self.user2_id,
            'status': self.status,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Couple {self.id}: {self.status}>'


class Invitation(db.Model):
    """Token-bearing offer to join a couple."""

    __tablename__ = 'invitations'

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    # Plain reference: a rejected invitation outlives its deleted couple
    couple_id = db.Column(db.String(32), nullable=False, index=True)
    inviter_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False)
    invitee_email = db.Column(db.String(120), nullable=False, index=True)
    token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    status = db.Column(db.String(20), default=INVITATION_PENDING, nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def is_expired(self, now=None):
        """Check whether the invitation is past its expiry."""
        return (now or datetime.utcnow()) > self.expires_at

    def to_dict(self, include_token=False):
        """Convert invitation to dictionary for JSON."""
        data = {
            'id': self.id,
            'couple_id': self.couple_id,
            'inviter_id': self.inviter_id,
            'invitee_email': self.invitee_email,
            'status': self.status,
            'expires_at': _iso(self.expires_at),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }
        if include_token:
            data['token'] = self.token
        return data

    def __repr__(self):
        return f'<Invitation {self.id}: {self.invitee_email} ({self.status})>'


class Expense(db.Model):
    """Shared expense entry."""

    __tablename__ = 'expenses'
    __table_args__ = (
        db.Index('idx_expenses_user_created', 'user_id', 'created_at'),
        db.Index('idx_expenses_couple_created', 'couple_id', 'created_at'),
    )

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False)
    couple_id = db.Column(db.String(32), db.ForeignKey('couples.id'), nullable=True)
    description = db.Column(db.String(200), nullable=False)
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    paid_by = db.Column(db.String(10), nullable=False)  # 'person1' or 'person2'
    split_type = db.Column(db.String(10), nullable=False)  # 'equal', 'ratio', 'exact'
    person1_share = db.Column(db.Numeric(12, 2), nullable=False)
    person2_share = db.Column(db.Numeric(12, 2), nullable=False)
    notes = db.Column(db.Text, nullable=True)
    comments = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert expense to dictionary for JSON serialization."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'couple_id': self.couple_id,
            'description': self.description,
            'total_amount': float(self.total_amount),
            'category': self.category,
            'paid_by': self.paid_by,
            'split_type': self.split_type,
            'person1_share': float(self.person1_share),
            'person2_share': float(self.person2_share),
            'notes': self.notes,
            'comments': list(self.comments or []),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Expense {self.id}: {self.description} {self.total_amount}>'


class Transfer(db.Model):
    """Money moved directly from one partner to the other."""

    __tablename__ = 'transfers'
    __table_args__ = (
        db.Index('idx_transfers_user_created', 'user_id', 'created_at'),
        db.Index('idx_transfers_couple_created', 'couple_id', 'created_at'),
    )

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False)
    couple_id = db.Column(db.String(32), db.ForeignKey('couples.id'), nullable=True)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    from_user = db.Column(db.String(10), nullable=False)
    to_user = db.Column(db.String(10), nullable=False)
    description = db.Column(db.String(200), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert transfer to dictionary for JSON."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'couple_id': self.couple_id,
            'amount': float(self.amount),
            'from_user': self.from_user,
            'to_user': self.to_user,
            'description': self.description,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Transfer {self.id}: {self.from_user} -> {self.to_user} {self.amount}>'


class Settings(db.Model):
    """Per-user preferences, optionally linked to the user's couple."""

    __tablename__ = 'settings'

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), unique=True, nullable=False, index=True)
    couple_id = db.Column(db.String(32), db.ForeignKey('couples.id'), nullable=True)
    theme = db.Column(db.String(20), default=DEFAULT_THEME, nullable=False)
    currency = db.Column(db.String(3), default=DEFAULT_CURRENCY, nullable=False)
    notifications = db.Column(db.Boolean, default=DEFAULT_NOTIFICATIONS, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    @staticmethod
    def defaults():
        """Preferences returned for users who never saved any."""
        return {
            'theme': DEFAULT_THEME,
            'currency': DEFAULT_CURRENCY,
            'notifications': DEFAULT_NOTIFICATIONS,
        }

    def to_dict(self):
        """Convert settings to dictionary for JSON."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'couple_id': self.couple_id,
            'theme': self.theme,
            'currency': self.currency,
            'notifications': self.notifications,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Settings {self.user_id}: {self.theme}/{self.currency}>'


class Budget(db.Model):
    """Monthly spending limit for one category of a couple."""

    __tablename__ = 'budgets'
    __table_args__ = (
        db.UniqueConstraint('couple_id', 'category', 'month', 'year', name='uq_budget_period'),
    )

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    couple_id = db.Column(db.String(32), db.ForeignKey('couples.id'), nullable=False, index=True)
    category = db.Column(db.String(50), nullable=False)
    amount = db.Column(db.Numeric(12, 2), nullable=False)
    month = db.Column(db.Integer, nullable=False)
    year = db.Column(db.Integer, nullable=False)
    alert_percent = db.Column(db.Float, default=DEFAULT_ALERT_PERCENT, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert budget to dictionary for JSON."""
        return {
            'id': self.id,
            'couple_id': self.couple_id,
            'category': self.category,
            'amount': float(self.amount),
            'month': self.month,
            'year': self.year,
            'alert_percent': self.alert_percent,
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<Budget {self.category} {self.year}-{self.month:02d}: {self.amount}>'


class ExpenseTemplate(db.Model):
    """Reusable expense skeleton."""

    __tablename__ = 'expense_templates'

    id = db.Column(db.String(32), primary_key=True, default=generate_id)
    user_id = db.Column(db.String(32), db.ForeignKey('users.id'), nullable=False, index=True)
    couple_id = db.Column(db.String(32), db.ForeignKey('couples.id'), nullable=True, index=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(200), nullable=False, default='')
    total_amount = db.Column(db.Numeric(12, 2), nullable=False)
    category = db.Column(db.String(50), nullable=False)
    paid_by = db.Column(db.String(10), nullable=False)
    split_type = db.Column(db.String(10), nullable=False)
    person1_share = db.Column(db.Numeric(12, 2), nullable=False)
    person2_share = db.Column(db.Numeric(12, 2), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self):
        """Convert template to dictionary for JSON."""
        return {
            'id': self.id,
            'user_id': self.user_id,
            'couple_id': self.couple_id,
            'name': self.name,
            'description': self.description,
            'total_amount': float(self.total_amount),
            'category': self.category,
            'paid_by': self.paid_by,
            'split_type': self.split_type,
            'person1_share': float(self.person1_share),
            'person2_share': float(self.person2_share),
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at),
        }

    def __repr__(self):
        return f'<ExpenseTemplate {self.id}: {self.name}>'
