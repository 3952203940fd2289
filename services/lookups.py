"""
Shared store lookups used across services.
"""
from sqlalchemy import or_

from models import Couple, COUPLE_ACTIVE


def find_active_couple(store, user_id):
    """
    Get the active couple a user belongs to, in either slot.

    Args:
        store (Store): The persistence adapter
        user_id (str): The user ID

    Returns:
        Couple or None
    """
    return store.find_one(
        Couple,
        or_(Couple.user1_id == user_id, Couple.user2_id == user_id),
        status=COUPLE_ACTIVE,
    )


def ledger_scope(model, user_id, couple=None):
    """Filter for records visible to a user: the couple's ledger, or their own when uncoupled."""
    if couple is None:
        return model.user_id == user_id
    return model.couple_id == couple.id
