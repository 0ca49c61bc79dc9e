"""Account lookups for user-facing endpoints."""

from __future__ import annotations

from typing import Optional

from zento.core.users.models import User
from zento.extensions import db


def get_user(user_id) -> Optional[User]:
    """Account behind a JWT identity; guests are not addressable here."""
    try:
        user = db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None
    if user is None or user.is_guest:
        return None
    return user
