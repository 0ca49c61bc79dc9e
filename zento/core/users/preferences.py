"""Default and stored preferences for users."""

from __future__ import annotations

from typing import Any, Dict, Optional

from zento.core.users.models import User, UserPreference
from zento.extensions import db

DEFAULT_PAYMENT_SOURCE_KEY = "default_payment_source_id"

DEFAULT_PREFS: Dict[str, Any] = {
    DEFAULT_PAYMENT_SOURCE_KEY: {"payment_source_id": None},
}


def get_preferences(user: User) -> Dict[str, Any]:
    """Merge stored preferences with defaults."""
    prefs = DEFAULT_PREFS.copy()
    for pref in user.preferences:
        prefs[pref.key] = pref.value
    return prefs


def _stored(user_id: int, key: str) -> Optional[UserPreference]:
    return UserPreference.query.filter_by(user_id=user_id, key=key).first()


def get_preference(user_id: int, key: str) -> Any:
    pref = _stored(user_id, key)
    return pref.value if pref is not None else DEFAULT_PREFS.get(key)


def set_preference(user_id: int, key: str, value: Any, commit: bool = True) -> None:
    existing = _stored(user_id, key)
    if existing:
        existing.value = value
    else:
        db.session.add(UserPreference(user_id=user_id, key=key, value=value))
    if commit:
        db.session.commit()


def clear_preference(user_id: int, key: str, commit: bool = True) -> None:
    UserPreference.query.filter_by(user_id=user_id, key=key).delete(synchronize_session=False)
    if commit:
        db.session.commit()
