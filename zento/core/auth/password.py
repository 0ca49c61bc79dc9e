"""bcrypt password hashing for accounts."""

from __future__ import annotations

from typing import Optional

from zento.extensions import bcrypt


def hash_password(plain_password: str) -> str:
    return bcrypt.generate_password_hash(plain_password).decode("utf-8")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    # Guests have no hash, so they can never authenticate.
    if not hashed_password:
        return False
    try:
        return bcrypt.check_password_hash(hashed_password, plain_password)
    except ValueError:
        # Corrupt or non-bcrypt hash stored for this account.
        return False
