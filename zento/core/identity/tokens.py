"""Opaque bearer tokens for guest sessions."""

from __future__ import annotations

import secrets
from hashlib import sha256
from typing import Optional

from zento.core.identity.constants import TOKEN_BYTES


def issue() -> tuple[str, str]:
    """Return a fresh ``(plaintext, verification_hash)`` pair.

    The plaintext is url-safe base64 and goes to the client as the cookie
    value; only the hash is persisted.
    """
    raw = secrets.token_urlsafe(TOKEN_BYTES)
    return raw, _hash_token(raw)


def verify(plaintext: Optional[str]) -> Optional[str]:
    """Recompute the lookup hash for a presented token; ``None`` means no token."""
    if not isinstance(plaintext, str) or not plaintext:
        return None
    return _hash_token(plaintext)


def _hash_token(raw: str) -> str:
    return sha256(raw.encode("utf-8")).hexdigest()


__all__ = ["issue", "verify"]
