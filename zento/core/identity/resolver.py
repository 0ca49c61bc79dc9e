"""Decide which identity owns the data touched by the current request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from zento.core.identity.session_store import AnonymousSessionStore, SessionNotFound
from zento.core.users.models import User
from zento.extensions import db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CookieDirective:
    """Instruction for the response: set the bearer cookie, or clear it when ``value`` is None."""

    value: Optional[str]


@dataclass(frozen=True)
class ResolvedOwner:
    owner_id: Optional[int]
    is_authenticated: bool = False
    cookie_directive: Optional[CookieDirective] = None

    @property
    def has_owner(self) -> bool:
        return self.owner_id is not None


NO_OWNER = ResolvedOwner(owner_id=None)


class IdentityResolver:
    """Resolution order: authenticated identity, then bearer cookie, then (writes only) a new guest."""

    def __init__(self, store: AnonymousSessionStore, session=None):
        self.store = store
        self._session = session or db.session

    def resolve(
        self,
        *,
        authenticated_id: Optional[int],
        bearer_token: Optional[str],
        write: bool = False,
    ) -> ResolvedOwner:
        if authenticated_id is not None:
            return ResolvedOwner(owner_id=authenticated_id, is_authenticated=True)

        guest_id = self.guest_owner(bearer_token)
        if guest_id is not None:
            return ResolvedOwner(owner_id=guest_id)

        if not write:
            return NO_OWNER
        return self.provision_guest()

    def guest_owner(self, bearer_token: Optional[str]) -> Optional[int]:
        """Owner behind a bearer token, or None for absent, stale or tampered tokens."""
        if not bearer_token:
            return None
        try:
            return self.store.resolve(bearer_token)
        except SessionNotFound:
            return None
        except SQLAlchemyError:
            logger.warning("guest session lookup failed; treating request as anonymous", exc_info=True)
            self._session.rollback()
            return None

    def provision_guest(self) -> ResolvedOwner:
        """Create a guest identity plus its session and ask for the cookie to be set."""
        guest = User(is_guest=True)
        self._session.add(guest)
        self._session.flush()
        plaintext, _ = self.store.create(guest.id)
        # Commit now so the cookie handed to the client always points at a durable row.
        self._session.commit()
        logger.info("provisioned guest identity %s", guest.id)
        return ResolvedOwner(owner_id=guest.id, cookie_directive=CookieDirective(value=plaintext))


__all__ = ["CookieDirective", "IdentityResolver", "NO_OWNER", "ResolvedOwner"]
