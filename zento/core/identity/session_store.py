"""Persistence for guest bearer sessions."""

from __future__ import annotations

import logging
from concurrent.futures import Executor
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from zento.core.identity import tokens
from zento.core.identity.constants import ANON_SESSION_TTL_DAYS
from zento.core.identity.models import AnonymousSession
from zento.extensions import db

logger = logging.getLogger(__name__)


class SessionNotFound(LookupError):
    """No live guest session matches the presented token."""


class AnonymousSessionStore:
    """Create, resolve and retire guest sessions.

    ``session`` is the unit of work all reads and writes go through. ``engine``
    and ``executor`` are only used for the best-effort ``last_seen_at`` touch:
    when both are given the touch runs on the executor with its own connection,
    otherwise it is applied inside a savepoint of ``session``.
    """

    def __init__(
        self,
        session=None,
        *,
        engine=None,
        executor: Optional[Executor] = None,
        ttl: Optional[timedelta] = timedelta(days=ANON_SESSION_TTL_DAYS),
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self._session = session or db.session
        self._engine = engine
        self._executor = executor
        self._clock = clock
        self.ttl = ttl

    def create(self, owner_id: int, ttl: Optional[timedelta] = None) -> tuple[str, AnonymousSession]:
        """Persist a session for ``owner_id``; the plaintext is only returned here."""
        plaintext, token_hash = tokens.issue()
        now = self._clock()
        lifetime = ttl if ttl is not None else self.ttl
        record = AnonymousSession(
            user_id=owner_id,
            token_hash=token_hash,
            created_at=now,
            last_seen_at=now,
            expires_at=now + lifetime if lifetime else None,
        )
        self._session.add(record)
        self._session.flush()
        return plaintext, record

    def lookup(self, plaintext: Optional[str], *, for_update: bool = False) -> AnonymousSession:
        """Return the live session row for a token or raise ``SessionNotFound``."""
        token_hash = tokens.verify(plaintext)
        if token_hash is None:
            raise SessionNotFound("no_token")
        stmt = select(AnonymousSession).where(AnonymousSession.token_hash == token_hash)
        if for_update:
            stmt = stmt.with_for_update()
        record = self._session.scalars(stmt).first()
        if record is None:
            raise SessionNotFound("unknown_token")
        if record.is_expired(self._clock()):
            raise SessionNotFound("expired")
        return record

    def resolve(self, plaintext: Optional[str]) -> int:
        """Map a presented token to its owner id, touching ``last_seen_at``."""
        record = self.lookup(plaintext)
        self._touch(record.id, self._clock())
        return record.user_id

    def delete_all_for(self, owner_id: int) -> int:
        """Remove every session owned by ``owner_id``; returns the number removed."""
        result = self._session.execute(
            delete(AnonymousSession)
            .where(AnonymousSession.user_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    # --- last_seen_at ---

    def _touch(self, session_id: int, seen_at: datetime) -> None:
        if self._executor is not None and self._engine is not None:
            try:
                self._executor.submit(touch_last_seen, self._engine, session_id, seen_at)
            except RuntimeError:
                # Executor already shut down (interpreter exit); drop the touch.
                logger.warning("anon session touch not scheduled for session %s", session_id)
            return
        try:
            with self._session.begin_nested():
                self._session.execute(_touch_statement(session_id, seen_at))
        except SQLAlchemyError:
            logger.warning("anon session touch failed for session %s", session_id, exc_info=True)


def touch_last_seen(engine, session_id: int, seen_at: datetime) -> None:
    """Detached ``last_seen_at`` update; failures end up in the log only."""
    try:
        with engine.begin() as conn:
            conn.execute(_touch_statement(session_id, seen_at))
    except Exception:
        logger.warning("anon session touch failed for session %s", session_id, exc_info=True)


def _touch_statement(session_id: int, seen_at: datetime):
    return (
        update(AnonymousSession)
        .where(AnonymousSession.id == session_id)
        .values(last_seen_at=seen_at)
        .execution_options(synchronize_session=False)
    )


__all__ = ["AnonymousSessionStore", "SessionNotFound", "touch_last_seen"]
