"""Anonymous (guest) session model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from zento.extensions import db


class AnonymousSession(db.Model):
    """Device-bound credential linking a bearer token to a guest identity.

    Only the SHA-256 hash of the token is stored; the plaintext leaves the
    server exactly once, in the Set-Cookie header of the provisioning response.
    """

    __tablename__ = "anon_session"
    __table_args__ = (
        db.UniqueConstraint("token_hash", name="uq_anon_session_token_hash"),
        db.Index("ix_anon_session_user", "user_id"),
        db.Index("ix_anon_session_expires_at", "expires_at"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    token_hash: Mapped[str] = mapped_column(db.String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    last_seen_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now
