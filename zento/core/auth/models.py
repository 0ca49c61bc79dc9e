"""Refresh token ledger."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from zento.core.users.models import TimestampMixin
from zento.extensions import db


class RefreshToken(db.Model, TimestampMixin):
    """One row per issued refresh token; a set ``revoked_at`` blocks its jti.

    Guests never get a row: only accounts are issued JWTs.
    """

    __tablename__ = "refresh_token"

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    jti: Mapped[str] = mapped_column(db.String(64), nullable=False, unique=True)
    expires_at: Mapped[datetime | None] = mapped_column(nullable=True)
    revoked_at: Mapped[datetime | None] = mapped_column(nullable=True)

    @property
    def revoked(self) -> bool:
        return self.revoked_at is not None
