"""Identity and preference models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column, relationship

from zento.extensions import db


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)


class User(db.Model, TimestampMixin):
    """Owner of financial data.

    A guest row is created lazily on the first anonymous write and has neither
    email nor password. It lives until a merge folds it into an account; a
    discarded guest simply stays behind with its records.
    """

    __tablename__ = "user"

    id: Mapped[int] = mapped_column(primary_key=True)
    is_guest: Mapped[bool] = mapped_column(default=False, nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(db.String(255), unique=True, nullable=True, index=True)
    password_hash: Mapped[str | None] = mapped_column(db.String(255), nullable=True)
    full_name: Mapped[str | None] = mapped_column(db.String(255))
    timezone: Mapped[str | None] = mapped_column(db.String(64))
    is_active: Mapped[bool] = mapped_column(default=True)

    preferences: Mapped[list["UserPreference"]] = relationship(
        "UserPreference", back_populates="user", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        kind = "guest" if self.is_guest else "account"
        return f"<User {self.id} {kind}>"


class UserPreference(db.Model, TimestampMixin):
    """Free-form JSON setting keyed per user (e.g. the default payment source)."""

    __tablename__ = "user_preference"
    __table_args__ = (db.UniqueConstraint("user_id", "key", name="uq_user_preference_user_key"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(db.ForeignKey("user.id", ondelete="CASCADE"), index=True)
    key: Mapped[str] = mapped_column(db.String(128), nullable=False)
    value: Mapped[dict] = mapped_column(db.JSON, nullable=False, default=dict)

    user: Mapped[User] = relationship("User", back_populates="preferences")
