"""Typed schemas for user IO."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from zento.core.users.preferences import get_preferences

if TYPE_CHECKING:
    from zento.core.users.models import User


class DefaultPaymentSourceRequest(BaseModel):
    """``payment_source_id`` of None (or empty form value) means "all accounts"."""

    payment_source_id: Optional[int] = None

    @field_validator("payment_source_id", mode="before")
    @classmethod
    def blank_is_none(cls, v):
        if isinstance(v, str) and v.strip() in ("", "all"):
            return None
        return v


class UserResponse(BaseModel):
    # Response should not re-validate persisted emails (demo domains, etc.)
    id: int
    email: Optional[str] = None
    full_name: Optional[str] = None
    timezone: Optional[str] = None
    is_active: bool
    is_guest: bool
    preferences: Dict[str, Any] = {}

    model_config = ConfigDict(from_attributes=True)


def serialize_user(user: "User") -> "UserResponse":
    """Build a UserResponse with merged preferences."""
    return UserResponse(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        timezone=user.timezone,
        is_active=user.is_active,
        is_guest=user.is_guest,
        preferences=get_preferences(user),
    )
