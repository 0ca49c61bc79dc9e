"""Auth domain event names."""

from __future__ import annotations

# Payload: SignInEvent(principal=AuthenticatedPrincipal(identity_id, email?))
AUTH_USER_SIGNED_IN = "auth.user.signed_in"

__all__ = ["AUTH_USER_SIGNED_IN"]
