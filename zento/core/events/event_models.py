"""In-process event envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from zento.core.auth.events import AUTH_USER_SIGNED_IN
from zento.core.identity.merge_service import AuthenticatedPrincipal


@dataclass(frozen=True)
class SignInEvent:
    """Published exactly once per successful sign-in; never on refresh or identity reads."""

    principal: AuthenticatedPrincipal
    occurred_at: datetime = field(default_factory=datetime.utcnow)
    event_type: str = AUTH_USER_SIGNED_IN
