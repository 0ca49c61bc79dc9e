"""Request-scoped wiring for the guest identity components."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Optional

from flask import current_app, g
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError

from zento.core.identity.constants import ANON_SESSION_TTL_DAYS
from zento.core.identity.cookies import read_guest_token
from zento.core.identity.merge_service import AuthenticatedPrincipal, GuestMergeEngine
from zento.core.identity.resolver import IdentityResolver, ResolvedOwner
from zento.core.identity.session_store import AnonymousSessionStore, SessionNotFound
from zento.extensions import db

logger = logging.getLogger(__name__)

TOUCH_EXECUTOR_KEY = "anon_touch_executor"


def get_session_store() -> AnonymousSessionStore:
    executor = current_app.extensions.get(TOUCH_EXECUTOR_KEY)
    ttl_days = int(current_app.config.get("ANON_SESSION_TTL_DAYS", ANON_SESSION_TTL_DAYS))
    return AnonymousSessionStore(
        db.session,
        engine=db.engine if executor is not None else None,
        executor=executor,
        ttl=timedelta(days=ttl_days),
    )


def get_identity_resolver() -> IdentityResolver:
    return IdentityResolver(get_session_store(), db.session)


def get_merge_engine() -> GuestMergeEngine:
    return GuestMergeEngine(get_session_store(), db.session)


def current_principal() -> Optional[AuthenticatedPrincipal]:
    """Authenticated identity carried by the request's JWT, if any and valid."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError):
        return None
    identity = get_jwt_identity()
    if identity is None:
        return None
    try:
        identity_id = int(identity)
    except (TypeError, ValueError):
        return None
    return AuthenticatedPrincipal(identity_id=identity_id, email=(get_jwt() or {}).get("email"))


def resolve_owner(write: bool = False) -> ResolvedOwner:
    """Owner for the current request; provisions a guest at most once per request."""
    cached: Optional[ResolvedOwner] = g.get("_resolved_owner")
    if cached is not None and (cached.has_owner or not write):
        return cached
    principal = current_principal()
    resolved = get_identity_resolver().resolve(
        authenticated_id=principal.identity_id if principal else None,
        bearer_token=read_guest_token(),
        write=write,
    )
    g._resolved_owner = resolved
    return resolved


def jwt_form_csrf() -> Optional[str]:
    """Double-submit value HTML forms echo back when the access token rides in a cookie."""
    if current_principal() is None:
        return None
    return (get_jwt() or {}).get("csrf")


def pending_guest_owner() -> Optional[int]:
    """Guest id behind the device cookie when it differs from the signed-in account."""
    principal = current_principal()
    token = read_guest_token()
    if principal is None or not token:
        return None
    try:
        record = get_session_store().lookup(token)
    except SessionNotFound:
        return None
    if record.user_id == principal.identity_id:
        return None
    return record.user_id


__all__ = [
    "current_principal",
    "get_identity_resolver",
    "get_merge_engine",
    "get_session_store",
    "jwt_form_csrf",
    "pending_guest_owner",
    "resolve_owner",
]
