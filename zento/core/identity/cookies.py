"""Bearer cookie helpers."""

from __future__ import annotations

from typing import Optional

from flask import current_app, make_response, request

from zento.core.identity.constants import ANON_COOKIE_NAME, ANON_SESSION_TTL_DAYS
from zento.core.identity.resolver import CookieDirective, ResolvedOwner


def cookie_name() -> str:
    return current_app.config.get("ANON_COOKIE_NAME", ANON_COOKIE_NAME)


def read_guest_token() -> Optional[str]:
    """Bearer token presented by the current request, if any."""
    return request.cookies.get(cookie_name()) or None


def set_guest_cookie(response, plaintext: str):
    max_age = int(current_app.config.get("ANON_SESSION_TTL_DAYS", ANON_SESSION_TTL_DAYS)) * 24 * 60 * 60
    response.set_cookie(
        cookie_name(),
        plaintext,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("ANON_COOKIE_SECURE", False)),
    )
    return response


def clear_guest_cookie(response):
    response.delete_cookie(
        cookie_name(),
        path="/",
        httponly=True,
        samesite="Lax",
        secure=bool(current_app.config.get("ANON_COOKIE_SECURE", False)),
    )
    return response


def apply_cookie_directive(response, directive: Optional[CookieDirective]):
    if directive is None:
        return response
    if directive.value is None:
        return clear_guest_cookie(response)
    return set_guest_cookie(response, directive.value)


def owner_response(owner: ResolvedOwner, body, status: int = 200):
    """Build a response and attach whatever cookie change resolution asked for."""
    response = make_response(body, status)
    return apply_cookie_directive(response, owner.cookie_directive)
