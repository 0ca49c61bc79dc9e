"""Auth HTTP controllers (API only)."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request
from flask_jwt_extended import (
    get_jwt,
    get_jwt_identity,
    jwt_required,
    set_access_cookies,
    set_refresh_cookies,
    unset_jwt_cookies,
)
from pydantic import ValidationError

from zento.core.auth.auth_service import (
    authenticate_user,
    issue_tokens,
    refresh_access_token,
    register_user,
    revoke_refresh_token,
)
from zento.core.auth.schemas import LoginRequest, RegisterRequest
from zento.core.events.event_bus import get_event_bus
from zento.core.events.event_models import SignInEvent
from zento.core.identity.merge_service import AuthenticatedPrincipal
from zento.core.users.schemas import serialize_user
from zento.core.users.services import get_user
from zento.core.utils.responses import error_response, validation_error_response
from zento.extensions import limiter

auth_bp = Blueprint("auth_api", __name__)


def _signed_in_response(user, status: int = 200):
    tokens = issue_tokens(user)
    resp = jsonify({"ok": True, **tokens, "user": serialize_user(user).model_dump()})
    if "cookies" in current_app.config.get("JWT_TOKEN_LOCATION", []):
        set_access_cookies(resp, tokens["access_token"])
        set_refresh_cookies(resp, tokens["refresh_token"])
    # Exactly one sign-in event per successful authentication; subscribers must not fail it.
    get_event_bus().publish(SignInEvent(principal=AuthenticatedPrincipal(identity_id=user.id, email=user.email)))
    return resp, status


@auth_bp.post("/register")
@limiter.limit("5/minute")
def register():
    payload = request.get_json(silent=True) or {}
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        user = register_user(data)
    except ValueError as exc:
        code = str(exc)
        if code == "email_already_exists":
            return error_response(code, status=409)
        return error_response("registration_failed")
    return _signed_in_response(user, 201)


@auth_bp.post("/login")
@limiter.limit("10/minute")
def login():
    payload = request.get_json(silent=True) or {}
    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_error_response(exc)
    user = authenticate_user(data.email, data.password)
    if not user:
        return error_response("invalid_credentials", status=401)
    return _signed_in_response(user)


@auth_bp.post("/refresh")
@jwt_required(refresh=True)
@limiter.limit("30/minute")
def refresh():
    # Refresh is not a sign-in: no event, no merge.
    new_access = refresh_access_token(str(get_jwt_identity()), get_jwt())
    resp = jsonify({"ok": True, "access_token": new_access})
    if "cookies" in current_app.config.get("JWT_TOKEN_LOCATION", []):
        set_access_cookies(resp, new_access)
    return resp


@auth_bp.post("/logout")
@jwt_required(refresh=True)
def logout():
    jti = get_jwt().get("jti")
    if jti:
        revoke_refresh_token(jti)
    resp = jsonify({"ok": True})
    unset_jwt_cookies(resp)
    return resp


@auth_bp.get("/me")
@jwt_required()
def me():
    user = get_user(get_jwt_identity())
    if not user:
        return error_response("not_found")
    return jsonify({"ok": True, "user": serialize_user(user).model_dump()})
