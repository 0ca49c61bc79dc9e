"""JSON response helpers shared by API controllers."""

from __future__ import annotations

from typing import Optional

from flask import jsonify
from pydantic import ValidationError

from zento.core.identity.cookies import owner_response
from zento.core.identity.resolver import ResolvedOwner

ERROR_STATUS = {
    "unauthorized": 401,
    "not_found": 404,
    "duplicate_name": 409,
}


def jsonable_errors(exc: ValidationError) -> list[dict]:
    errors = exc.errors()
    for err in errors:
        err.pop("url", None)
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
    return errors


def error_response(code: str, owner: Optional[ResolvedOwner] = None, status: Optional[int] = None):
    body = jsonify({"ok": False, "error": code})
    status = status or ERROR_STATUS.get(code, 400)
    if owner is None:
        return body, status
    return owner_response(owner, body, status)


def validation_error_response(exc: ValidationError):
    return jsonify({"ok": False, "error": "bad_request", "details": jsonable_errors(exc)}), 400
