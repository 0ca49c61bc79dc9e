"""User controllers (preferences)."""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, redirect, request
from flask_jwt_extended import get_jwt_identity
from pydantic import ValidationError

from zento.core.users.schemas import DefaultPaymentSourceRequest, serialize_user
from zento.core.users.services import get_user
from zento.core.utils.decorators import account_required
from zento.core.utils.responses import error_response, validation_error_response
from zento.domains.finance.services.payment_source_service import (
    get_default_payment_source_id,
    set_default_payment_source,
)

user_api_bp = Blueprint("user_api", __name__)


def _is_form_post() -> bool:
    return not request.is_json and bool(request.form)


@user_api_bp.get("/me")
@account_required
def api_me():
    user = get_user(get_jwt_identity())
    if not user:
        return error_response("not_found")
    return jsonify({"ok": True, "user": serialize_user(user).model_dump()})


@user_api_bp.get("/preferences/default-payment-source")
@account_required
def get_default_payment_source():
    user_id = int(get_jwt_identity())
    return jsonify({"ok": True, "payment_source_id": get_default_payment_source_id(user_id)})


@user_api_bp.post("/preferences/default-payment-source")
@account_required
def update_default_payment_source():
    user_id = int(get_jwt_identity())
    form_post = _is_form_post()
    payload = request.form.to_dict() if form_post else (request.get_json(silent=True) or {})
    try:
        data = DefaultPaymentSourceRequest.model_validate(payload)
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        source_id = set_default_payment_source(user_id, data.payment_source_id)
    except ValueError as exc:
        return error_response(str(exc))
    if form_post:
        return redirect(current_app.config["MAIN_VIEW_PATH"], code=303)
    return jsonify({"ok": True, "payment_source_id": source_id})
