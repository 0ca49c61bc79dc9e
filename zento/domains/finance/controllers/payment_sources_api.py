"""Payment source endpoints. Listing works for any owner; changes need an account."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity
from pydantic import ValidationError

from zento.core.identity.dependencies import resolve_owner
from zento.core.utils.decorators import account_required
from zento.core.utils.responses import error_response, validation_error_response
from zento.domains.finance.schemas.finance_schemas import (
    PaymentSourceCreate,
    PaymentSourceResponse,
    PaymentSourceUpdate,
)
from zento.domains.finance.services.payment_source_service import (
    create_payment_source,
    delete_payment_source,
    get_default_payment_source_id,
    list_payment_sources,
    update_payment_source,
)

payment_sources_api_bp = Blueprint("finance_payment_sources_api", __name__)


def _dump(source) -> dict:
    return PaymentSourceResponse.model_validate(source).model_dump()


@payment_sources_api_bp.get("")
def list_payment_sources_endpoint():
    owner = resolve_owner()
    default_id = get_default_payment_source_id(owner.owner_id) if owner.is_authenticated else None
    return jsonify(
        {
            "ok": True,
            "payment_sources": [_dump(s) for s in list_payment_sources(owner.owner_id)],
            "default_payment_source_id": default_id,
        }
    )


@payment_sources_api_bp.post("")
@account_required
def create_payment_source_endpoint():
    try:
        data = PaymentSourceCreate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        source = create_payment_source(int(get_jwt_identity()), data.name, data.type)
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "payment_source": _dump(source)}), 201


@payment_sources_api_bp.patch("/<int:source_id>")
@account_required
def update_payment_source_endpoint(source_id: int):
    try:
        data = PaymentSourceUpdate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        source = update_payment_source(int(get_jwt_identity()), source_id, data.changes())
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "payment_source": _dump(source)})


@payment_sources_api_bp.delete("/<int:source_id>")
@account_required
def delete_payment_source_endpoint(source_id: int):
    try:
        delete_payment_source(int(get_jwt_identity()), source_id)
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True})
