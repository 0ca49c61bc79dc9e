"""Transaction endpoints for the resolved owner (guest or account)."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from pydantic import ValidationError

from zento.core.identity.cookies import owner_response
from zento.core.identity.dependencies import resolve_owner
from zento.core.utils.responses import error_response, validation_error_response
from zento.domains.finance.schemas.finance_schemas import (
    TransactionCreate,
    TransactionQuery,
    TransactionUpdate,
)
from zento.domains.finance.services.transaction_service import (
    create_transaction,
    delete_transaction,
    list_transactions,
    update_transaction,
)
from zento.extensions import limiter

transactions_api_bp = Blueprint("finance_transactions_api", __name__)


def _arg(name: str):
    value = (request.args.get(name) or "").strip()
    return value or None


@transactions_api_bp.get("")
def list_transactions_endpoint():
    owner = resolve_owner()
    if not owner.has_owner:
        return error_response("unauthorized")
    try:
        query = TransactionQuery.model_validate(
            {
                "month": _arg("month"),
                "q": _arg("q"),
                "category_id": _arg("category_id"),
            }
        )
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        transactions = list_transactions(owner.owner_id, query.month, query.q, query.category_id)
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "transactions": [t.to_dict() for t in transactions]})


@transactions_api_bp.post("")
@limiter.limit("120/minute")
def create_transaction_endpoint():
    try:
        data = TransactionCreate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    owner = resolve_owner(write=True)
    try:
        txn = create_transaction(owner.owner_id, **data.model_dump())
    except ValueError as exc:
        return error_response(str(exc), owner)
    return owner_response(owner, jsonify({"ok": True, "transaction": txn.to_dict()}), 201)


@transactions_api_bp.patch("")
def update_transaction_endpoint():
    owner = resolve_owner()
    if not owner.has_owner:
        return error_response("unauthorized")
    transaction_id = request.args.get("id", type=int)
    if transaction_id is None:
        return error_response("invalid_id")
    try:
        data = TransactionUpdate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        txn = update_transaction(owner.owner_id, transaction_id, data.changes())
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "transaction": txn.to_dict()})


@transactions_api_bp.delete("")
def delete_transaction_endpoint():
    owner = resolve_owner()
    if not owner.has_owner:
        return error_response("unauthorized")
    transaction_id = request.args.get("id", type=int)
    if transaction_id is None:
        return error_response("invalid_id")
    try:
        delete_transaction(owner.owner_id, transaction_id)
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True})
