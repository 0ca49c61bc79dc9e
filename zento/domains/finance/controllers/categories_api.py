"""Category endpoints. Guests may list and create; editing needs an account."""

from __future__ import annotations

from flask import Blueprint, jsonify, request
from flask_jwt_extended import get_jwt_identity
from pydantic import ValidationError

from zento.core.identity.cookies import owner_response
from zento.core.identity.dependencies import resolve_owner
from zento.core.utils.decorators import account_required
from zento.core.utils.responses import error_response, validation_error_response
from zento.domains.finance.schemas.finance_schemas import (
    CategoryCreate,
    CategoryDelete,
    CategoryReorder,
    CategoryResponse,
    CategoryUpdate,
)
from zento.domains.finance.services.category_service import (
    create_category,
    delete_category,
    list_categories,
    reorder_categories,
    update_category,
)
from zento.extensions import limiter

categories_api_bp = Blueprint("finance_categories_api", __name__)


def _dump(category) -> dict:
    return CategoryResponse.model_validate(category).model_dump()


@categories_api_bp.get("")
def list_categories_endpoint():
    # No owner yet is not an error: the UI just shows an empty list.
    owner = resolve_owner()
    return jsonify({"ok": True, "categories": [_dump(c) for c in list_categories(owner.owner_id)]})


@categories_api_bp.post("")
@limiter.limit("60/minute")
def create_category_endpoint():
    try:
        data = CategoryCreate.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)

    owner = resolve_owner(write=True)
    try:
        category = create_category(owner.owner_id, data.name)
    except ValueError as exc:
        return error_response(str(exc), owner)
    return owner_response(owner, jsonify({"ok": True, "category": _dump(category)}), 201)


@categories_api_bp.patch("")
@account_required
def update_categories_endpoint():
    """
    Rename / reposition one category (``?id=``) or reorder all of them.

    Single:  PATCH ?id=12  {"name": "Food", "sort_order": 3}
    Bulk:    PATCH         {"order": [12, 9, 4]}
    """
    user_id = int(get_jwt_identity())
    payload = request.get_json(silent=True) or {}
    category_id = request.args.get("id", type=int)

    if category_id is None:
        if request.args.get("id"):
            return error_response("invalid_id")
        try:
            data = CategoryReorder.model_validate(payload)
        except ValidationError as exc:
            return validation_error_response(exc)
        try:
            categories = reorder_categories(user_id, data.order)
        except ValueError as exc:
            return error_response(str(exc))
        return jsonify({"ok": True, "categories": [_dump(c) for c in categories]})

    try:
        data = CategoryUpdate.model_validate(payload)
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        category = update_category(user_id, category_id, data.model_dump(exclude_none=True))
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "category": _dump(category)})


@categories_api_bp.delete("")
@account_required
def delete_category_endpoint():
    user_id = int(get_jwt_identity())
    category_id = request.args.get("id", type=int)
    if category_id is None:
        return error_response("invalid_id")
    try:
        data = CategoryDelete.model_validate(request.get_json(silent=True) or {})
    except ValidationError as exc:
        return validation_error_response(exc)
    try:
        moved = delete_category(user_id, category_id, data.reassign_to_category_id)
    except ValueError as exc:
        return error_response(str(exc))
    return jsonify({"ok": True, "transactions_moved": moved})
