"""Finance HTML pages."""

from __future__ import annotations

from flask import Blueprint, render_template, request

from zento.core.identity.dependencies import jwt_form_csrf, pending_guest_owner, resolve_owner
from zento.domains.finance.services.category_service import list_categories
from zento.domains.finance.services.payment_source_service import (
    get_default_payment_source_id,
    list_payment_sources,
)
from zento.domains.finance.services.transaction_service import list_transactions

finance_pages_bp = Blueprint("finance_pages", __name__)


@finance_pages_bp.get("/transactions")
def transactions_page():
    owner = resolve_owner()
    transactions = list_transactions(owner.owner_id) if owner.has_owner else []
    default_source_id = get_default_payment_source_id(owner.owner_id) if owner.is_authenticated else None
    if default_source_id is not None:
        transactions = [t for t in transactions if t.payment_source_id == default_source_id]
    return render_template(
        "finance/transactions.html",
        transactions=transactions,
        categories=list_categories(owner.owner_id),
        payment_sources=list_payment_sources(owner.owner_id),
        default_payment_source_id=default_source_id,
        is_authenticated=owner.is_authenticated,
        has_pending_guest=owner.is_authenticated and pending_guest_owner() is not None,
        guest_outcome=request.args.get("guest"),
        csrf_token=jwt_form_csrf(),
    )
