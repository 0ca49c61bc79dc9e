"""Transaction recording and queries."""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import func

from zento.domains.finance.models.finance_models import Transaction
from zento.domains.finance.services.category_service import category_belongs_to
from zento.domains.finance.services.payment_source_service import payment_source_belongs_to
from zento.extensions import db

UNCATEGORIZED = "uncategorized"


def _month_range(month: str) -> tuple[date, date]:
    year, mon = (int(part) for part in month.split("-"))
    start = date(year, mon, 1)
    end = date(year + 1, 1, 1) if mon == 12 else date(year, mon + 1, 1)
    return start, end


def _direction(amount_cents: int, explicit_type: Optional[str]) -> tuple[str, int]:
    """Canonical (type, positive amount) for a signed amount."""
    if explicit_type:
        return explicit_type, abs(amount_cents)
    return ("EXPENSE" if amount_cents < 0 else "INCOME"), abs(amount_cents)


def list_transactions(
    owner_id: int,
    month: Optional[str] = None,
    q: Optional[str] = None,
    category_filter: Optional[str] = None,
) -> List[Transaction]:
    query = Transaction.query.filter_by(user_id=owner_id)
    if month:
        start, end = _month_range(month)
        query = query.filter(Transaction.occurred_on >= start, Transaction.occurred_on < end)
    if q:
        query = query.filter(func.lower(Transaction.description).contains(q.lower(), autoescape=True))
    if category_filter:
        if category_filter == UNCATEGORIZED:
            query = query.filter(Transaction.category_id.is_(None))
        else:
            try:
                query = query.filter(Transaction.category_id == int(category_filter))
            except ValueError:
                raise ValueError("invalid_category_filter")
    return query.order_by(Transaction.occurred_on.desc(), Transaction.id.desc()).all()


def get_transaction(owner_id: int, transaction_id: int) -> Optional[Transaction]:
    return Transaction.query.filter_by(id=transaction_id, user_id=owner_id).first()


def _check_references(owner_id: int, category_id: Optional[int], payment_source_id: Optional[int]) -> None:
    if not category_belongs_to(owner_id, category_id):
        raise ValueError("invalid_category")
    if not payment_source_belongs_to(owner_id, payment_source_id):
        raise ValueError("invalid_payment_source")


def create_transaction(
    owner_id: int,
    occurred_on: date,
    amount_cents: int,
    description: str,
    type: Optional[str] = None,
    notes: Optional[str] = None,
    flags: Optional[List[str]] = None,
    category_id: Optional[int] = None,
    payment_source_id: Optional[int] = None,
) -> Transaction:
    _check_references(owner_id, category_id, payment_source_id)
    tx_type, amount = _direction(amount_cents, type)
    txn = Transaction(
        user_id=owner_id,
        occurred_on=occurred_on,
        amount_cents=amount,
        type=tx_type,
        description=description,
        notes=notes,
        flags=list(flags or []),
        category_id=category_id,
        payment_source_id=payment_source_id,
    )
    db.session.add(txn)
    db.session.commit()
    return txn


def update_transaction(owner_id: int, transaction_id: int, changes: dict) -> Transaction:
    if not changes:
        raise ValueError("no_changes")
    txn = get_transaction(owner_id, transaction_id)
    if txn is None:
        raise ValueError("not_found")

    if "category_id" in changes and not category_belongs_to(owner_id, changes["category_id"]):
        raise ValueError("invalid_category")
    if "payment_source_id" in changes and not payment_source_belongs_to(owner_id, changes["payment_source_id"]):
        raise ValueError("invalid_payment_source")
    if "description" in changes and not changes["description"]:
        raise ValueError("validation_error")
    if "occurred_on" in changes and changes["occurred_on"] is None:
        raise ValueError("validation_error")

    if "description" in changes:
        txn.description = changes["description"]
    if "occurred_on" in changes:
        txn.occurred_on = changes["occurred_on"]
    if changes.get("type"):
        txn.type = changes["type"]
    if changes.get("amount_cents") is not None:
        # A signed amount without an explicit type re-derives the direction.
        txn.type, txn.amount_cents = _direction(changes["amount_cents"], changes.get("type"))
    if "notes" in changes:
        txn.notes = changes["notes"]
    if "flags" in changes:
        txn.flags = list(changes["flags"] or [])
    if "category_id" in changes:
        txn.category_id = changes["category_id"]
    if "payment_source_id" in changes:
        txn.payment_source_id = changes["payment_source_id"]

    db.session.commit()
    return txn


def delete_transaction(owner_id: int, transaction_id: int) -> None:
    txn = get_transaction(owner_id, transaction_id)
    if txn is None:
        raise ValueError("not_found")
    db.session.delete(txn)
    db.session.commit()
