"""Payment sources (bank accounts, cards, cash) and the default-source preference."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from zento.core.users.preferences import (
    DEFAULT_PAYMENT_SOURCE_KEY,
    clear_preference,
    get_preference,
    set_preference,
)
from zento.domains.finance.models.finance_models import PaymentSource, Transaction
from zento.extensions import db

logger = logging.getLogger(__name__)


def list_payment_sources(owner_id: Optional[int]) -> List[PaymentSource]:
    if owner_id is None:
        return []
    return PaymentSource.query.filter_by(user_id=owner_id).order_by(PaymentSource.name).all()


def get_payment_source(owner_id: int, source_id: int) -> Optional[PaymentSource]:
    return PaymentSource.query.filter_by(id=source_id, user_id=owner_id).first()


def payment_source_belongs_to(owner_id: int, source_id: Optional[int]) -> bool:
    return source_id is None or get_payment_source(owner_id, source_id) is not None


def create_payment_source(owner_id: int, name: str, source_type: str = "BANK") -> PaymentSource:
    source = PaymentSource(user_id=owner_id, name=name, type=source_type)
    db.session.add(source)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("duplicate_name")
    return source


def update_payment_source(owner_id: int, source_id: int, changes: dict) -> PaymentSource:
    if not changes:
        raise ValueError("no_changes")
    source = get_payment_source(owner_id, source_id)
    if source is None:
        raise ValueError("not_found")
    if changes.get("name") is not None:
        source.name = changes["name"]
    if changes.get("type") is not None:
        source.type = changes["type"]
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("duplicate_name")
    return source


def delete_payment_source(owner_id: int, source_id: int) -> None:
    """Delete a source, unassigning its transactions and clearing it as the default."""
    source = get_payment_source(owner_id, source_id)
    if source is None:
        raise ValueError("not_found")
    Transaction.query.filter_by(user_id=owner_id, payment_source_id=source_id).update(
        {"payment_source_id": None}, synchronize_session=False
    )
    if get_default_payment_source_id(owner_id) == source_id:
        clear_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY, commit=False)
    db.session.delete(source)
    db.session.commit()
    logger.info("deleted payment source %s for user %s", source_id, owner_id)


def get_default_payment_source_id(owner_id: int) -> Optional[int]:
    value = get_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY)
    source_id = value.get("payment_source_id") if value else None
    return int(source_id) if source_id is not None else None


def set_default_payment_source(owner_id: int, source_id: Optional[int]) -> Optional[int]:
    """Store the default source; ``None`` means "all accounts"."""
    if source_id is not None and get_payment_source(owner_id, source_id) is None:
        raise ValueError("not_found")
    set_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY, {"payment_source_id": source_id})
    return source_id
