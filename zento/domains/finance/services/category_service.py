"""Category management for any owner (guest or account)."""

from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from zento.domains.finance.models.finance_models import Category, Transaction
from zento.extensions import db

logger = logging.getLogger(__name__)


def list_categories(owner_id: Optional[int]) -> List[Category]:
    if owner_id is None:
        return []
    return Category.query.filter_by(user_id=owner_id).order_by(Category.sort_order, Category.name).all()


def get_category(owner_id: int, category_id: int) -> Optional[Category]:
    return Category.query.filter_by(id=category_id, user_id=owner_id).first()


def next_sort_order(owner_id: int) -> int:
    current = db.session.query(func.max(Category.sort_order)).filter(Category.user_id == owner_id).scalar()
    return (current or 0) + 1


def create_category(owner_id: int, name: str) -> Category:
    category = Category(user_id=owner_id, name=name, sort_order=next_sort_order(owner_id))
    db.session.add(category)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("duplicate_name")
    return category


def update_category(owner_id: int, category_id: int, changes: dict) -> Category:
    if not changes:
        raise ValueError("no_changes")
    category = get_category(owner_id, category_id)
    if category is None:
        raise ValueError("not_found")
    if changes.get("name") is not None:
        category.name = changes["name"]
    if changes.get("sort_order") is not None:
        category.sort_order = changes["sort_order"]
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise ValueError("duplicate_name")
    return category


def reorder_categories(owner_id: int, order: List[int]) -> List[Category]:
    """Apply ``order`` as the new display order; every id must belong to the owner."""
    ids: List[int] = []
    for category_id in order:
        if category_id not in ids:
            ids.append(category_id)
    found = Category.query.filter(Category.user_id == owner_id, Category.id.in_(ids)).all()
    if len(found) != len(ids):
        raise ValueError("invalid_ids")
    by_id = {category.id: category for category in found}
    for position, category_id in enumerate(ids):
        by_id[category_id].sort_order = position
    db.session.commit()
    return list_categories(owner_id)


def delete_category(owner_id: int, category_id: int, reassign_to: Optional[int] = None) -> int:
    """Delete a category; its transactions move to ``reassign_to`` or become uncategorized.

    Returns the number of transactions touched.
    """
    category = get_category(owner_id, category_id)
    if category is None:
        raise ValueError("not_found")
    if reassign_to is not None:
        if reassign_to == category_id or get_category(owner_id, reassign_to) is None:
            raise ValueError("invalid_reassign_target")

    moved = Transaction.query.filter_by(user_id=owner_id, category_id=category_id).update(
        {"category_id": reassign_to}, synchronize_session=False
    )
    db.session.delete(category)
    db.session.commit()
    logger.info(
        "deleted category %s for user %s (%s transactions -> %s)",
        category_id,
        owner_id,
        moved,
        reassign_to or "uncategorized",
    )
    return moved


def category_belongs_to(owner_id: int, category_id: Optional[int]) -> bool:
    return category_id is None or get_category(owner_id, category_id) is not None
