"""Fold a guest identity's records into an authenticated identity."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from zento.core.identity.constants import (
    MERGE_STATUS_DISCARDED,
    MERGE_STATUS_FAILED,
    MERGE_STATUS_MERGED,
    MERGE_STATUS_NOOP,
    MERGE_STATUS_SKIPPED,
)
from zento.core.identity.session_store import AnonymousSessionStore, SessionNotFound
from zento.core.users.models import User
from zento.domains.finance.models.finance_models import Category, Transaction
from zento.extensions import db

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedPrincipal:
    """The only facts the merge needs from a sign-in: who, and optionally their email."""

    identity_id: int
    email: Optional[str] = None


@dataclass
class MergeResult:
    status: str
    guest_id: Optional[int] = None
    target_id: Optional[int] = None
    categories_moved: int = 0
    categories_collapsed: int = 0
    transactions_moved: int = 0
    sessions_removed: int = 0
    guest_deleted: bool = False

    @property
    def merged(self) -> bool:
        return self.status == MERGE_STATUS_MERGED

    @property
    def failed(self) -> bool:
        return self.status in (MERGE_STATUS_FAILED, MERGE_STATUS_SKIPPED)


class MergeTargetMissing(LookupError):
    """The authenticated identity is not visible to the merge transaction."""


class GuestMergeEngine:
    """Atomic guest -> account reconciliation.

    Every call runs in exactly one transaction on ``session``: it commits when the
    merge (or no-op) completes and rolls back on any failure, so a failed merge
    leaves both identities as they were and can simply be retried.
    """

    def __init__(self, store: AnonymousSessionStore, session=None):
        self.store = store
        self._session = session or db.session

    def merge(self, principal: AuthenticatedPrincipal, bearer_token: Optional[str]) -> MergeResult:
        try:
            result = self._merge(principal, bearer_token)
            self._session.commit()
        except MergeTargetMissing:
            self._session.rollback()
            logger.warning(
                "guest merge skipped: account not found (id=%s, email=%s)",
                principal.identity_id,
                principal.email or "n/a",
            )
            return MergeResult(status=MERGE_STATUS_SKIPPED, target_id=principal.identity_id)
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("guest merge rolled back for account %s", principal.identity_id)
            return MergeResult(status=MERGE_STATUS_FAILED, target_id=principal.identity_id)

        if result.merged:
            logger.info(
                "merged guest %s into account %s (categories moved=%s collapsed=%s, transactions=%s)",
                result.guest_id,
                result.target_id,
                result.categories_moved,
                result.categories_collapsed,
                result.transactions_moved,
            )
        return result

    def discard(self, principal: AuthenticatedPrincipal, bearer_token: Optional[str]) -> MergeResult:
        """Retire the guest's sessions without moving any of its data."""
        try:
            try:
                record = self.store.lookup(bearer_token, for_update=True)
            except SessionNotFound:
                self._session.commit()
                return MergeResult(status=MERGE_STATUS_NOOP, target_id=principal.identity_id)
            guest_id = record.user_id
            if guest_id == principal.identity_id:
                self._session.commit()
                return MergeResult(status=MERGE_STATUS_NOOP, guest_id=guest_id, target_id=guest_id)
            removed = self.store.delete_all_for(guest_id)
            self._session.commit()
        except SQLAlchemyError:
            self._session.rollback()
            logger.exception("guest discard rolled back for account %s", principal.identity_id)
            return MergeResult(status=MERGE_STATUS_FAILED, target_id=principal.identity_id)

        logger.info("discarded guest %s for account %s", guest_id, principal.identity_id)
        return MergeResult(
            status=MERGE_STATUS_DISCARDED,
            guest_id=guest_id,
            target_id=principal.identity_id,
            sessions_removed=removed,
        )

    def preview(self, bearer_token: Optional[str]) -> Optional[dict]:
        """Counts of what an import would bring over, or None when there is no live guest."""
        try:
            record = self.store.lookup(bearer_token)
        except SessionNotFound:
            return None
        guest_id = record.user_id
        categories = self._session.scalar(
            select(func.count(Category.id)).where(Category.user_id == guest_id)
        )
        transactions = self._session.scalar(
            select(func.count(Transaction.id)).where(Transaction.user_id == guest_id)
        )
        return {"guest_id": guest_id, "categories": categories or 0, "transactions": transactions or 0}

    # --- steps ---

    def _merge(self, principal: AuthenticatedPrincipal, bearer_token: Optional[str]) -> MergeResult:
        try:
            guest_session = self.store.lookup(bearer_token, for_update=True)
        except SessionNotFound:
            return MergeResult(status=MERGE_STATUS_NOOP, target_id=principal.identity_id)

        guest_id = guest_session.user_id
        if guest_id == principal.identity_id:
            return MergeResult(status=MERGE_STATUS_NOOP, guest_id=guest_id, target_id=guest_id)

        target = self._load_target(principal)
        if target.id == guest_id:
            return MergeResult(status=MERGE_STATUS_NOOP, guest_id=guest_id, target_id=target.id)

        result = MergeResult(status=MERGE_STATUS_MERGED, guest_id=guest_id, target_id=target.id)
        self._reconcile_categories(guest_id, target.id, result)

        # Categories first: the sweep below must not strand rows on a category deleted above.
        moved = self._session.execute(
            update(Transaction)
            .where(Transaction.user_id == guest_id)
            .values(user_id=target.id)
            .execution_options(synchronize_session=False)
        )
        result.transactions_moved = moved.rowcount or 0

        result.sessions_removed = self.store.delete_all_for(guest_id)
        deleted = self._session.execute(
            delete(User)
            .where(User.id == guest_id, User.is_guest.is_(True))
            .execution_options(synchronize_session=False)
        )
        result.guest_deleted = bool(deleted.rowcount)
        return result

    def _load_target(self, principal: AuthenticatedPrincipal) -> User:
        target = self._session.scalars(
            select(User).where(User.id == principal.identity_id).with_for_update()
        ).first()
        if target is None and principal.email:
            target = self._session.scalars(
                select(User)
                .where(func.lower(User.email) == principal.email.strip().lower())
                .with_for_update()
            ).first()
        if target is None:
            raise MergeTargetMissing(principal.identity_id)
        return target

    def _reconcile_categories(self, guest_id: int, target_id: int, result: MergeResult) -> None:
        guest_categories = self._session.scalars(
            select(Category).where(Category.user_id == guest_id).order_by(Category.sort_order, Category.id)
        ).all()
        target_categories = self._session.scalars(
            select(Category).where(Category.user_id == target_id)
        ).all()
        by_name = {category.name.lower(): category.id for category in target_categories}

        for category in guest_categories:
            key = category.name.lower()
            existing_id = by_name.get(key)
            if existing_id is not None:
                self._session.execute(
                    update(Transaction)
                    .where(Transaction.user_id == guest_id, Transaction.category_id == category.id)
                    .values(category_id=existing_id)
                    .execution_options(synchronize_session=False)
                )
                self._session.delete(category)
                result.categories_collapsed += 1
            else:
                category.user_id = target_id
                by_name[key] = category.id
                result.categories_moved += 1
        self._session.flush()


__all__ = [
    "AuthenticatedPrincipal",
    "GuestMergeEngine",
    "MergeResult",
    "MergeTargetMissing",
]
