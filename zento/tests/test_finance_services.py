from __future__ import annotations

from datetime import date

import pytest

from zento.core.auth.auth_service import find_account_by_email, is_token_revoked
from zento.core.users.preferences import (
    DEFAULT_PAYMENT_SOURCE_KEY,
    clear_preference,
    get_preference,
    set_preference,
)
from zento.domains.finance.models.finance_models import Transaction
from zento.domains.finance.services import category_service, payment_source_service, transaction_service
from zento.extensions import db

pytestmark = pytest.mark.integration


def test_category_listing_and_sort_order_are_per_owner(app, make_account, add_category):
    owner_id = make_account()
    other_id = make_account("other@example.com")
    add_category(other_id, "Zeta", sort_order=50)

    with app.app_context():
        first = category_service.create_category(owner_id, "Food")
        second = category_service.create_category(owner_id, "Rent")

        assert (first.sort_order, second.sort_order) == (1, 2)
        assert [c.name for c in category_service.list_categories(owner_id)] == ["Food", "Rent"]
        assert category_service.get_category(owner_id, first.id) is not None
        assert category_service.get_category(other_id, first.id) is None


def test_delete_category_reports_moved_transactions(app, make_account, add_category, add_transaction):
    owner_id = make_account()
    food = add_category(owner_id, "Food")
    groceries = add_category(owner_id, "Groceries")
    txn_ids = [add_transaction(owner_id, category_id=food) for _ in range(2)]

    with app.app_context():
        moved = category_service.delete_category(owner_id, food, reassign_to=groceries)
        db.session.expire_all()

        assert moved == 2
        assert {db.session.get(Transaction, t).category_id for t in txn_ids} == {groceries}


def test_transaction_filters_compose(app, make_account, add_category, add_transaction):
    owner_id = make_account()
    food = add_category(owner_id, "Food")
    add_transaction(owner_id, category_id=food, description="Bakery")
    add_transaction(owner_id, category_id=None, description="Bakery tip")

    with app.app_context():
        found = transaction_service.list_transactions(
            owner_id, month="2026-01", q="bakery", category_filter="uncategorized"
        )

        assert [t.description for t in found] == ["Bakery tip"]
        assert transaction_service.list_transactions(owner_id, month="2026-02") == []


def test_deleting_a_payment_source_unassigns_and_clears_default(app, make_account):
    owner_id = make_account()

    with app.app_context():
        source = payment_source_service.create_payment_source(owner_id, "Wallet", "CASH")
        txn = transaction_service.create_transaction(
            owner_id,
            occurred_on=date(2026, 1, 3),
            amount_cents=-300,
            description="Coffee",
            payment_source_id=source.id,
        )
        payment_source_service.set_default_payment_source(owner_id, source.id)

        payment_source_service.delete_payment_source(owner_id, source.id)
        db.session.expire_all()

        assert db.session.get(Transaction, txn.id).payment_source_id is None
        assert payment_source_service.get_default_payment_source_id(owner_id) is None


def test_preferences_set_and_clear(app, make_account):
    owner_id = make_account()

    with app.app_context():
        set_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY, {"payment_source_id": 7})
        assert get_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY) == {"payment_source_id": 7}

        clear_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY)
        assert get_preference(owner_id, DEFAULT_PAYMENT_SOURCE_KEY) == {"payment_source_id": None}


def test_account_lookup_ignores_case_and_guests(app, make_account, make_guest):
    owner_id = make_account("Mixed@Example.com")
    make_guest()

    with app.app_context():
        assert find_account_by_email("  mixed@example.COM ").id == owner_id
        assert find_account_by_email("nobody@example.com") is None
        assert is_token_revoked("unknown-jti") is False
