from __future__ import annotations

import pytest
from sqlalchemy import select

from zento.core.identity.models import AnonymousSession
from zento.domains.finance.models.finance_models import Category, Transaction
from zento.extensions import db

pytestmark = pytest.mark.integration

ANON_COOKIE = "zento_anon"


@pytest.fixture()
def pending_guest(client, auth_headers, make_guest, add_category, add_transaction):
    """Signed-in client whose device still carries another guest's cookie."""
    guest_id, token = make_guest()
    food = add_category(guest_id, "Food")
    add_transaction(guest_id, category_id=food)
    add_transaction(guest_id)
    client.set_cookie(ANON_COOKIE, token)
    return guest_id, token


def test_consent_page_requires_account(client):
    resp = client.get("/guest/import")
    assert resp.status_code == 401


def test_consent_page_summarises_guest_data(client, auth_headers, pending_guest):
    resp = client.get("/guest/import", headers=auth_headers)

    assert resp.status_code == 200
    html = resp.get_data(as_text=True)
    assert "<strong>2</strong> transactions" in html
    assert "<strong>1</strong> categories" in html


def test_transactions_page_shows_banner_for_pending_guest(client, auth_headers, pending_guest):
    resp = client.get("/finance/transactions", headers=auth_headers)

    assert resp.status_code == 200
    assert 'id="guest-banner"' in resp.get_data(as_text=True)


def test_transactions_page_has_no_banner_without_guest(client, auth_headers):
    resp = client.get("/finance/transactions", headers=auth_headers)

    assert resp.status_code == 200
    assert 'id="guest-banner"' not in resp.get_data(as_text=True)


def test_import_merges_and_redirects(app, client, auth_headers, pending_guest):
    guest_id, _ = pending_guest

    resp = client.post("/guest/import", headers=auth_headers)

    assert resp.status_code == 303
    assert resp.headers["Location"].endswith("/finance/transactions?guest=merged")
    assert client.get_cookie(ANON_COOKIE) is None
    with app.app_context():
        assert db.session.scalars(select(Transaction).where(Transaction.user_id == guest_id)).all() == []
        assert [c.name for c in db.session.scalars(select(Category)).all()] == ["Food"]

    # Repeating the action is harmless.
    again = client.post("/guest/import", headers=auth_headers)
    assert again.status_code == 303
    assert again.headers["Location"].endswith("?guest=noop")


def test_discard_retires_sessions_but_moves_nothing(app, client, auth_headers, pending_guest):
    guest_id, _ = pending_guest

    resp = client.post("/guest/discard", headers=auth_headers)

    assert resp.status_code == 303
    assert resp.headers["Location"].endswith("/finance/transactions?guest=discarded")
    assert client.get_cookie(ANON_COOKIE) is None
    with app.app_context():
        sessions = db.session.scalars(select(AnonymousSession).where(AnonymousSession.user_id == guest_id)).all()
        guest_rows = db.session.scalars(select(Transaction).where(Transaction.user_id == guest_id)).all()
    assert sessions == []
    assert len(guest_rows) == 2

    assert client.post("/guest/discard", headers=auth_headers).status_code == 303


def test_import_keeps_cookie_when_merge_fails(client, auth_headers, pending_guest, monkeypatch):
    from zento.core.identity.constants import MERGE_STATUS_FAILED
    from zento.core.identity.merge_service import GuestMergeEngine, MergeResult

    _, token = pending_guest
    monkeypatch.setattr(
        GuestMergeEngine, "merge", lambda self, principal, bearer: MergeResult(status=MERGE_STATUS_FAILED)
    )

    resp = client.post("/guest/import", headers=auth_headers)

    assert resp.status_code == 303
    assert resp.headers["Location"].endswith("?guest=failed")
    assert client.get_cookie(ANON_COOKIE).value == token
