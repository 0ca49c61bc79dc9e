from __future__ import annotations

import pytest

from zento.domains.finance.models.finance_models import Transaction
from zento.extensions import db

pytestmark = pytest.mark.integration

SOURCES = "/api/finance/payment-sources"
DEFAULT_SOURCE = "/api/users/preferences/default-payment-source"


def _create(client, headers, name="Checking", source_type="bank"):
    return client.post(SOURCES, json={"name": name, "type": source_type}, headers=headers)


def test_listing_without_owner_is_empty(client):
    resp = client.get(SOURCES)

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "payment_sources": [], "default_payment_source_id": None}


def test_guests_cannot_create_payment_sources(client):
    resp = client.post(SOURCES, json={"name": "Wallet", "type": "CASH"})
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "unauthorized"


def test_create_list_and_rename(client, auth_headers):
    created = _create(client, auth_headers)
    assert created.status_code == 201
    source = created.get_json()["payment_source"]
    assert source["type"] == "BANK"

    renamed = client.patch(f"{SOURCES}/{source['id']}", json={"name": "Main checking"}, headers=auth_headers)
    assert renamed.status_code == 200
    assert renamed.get_json()["payment_source"]["name"] == "Main checking"

    listed = client.get(SOURCES, headers=auth_headers).get_json()
    assert [s["name"] for s in listed["payment_sources"]] == ["Main checking"]


def test_duplicate_name_conflicts(client, auth_headers):
    _create(client, auth_headers, name="Visa", source_type="CARD")
    resp = _create(client, auth_headers, name="Visa", source_type="CARD")

    assert resp.status_code == 409
    assert resp.get_json()["error"] == "duplicate_name"


def test_unknown_type_is_rejected(client, auth_headers):
    resp = _create(client, auth_headers, source_type="crypto")
    assert resp.status_code == 400


def test_delete_unassigns_transactions_and_clears_default(app, client, auth_headers):
    source_id = _create(client, auth_headers).get_json()["payment_source"]["id"]
    txn = client.post(
        "/api/finance/transactions",
        json={"date": "2026-01-10", "amount_cents": -900, "description": "Taxi", "payment_source_id": source_id},
        headers=auth_headers,
    ).get_json()["transaction"]
    client.post(DEFAULT_SOURCE, json={"payment_source_id": source_id}, headers=auth_headers)

    resp = client.delete(f"{SOURCES}/{source_id}", headers=auth_headers)
    assert resp.status_code == 200

    with app.app_context():
        assert db.session.get(Transaction, txn["id"]).payment_source_id is None
    current = client.get(DEFAULT_SOURCE, headers=auth_headers).get_json()
    assert current["payment_source_id"] is None
    assert client.delete(f"{SOURCES}/{source_id}", headers=auth_headers).status_code == 404


def test_default_source_round_trip(client, auth_headers):
    source_id = _create(client, auth_headers).get_json()["payment_source"]["id"]

    resp = client.post(DEFAULT_SOURCE, json={"payment_source_id": source_id}, headers=auth_headers)
    assert resp.get_json() == {"ok": True, "payment_source_id": source_id}
    listed = client.get(SOURCES, headers=auth_headers).get_json()
    assert listed["default_payment_source_id"] == source_id

    cleared = client.post(DEFAULT_SOURCE, json={"payment_source_id": None}, headers=auth_headers)
    assert cleared.get_json()["payment_source_id"] is None


def test_default_source_must_belong_to_the_account(client, auth_headers, make_account, login):
    make_account("other@example.com")
    other_headers = login("other@example.com")
    foreign_id = _create(client, other_headers).get_json()["payment_source"]["id"]

    resp = client.post(DEFAULT_SOURCE, json={"payment_source_id": foreign_id}, headers=auth_headers)
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_default_source_form_post_redirects_to_main_view(app, client, auth_headers):
    source_id = _create(client, auth_headers).get_json()["payment_source"]["id"]

    resp = client.post(DEFAULT_SOURCE, data={"payment_source_id": str(source_id)}, headers=auth_headers)
    assert resp.status_code == 303
    assert resp.headers["Location"].endswith(app.config["MAIN_VIEW_PATH"])

    resp = client.post(DEFAULT_SOURCE, data={"payment_source_id": "all"}, headers=auth_headers)
    assert resp.status_code == 303
    assert client.get(DEFAULT_SOURCE, headers=auth_headers).get_json()["payment_source_id"] is None


def test_profile_preferences_only_carry_the_default_source(client, auth_headers):
    resp = client.get("/api/users/me", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.get_json()["user"]["preferences"] == {
        "default_payment_source_id": {"payment_source_id": None}
    }
