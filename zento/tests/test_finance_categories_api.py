from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration

ANON_COOKIE = "zento_anon"


def _anon_set_cookie(resp) -> str | None:
    return next((h for h in resp.headers.getlist("Set-Cookie") if h.startswith(f"{ANON_COOKIE}=")), None)


def test_list_without_owner_is_empty_and_sets_nothing(client):
    resp = client.get("/api/finance/categories")

    assert resp.status_code == 200
    assert resp.get_json() == {"ok": True, "categories": []}
    assert _anon_set_cookie(resp) is None


def test_first_guest_write_sets_bearer_cookie_once(client):
    first = client.post("/api/finance/categories", json={"name": "  Food  "})

    assert first.status_code == 201
    assert first.get_json()["category"]["name"] == "Food"
    header = _anon_set_cookie(first)
    assert header is not None
    for attribute in ("HttpOnly", "Path=/", "SameSite=Lax", "Max-Age=15552000"):
        assert attribute in header
    assert "Secure" not in header

    second = client.post("/api/finance/categories", json={"name": "Rent"})
    assert second.status_code == 201
    assert _anon_set_cookie(second) is None

    listed = client.get("/api/finance/categories").get_json()["categories"]
    assert [(c["name"], c["sort_order"]) for c in listed] == [("Food", 1), ("Rent", 2)]


@pytest.mark.parametrize("name", ["", "   ", "x" * 41])
def test_create_validates_name(client, name):
    resp = client.post("/api/finance/categories", json={"name": name})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "bad_request"


def test_duplicate_name_conflicts(client, auth_headers):
    client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers)
    resp = client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers)

    assert resp.status_code == 409
    assert resp.get_json() == {"ok": False, "error": "duplicate_name"}


def test_guests_cannot_edit_categories(client):
    created = client.post("/api/finance/categories", json={"name": "Food"}).get_json()["category"]

    resp = client.patch(f"/api/finance/categories?id={created['id']}", json={"name": "Meals"})
    assert resp.status_code == 401
    resp = client.delete(f"/api/finance/categories?id={created['id']}")
    assert resp.status_code == 401


def test_rename_and_bulk_reorder(client, auth_headers):
    ids = [
        client.post("/api/finance/categories", json={"name": name}, headers=auth_headers).get_json()["category"]["id"]
        for name in ("Food", "Rent", "Fun")
    ]

    resp = client.patch(f"/api/finance/categories?id={ids[0]}", json={"name": "Groceries"}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.get_json()["category"]["name"] == "Groceries"

    resp = client.patch("/api/finance/categories", json={"order": [ids[2], ids[0], ids[2], ids[1]]}, headers=auth_headers)
    assert resp.status_code == 200
    assert [c["id"] for c in resp.get_json()["categories"]] == [ids[2], ids[0], ids[1]]


def test_reorder_rejects_foreign_ids(client, auth_headers):
    own = client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers).get_json()["category"]
    resp = client.patch("/api/finance/categories", json={"order": [own["id"], 9999]}, headers=auth_headers)

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid_ids"


def test_sort_order_bounds(client, auth_headers):
    own = client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers).get_json()["category"]
    resp = client.patch(f"/api/finance/categories?id={own['id']}", json={"sort_order": 100_001}, headers=auth_headers)
    assert resp.status_code == 400


def test_delete_reassigns_transactions(client, auth_headers):
    food = client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers).get_json()["category"]
    meals = client.post("/api/finance/categories", json={"name": "Meals"}, headers=auth_headers).get_json()["category"]
    txn = client.post(
        "/api/finance/transactions",
        json={"date": "2026-02-01", "amount_cents": -800, "description": "Pizza", "category_id": food["id"]},
        headers=auth_headers,
    ).get_json()["transaction"]

    resp = client.delete(
        f"/api/finance/categories?id={food['id']}",
        json={"reassign_to_category_id": meals["id"]},
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.get_json()["transactions_moved"] == 1
    listed = client.get("/api/finance/transactions", headers=auth_headers).get_json()["transactions"]
    assert [(t["id"], t["category_id"]) for t in listed] == [(txn["id"], meals["id"])]


def test_delete_without_target_uncategorizes(client, auth_headers):
    food = client.post("/api/finance/categories", json={"name": "Food"}, headers=auth_headers).get_json()["category"]
    client.post(
        "/api/finance/transactions",
        json={"date": "2026-02-01", "amount_cents": -800, "description": "Pizza", "category_id": food["id"]},
        headers=auth_headers,
    )

    assert client.delete(f"/api/finance/categories?id={food['id']}", headers=auth_headers).status_code == 200
    listed = client.get("/api/finance/transactions?category_id=uncategorized", headers=auth_headers)
    assert [t["description"] for t in listed.get_json()["transactions"]] == ["Pizza"]
