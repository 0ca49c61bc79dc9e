from __future__ import annotations

import shutil
from datetime import date

import pytest
from flask_migrate import upgrade

from zento import create_app
from zento.core.auth.password import hash_password
from zento.core.identity.session_store import AnonymousSessionStore
from zento.core.users.models import User
from zento.domains.finance.models.finance_models import Category, Transaction
from zento.extensions import MIGRATIONS_DIR, db

DEFAULT_PASSWORD = "demo12345"


# ==================== Pytest Markers ====================
def pytest_configure(config):
    """Register custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: Integration tests (database, API)")


@pytest.fixture(scope="session")
def migrated_db(tmp_path_factory):
    """Apply migrations once per session to mirror the production schema.

    The upgraded SQLite file is a template; every test gets its own copy.
    """
    template = tmp_path_factory.mktemp("schema") / "zento.db"
    app = create_app("testing", {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{template}"})
    with app.app_context():
        upgrade(directory=str(MIGRATIONS_DIR))
        db.engine.dispose()
    return template


@pytest.fixture()
def app(migrated_db, tmp_path):
    """Per-test app on a fresh copy of the migrated database.

    No app context stays pushed during the test: every request gets its own
    context (and therefore its own ``g`` and session), like in production.
    """
    db_file = tmp_path / "zento.db"
    shutil.copyfile(migrated_db, db_file)
    app = create_app("testing", {"SQLALCHEMY_DATABASE_URI": f"sqlite:///{db_file}"})
    yield app
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_account(app):
    def _make(email: str = "owner@example.com", password: str = DEFAULT_PASSWORD) -> int:
        with app.app_context():
            user = User(email=email, password_hash=hash_password(password), is_guest=False)
            db.session.add(user)
            db.session.commit()
            return user.id

    return _make


@pytest.fixture()
def make_guest(app):
    """Create a guest identity with a live session; returns ``(guest_id, plaintext_token)``."""

    def _make(ttl=None):
        with app.app_context():
            guest = User(is_guest=True)
            db.session.add(guest)
            db.session.flush()
            store = AnonymousSessionStore(db.session)
            plaintext, _ = store.create(guest.id, ttl=ttl)
            db.session.commit()
            return guest.id, plaintext

    return _make


@pytest.fixture()
def add_category(app):
    def _add(owner_id: int, name: str, sort_order: int = 0) -> int:
        with app.app_context():
            category = Category(user_id=owner_id, name=name, sort_order=sort_order)
            db.session.add(category)
            db.session.commit()
            return category.id

    return _add


@pytest.fixture()
def add_transaction(app):
    def _add(owner_id: int, category_id=None, amount_cents: int = 1250, description: str = "Lunch") -> int:
        with app.app_context():
            txn = Transaction(
                user_id=owner_id,
                occurred_on=date(2026, 1, 15),
                amount_cents=amount_cents,
                type="EXPENSE",
                description=description,
                flags=[],
                category_id=category_id,
            )
            db.session.add(txn)
            db.session.commit()
            return txn.id

    return _add


@pytest.fixture()
def login(client):
    """Sign in through the API and return bearer headers."""

    def _login(email: str = "owner@example.com", password: str = DEFAULT_PASSWORD) -> dict:
        resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}

    return _login


@pytest.fixture()
def auth_headers(make_account, login):
    make_account()
    return login()
