from __future__ import annotations

from datetime import timedelta

import pytest
from sqlalchemy import select

from zento.core.identity.resolver import IdentityResolver
from zento.core.identity.session_store import AnonymousSessionStore
from zento.core.users.models import User
from zento.extensions import db

pytestmark = pytest.mark.integration


def _resolver() -> IdentityResolver:
    return IdentityResolver(AnonymousSessionStore(db.session), db.session)


def test_authenticated_identity_wins_over_guest_cookie(app, make_account, make_guest):
    account_id = make_account()
    _, token = make_guest()
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=account_id, bearer_token=token, write=True)

    assert owner.owner_id == account_id
    assert owner.is_authenticated is True
    assert owner.cookie_directive is None


def test_guest_cookie_resolves_to_guest(app, make_guest):
    guest_id, token = make_guest()
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=None, bearer_token=token)

    assert owner.owner_id == guest_id
    assert owner.is_authenticated is False
    assert owner.cookie_directive is None


@pytest.mark.parametrize("token", [None, "", "   ", "tampered-value", "%%%"])
def test_read_path_never_raises_for_bad_tokens(app, token):
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=None, bearer_token=token)

    assert owner.has_owner is False
    assert owner.cookie_directive is None


def test_read_path_ignores_expired_session(app, make_guest):
    _, token = make_guest(ttl=timedelta(seconds=-1))
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=None, bearer_token=token)

    assert owner.has_owner is False


def test_write_path_provisions_guest_and_asks_for_cookie(app):
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=None, bearer_token=None, write=True)

    assert owner.has_owner
    assert owner.is_authenticated is False
    assert owner.cookie_directive is not None
    with app.app_context():
        guest = db.session.get(User, owner.owner_id)
        assert guest.is_guest is True
        assert guest.email is None
        # The cookie value handed out maps back to the new guest.
        assert AnonymousSessionStore(db.session).resolve(owner.cookie_directive.value) == guest.id


def test_write_path_replaces_stale_cookie_with_new_guest(app, make_guest):
    old_guest, token = make_guest(ttl=timedelta(seconds=-1))
    with app.app_context():
        owner = _resolver().resolve(authenticated_id=None, bearer_token=token, write=True)
        guests = db.session.scalars(select(User.id).where(User.is_guest.is_(True))).all()

    assert owner.owner_id != old_guest
    assert sorted(guests) == sorted([old_guest, owner.owner_id])
    assert owner.cookie_directive.value != token
