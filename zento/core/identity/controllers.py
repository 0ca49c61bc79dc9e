"""Consent page for importing or discarding the device's guest data."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, redirect, render_template
from werkzeug.exceptions import Unauthorized

from zento.core.identity.constants import (
    MERGE_STATUS_DISCARDED,
    MERGE_STATUS_MERGED,
    MERGE_STATUS_NOOP,
)
from zento.core.identity.cookies import clear_guest_cookie, read_guest_token
from zento.core.identity.dependencies import (
    current_principal,
    get_merge_engine,
    jwt_form_csrf,
    pending_guest_owner,
)
from zento.core.utils.decorators import account_required

logger = logging.getLogger(__name__)

guest_bp = Blueprint("guest", __name__)


def _principal():
    principal = current_principal()
    if principal is None:
        raise Unauthorized()
    return principal


def _back_to_main(clear_cookie: bool, outcome: str):
    target = current_app.config["MAIN_VIEW_PATH"]
    resp = redirect(f"{target}?guest={outcome}", code=303)
    if clear_cookie:
        clear_guest_cookie(resp)
    return resp


@guest_bp.get("/import")
@account_required
def import_page():
    _principal()
    summary = None
    if pending_guest_owner() is not None:
        summary = get_merge_engine().preview(read_guest_token())
    return render_template("identity/import_guest.html", summary=summary, csrf_token=jwt_form_csrf())


@guest_bp.post("/import")
@account_required
def import_guest_data():
    principal = _principal()
    token = read_guest_token()
    if not token:
        return _back_to_main(False, MERGE_STATUS_NOOP)

    result = get_merge_engine().merge(principal, token)
    if result.status in (MERGE_STATUS_MERGED, MERGE_STATUS_NOOP):
        return _back_to_main(True, result.status)
    # Keep the cookie; the user can retry from the same page.
    logger.warning("guest import for account %s ended with %s", principal.identity_id, result.status)
    return _back_to_main(False, result.status)


@guest_bp.post("/discard")
@account_required
def discard_guest_data():
    principal = _principal()
    token = read_guest_token()
    if not token:
        return _back_to_main(False, MERGE_STATUS_NOOP)

    result = get_merge_engine().discard(principal, token)
    if result.status in (MERGE_STATUS_DISCARDED, MERGE_STATUS_NOOP):
        return _back_to_main(True, result.status)
    return _back_to_main(False, result.status)
