"""Sign-in subscriber that folds the device's guest data into the new account."""

from __future__ import annotations

import logging

from flask import after_this_request

from zento.core.events.event_models import SignInEvent
from zento.core.identity.constants import MERGE_STATUS_MERGED
from zento.core.identity.cookies import clear_guest_cookie, read_guest_token
from zento.core.identity.dependencies import get_merge_engine

logger = logging.getLogger(__name__)


def merge_guest_on_sign_in(event: SignInEvent) -> None:
    """Run the guest merge for the signing-in account; never raises.

    The cookie is cleared only once a merge has committed. A no-op leaves it
    for the resolver to ignore; a skipped or failed merge keeps it so the
    consent page can retry.
    """
    token = read_guest_token()
    if not token:
        return
    try:
        result = get_merge_engine().merge(event.principal, token)
    except Exception:
        logger.exception("guest merge crashed for account %s; sign-in continues", event.principal.identity_id)
        return

    if result.status == MERGE_STATUS_MERGED:

        @after_this_request
        def _clear(response):
            return clear_guest_cookie(response)
