"""Zento application factory and bootstrap."""

from __future__ import annotations

import atexit
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from flask import Flask, redirect

from zento.config import config_by_name
from zento.extensions import init_extensions, jwt


def create_app(config_name: Optional[str] = None, overrides: Optional[dict] = None) -> Flask:
    """Create and configure the Zento Flask application.

    ``overrides`` is applied on top of the config class, before extensions bind.
    """
    env_name = (config_name or os.environ.get("APP_ENV") or "development").lower()
    project_root = Path(__file__).resolve().parent.parent
    instance_root = project_root / "instance"

    app = Flask(
        __name__,
        instance_path=str(instance_root),
        instance_relative_config=True,
        template_folder=str(Path(__file__).parent / "templates"),
    )
    config_cls = config_by_name.get(env_name, config_by_name["development"])
    app.config.from_object(config_cls)
    if overrides:
        app.config.update(overrides)

    # Normalize sqlite path to absolute to avoid "unable to open database file"
    db_uri = app.config.get("SQLALCHEMY_DATABASE_URI") or ""
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        db_path = Path(db_uri.replace("sqlite:///", "", 1))
        abs_path = db_path if db_path.is_absolute() else project_root / db_path
        abs_path.parent.mkdir(parents=True, exist_ok=True)
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{abs_path}"

    init_extensions(app)
    _register_blueprints(app)
    _register_error_handlers(app)
    _register_auth_handlers(app)
    _register_identity(app)

    @app.get("/")
    def index():
        return redirect(app.config["MAIN_VIEW_PATH"])

    @app.get("/health")
    def health():
        return {"ok": True}, 200

    return app


def _register_blueprints(app: Flask) -> None:
    """Lazy import and register all controllers."""
    from zento.core.auth.controllers import auth_bp  # local import to avoid circulars
    from zento.core.identity.controllers import guest_bp
    from zento.core.users.controllers import user_api_bp
    from zento.domains.finance.controllers.categories_api import categories_api_bp
    from zento.domains.finance.controllers.pages import finance_pages_bp
    from zento.domains.finance.controllers.payment_sources_api import payment_sources_api_bp
    from zento.domains.finance.controllers.transactions_api import transactions_api_bp

    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(user_api_bp, url_prefix="/api/users")
    app.register_blueprint(guest_bp, url_prefix="/guest")

    app.register_blueprint(categories_api_bp, url_prefix="/api/finance/categories")
    app.register_blueprint(transactions_api_bp, url_prefix="/api/finance/transactions")
    app.register_blueprint(payment_sources_api_bp, url_prefix="/api/finance/payment-sources")
    app.register_blueprint(finance_pages_bp, url_prefix="/finance")


def _register_error_handlers(app: Flask) -> None:
    """Basic JSON error responses."""
    from pydantic import ValidationError
    from werkzeug.exceptions import HTTPException

    from zento.core.utils.responses import validation_error_response

    @app.errorhandler(HTTPException)
    def _http_error(exc: HTTPException):
        return {"ok": False, "error": exc.name.lower().replace(" ", "_")}, exc.code

    @app.errorhandler(ValidationError)
    def _validation_error(exc: ValidationError):
        return validation_error_response(exc)

    @app.errorhandler(Exception)
    def _generic_error(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        # In debug/testing, surface the exception message to speed up diagnosis
        if app.debug or app.testing:
            return {"ok": False, "error": str(exc)}, 500
        return {"ok": False, "error": "unexpected_error"}, 500


def _register_auth_handlers(app: Flask) -> None:
    """JWT revocation and error payloads in the app's JSON shape."""
    from zento.core.auth.auth_service import is_token_revoked

    @jwt.token_in_blocklist_loader
    def _is_revoked(_jwt_header, jwt_payload: dict) -> bool:
        return is_token_revoked(jwt_payload.get("jti"))

    def _unauthorized(*_args):
        return {"ok": False, "error": "unauthorized"}, 401

    jwt.unauthorized_loader(_unauthorized)
    jwt.invalid_token_loader(_unauthorized)
    jwt.expired_token_loader(_unauthorized)
    jwt.revoked_token_loader(_unauthorized)


def _register_identity(app: Flask) -> None:
    """Per-app event bus, the sign-in merge subscription and the touch executor."""
    from zento.core.auth.events import AUTH_USER_SIGNED_IN
    from zento.core.events.event_bus import EVENT_BUS_KEY, EventBus
    from zento.core.identity.dependencies import TOUCH_EXECUTOR_KEY
    from zento.core.identity.hooks import merge_guest_on_sign_in

    bus = EventBus()
    bus.subscribe(AUTH_USER_SIGNED_IN, merge_guest_on_sign_in)
    app.extensions[EVENT_BUS_KEY] = bus

    if app.config.get("ANON_TOUCH_BACKGROUND"):
        executor = ThreadPoolExecutor(
            max_workers=int(app.config.get("ANON_TOUCH_WORKERS", 2)),
            thread_name_prefix="anon-touch",
        )
        atexit.register(executor.shutdown, wait=False)
        app.extensions[TOUCH_EXECUTOR_KEY] = executor
