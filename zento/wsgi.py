"""WSGI entry point (``gunicorn zento.wsgi:app``); the config comes from APP_ENV."""

from zento import create_app

app = create_app()
