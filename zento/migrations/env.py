"""Alembic environment for Zento.

Runs inside ``flask db ...`` (Flask-Migrate pushes the app context). A bare
``alembic`` invocation builds an app from the ``zento_env`` option instead.
"""

from __future__ import annotations

import logging
from logging.config import fileConfig

from alembic import context
from flask import current_app, has_app_context

config = context.config
if config.config_file_name:
    fileConfig(config.config_file_name, disable_existing_loggers=False)
logger = logging.getLogger("alembic.env")


def _flask_app():
    if has_app_context():
        return current_app._get_current_object()
    from zento import create_app

    return create_app(config.get_main_option("zento_env", "development"))


app = _flask_app()
db = app.extensions["migrate"].db


def run_migrations_offline() -> None:
    context.configure(
        url=app.config["SQLALCHEMY_DATABASE_URI"],
        target_metadata=db.metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    with app.app_context():
        engine = db.engine
        with engine.connect() as connection:
            context.configure(
                connection=connection,
                target_metadata=db.metadata,
                # SQLite needs batch mode for ALTER TABLE.
                render_as_batch=connection.dialect.name == "sqlite",
                compare_type=True,
            )
            with context.begin_transaction():
                context.run_migrations()
    logger.info("database at revision head for %s", engine.url.render_as_string(hide_password=True))


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
