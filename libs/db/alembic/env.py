# ruff: noqa: I001
"""
Alembic environment for the balance store schema (`accounts`,
`account_balances`).

URL precedence: `-x database_url=...` on the command line, then the
`DATABASE_URL` environment variable (a `.env` found from the working directory
is honored), then `sqlalchemy.url` in alembic.ini. SQLite targets run in batch
mode so later ALTER-style revisions work there too.
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from dotenv import find_dotenv, load_dotenv
from sqlalchemy import engine_from_config, pool
from sqlalchemy.engine import make_url

import db

config = context.config
logger = logging.getLogger("alembic.env")

# Programmatic runs (tests) build a Config without an ini file.
if config.config_file_name is not None:
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = db.metadata


def _resolve_url() -> str:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path=dotenv_path, override=False)

    url = (
        context.get_x_argument(as_dictionary=True).get("database_url")
        or os.getenv("DATABASE_URL")
        or config.get_main_option("sqlalchemy.url")
    )
    if not url:
        raise RuntimeError(
            "No database URL for migrations. Pass -x database_url=..., set "
            "DATABASE_URL, or fill 'sqlalchemy.url' in alembic.ini."
        )
    return url


def _is_sqlite(url: str) -> bool:
    return make_url(url).get_backend_name() == "sqlite"


def run_migrations_offline(url: str) -> None:
    """Emit SQL for the balance schema without connecting."""
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        compare_type=True,
        render_as_batch=_is_sqlite(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    """Apply revisions over a live connection."""
    section = dict(config.get_section(config.config_ini_section) or {})
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


database_url = _resolve_url()
logger.info(
    "migrating %s (tables: %s)",
    make_url(database_url).render_as_string(hide_password=True),
    ", ".join(sorted(target_metadata.tables)),
)

if context.is_offline_mode():
    run_migrations_offline(database_url)
else:
    run_migrations_online(database_url)
