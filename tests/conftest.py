"""Pytest configuration for test isolation.

Three pieces of process-wide state would leak between tests:

- the shared SQLAlchemy engine in ``db.client`` (bound to one URL per process);
- handlers installed by ``configure_logging`` (the CLI root callback runs it,
  and the handler would keep a reference to a runner's closed stream);
- ``DATABASE_URL`` / ``.env`` values and the log level from the developer's
  environment.

The autouse fixture below resets all three around every test.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engine

from statement_import.logging_setup import reset_logging
from tests.helpers.db import bootstrap_sqlite_db


@pytest.fixture(autouse=True)
def _isolate_process_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    # INFO records from import runs would go to a CliRunner stream that is
    # closed by the time a second invocation in the same test logs.
    monkeypatch.setenv("STATEMENT_IMPORT_LOG_LEVEL", "WARNING")
    # Keep a developer's .env out of reach of load_dotenv()/find_dotenv().
    monkeypatch.chdir(tmp_path)
    dispose_engine()
    yield
    dispose_engine()
    reset_logging()


@pytest.fixture
def db_url(tmp_path: Path) -> str:
    """URL of a fresh file-backed SQLite database with the schema created."""

    return bootstrap_sqlite_db(tmp_path / "balances.db")


@pytest.fixture
def data_dir() -> Path:
    return Path(__file__).resolve().parent / "data"
