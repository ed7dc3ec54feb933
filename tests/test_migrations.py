from __future__ import annotations

from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from db import metadata

_ALEMBIC_INI = Path(__file__).resolve().parents[1] / "libs/db/alembic.ini"


def _alembic_config(url: str, monkeypatch: pytest.MonkeyPatch) -> Config:
    monkeypatch.setenv("DATABASE_URL", url)
    return Config(str(_ALEMBIC_INI))


def test_upgrade_creates_orm_tables_and_downgrade_drops_them(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    cfg = _alembic_config(url, monkeypatch)

    command.upgrade(cfg, "head")

    engine = create_engine(url)
    try:
        insp = inspect(engine)
        tables = set(insp.get_table_names())
        assert {"accounts", "account_balances"} <= tables
        for name, table in metadata.tables.items():
            got = {c["name"] for c in insp.get_columns(name)}
            assert got == {c.name for c in table.columns}
        uniques = insp.get_unique_constraints("account_balances")
        assert [sorted(u["column_names"]) for u in uniques] == [["account_id", "date"]]

        command.downgrade(cfg, "base")
        insp = inspect(engine)
        assert not ({"accounts", "account_balances"} & set(insp.get_table_names()))
    finally:
        engine.dispose()
