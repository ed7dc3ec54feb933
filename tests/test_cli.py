from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from typer.testing import CliRunner

from statement_import.cli import app
from tests.helpers.db import seed_accounts, seed_balances, stored_balances

runner = CliRunner()


@pytest.fixture
def checking_csv(data_dir: Path) -> str:
    return str(data_dir / "checking_balances.csv")


@pytest.fixture
def seeded_url(db_url: str) -> str:
    seed_accounts(database_url=db_url, accounts=[("chk", "Everyday Checking", "checking")])
    return db_url


def test_preview_prints_columns_and_summary(checking_csv: str):
    result = runner.invoke(app, ["preview", "--csv-path", checking_csv])

    assert result.exit_code == 0, result.output
    assert "Date column: Date [#0]" in result.output
    assert "Balance column: Balance [#3]" in result.output
    assert "Rows: 4  Valid: 3  Skipped: 1  Days: 2  Duplicates: 1" in result.output
    assert "Date range: 2024-01-05 → 2024-01-06" in result.output
    assert "Not ready: select an account (--account)" in result.output


def test_preview_transactions_with_starting_balance(checking_csv: str):
    result = runner.invoke(
        app,
        [
            "preview",
            "--csv-path",
            checking_csv,
            "--statement-type",
            "transactions",
            "--starting-balance",
            "1000",
            "--account",
            "chk",
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Amount column: Amount [#2]" in result.output
    assert "Entries to import: 2 (last balance $95.00 on 2024-01-06)" in result.output
    assert "Not ready" not in result.output


def test_preview_reports_existing_balances(checking_csv: str, seeded_url: str):
    seed_balances(database_url=seeded_url, balances=[("chk", date(2024, 1, 6), Decimal("1"))])
    result = runner.invoke(
        app,
        ["preview", "--csv-path", checking_csv, "--account", "chk", "--database-url", seeded_url],
    )

    assert result.exit_code == 0, result.output
    assert "Existing balances on the same dates: 1" in result.output


def test_preview_missing_file(tmp_path: Path):
    result = runner.invoke(app, ["preview", "--csv-path", str(tmp_path / "nope.csv")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_preview_empty_file(tmp_path: Path):
    empty = tmp_path / "empty.csv"
    empty.write_text("\n\n", encoding="utf-8")
    result = runner.invoke(app, ["preview", "--csv-path", str(empty)])

    assert result.exit_code == 1
    assert "No rows found. Please check the CSV formatting." in result.output


def test_import_writes_balances(checking_csv: str, seeded_url: str):
    result = runner.invoke(
        app,
        ["import", "--csv-path", checking_csv, "--account", "chk", "--database-url", seeded_url],
    )

    assert result.exit_code == 0, result.output
    assert "Imported 2 daily balances for Everyday Checking." in result.output
    assert stored_balances(database_url=seeded_url, account_id="chk") == {
        date(2024, 1, 5): Decimal("1095.00"),
        date(2024, 1, 6): Decimal("95.00"),
    }


def test_import_keep_existing_reports_skipped(checking_csv: str, seeded_url: str):
    seed_balances(database_url=seeded_url, balances=[("chk", date(2024, 1, 6), Decimal("7"))])
    result = runner.invoke(
        app,
        [
            "import",
            "--csv-path",
            checking_csv,
            "--account",
            "chk",
            "--keep-existing",
            "--database-url",
            seeded_url,
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Imported 1 daily balance for Everyday Checking." in result.output
    assert "Kept 1 existing balance(s) on the same dates." in result.output
    assert stored_balances(database_url=seeded_url, account_id="chk")[date(2024, 1, 6)] == (
        Decimal("7.00")
    )


def test_import_uses_database_url_from_env(
    checking_csv: str, seeded_url: str, monkeypatch: pytest.MonkeyPatch
):
    monkeypatch.setenv("DATABASE_URL", seeded_url)
    result = runner.invoke(app, ["import", "--csv-path", checking_csv, "--account", "chk"])

    assert result.exit_code == 0, result.output
    assert "Imported 2 daily balances" in result.output


def test_import_transactions_without_starting_balance_fails(checking_csv: str, seeded_url: str):
    result = runner.invoke(
        app,
        [
            "import",
            "--csv-path",
            checking_csv,
            "--account",
            "chk",
            "--statement-type",
            "transactions",
            "--database-url",
            seeded_url,
        ],
    )

    assert result.exit_code == 1
    assert "transactions mode needs a valid --starting-balance" in result.output
    assert stored_balances(database_url=seeded_url, account_id="chk") == {}


def test_import_unknown_account(checking_csv: str, seeded_url: str):
    result = runner.invoke(
        app,
        ["import", "--csv-path", checking_csv, "--account", "zzz", "--database-url", seeded_url],
    )

    assert result.exit_code == 1
    assert "unknown account: zzz" in result.output


def test_import_without_database_fails(checking_csv: str):
    result = runner.invoke(app, ["import", "--csv-path", checking_csv, "--account", "chk"])

    assert result.exit_code == 1
    assert "DATABASE_URL is not set" in result.output


def test_accounts_lists_directory(seeded_url: str):
    result = runner.invoke(app, ["accounts", "--database-url", seeded_url])

    assert result.exit_code == 0, result.output
    assert "chk\tEveryday Checking\tchecking" in result.output


def test_accounts_empty_directory(db_url: str):
    result = runner.invoke(app, ["accounts", "--database-url", db_url])

    assert result.exit_code == 0, result.output
    assert "No accounts available. Create an account first." in result.output
