# ruff: noqa: I001
"""CLI for the ``statement_import`` package.

This module exposes callable command handlers (``cmd_preview``,
``cmd_import``, ``cmd_accounts``) and a Typer-based console interface.
Environment variables (notably ``DATABASE_URL``) are loaded from a local
``.env`` using ``python-dotenv`` before delegating to command logic. The
normalization logic lives in ``statement_import.pipeline``; persistence in
``statement_import.persistence``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
from rich.text import Text
from sqlalchemy.exc import SQLAlchemyError
from typer.models import OptionInfo

from .errors import (
    EmptyStatementError,
    ImportFailedError,
    ImportNotReadyError,
    StatementReadError,
)
from .formatting import format_currency
from .ingest.loader import load_statement_text
from .logging_setup import configure_logging, get_logger
from .models import (
    ColumnSelection,
    DateFormatPolicy,
    ExistingBalance,
    ImportConfig,
    ImportPreview,
    RawRow,
    StatementType,
)
from .pipeline import prepare_statement, recompute

logger = get_logger("statement_import.cli")

_BLOCKER_HINTS: dict[str, str] = {
    "no_account": "select an account (--account)",
    "no_date_column": "no date column could be resolved",
    "no_value_column": "no balance/amount column could be resolved",
    "no_starting_balance": "transactions mode needs a valid --starting-balance",
    "no_entries": "no valid rows to import",
}


# ---- Small module-level helpers used by CLI commands -------------------------


def _console() -> Console:
    # Resolved per call so the active sys.stdout (e.g., a test runner's) is used.
    return Console(highlight=False, soft_wrap=True)


def _err(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)


def _build_config(
    *,
    statement_type: StatementType,
    date_format: DateFormatPolicy,
    has_header_row: bool,
    date_column: int | None,
    value_column: int | None,
    account_id: str | None,
    starting_balance: str,
    replace_existing: bool = True,
) -> ImportConfig:
    """Map CLI options onto an :class:`ImportConfig`.

    ``value_column`` lands in the balance or amount slot depending on the
    statement type, matching how the interactive column picker behaves.
    """

    selection = ColumnSelection(date=date_column).with_value(statement_type, value_column)
    config = ImportConfig(
        has_header_row=has_header_row,
        statement_type=statement_type,
        date_format=date_format,
        account_id=account_id,
        starting_balance=starting_balance,
        replace_existing=replace_existing,
    )
    return config.with_columns(selection)


def _load_rows(csv_path: str | Path) -> list[RawRow] | None:
    """Read and tokenize ``csv_path``; print an error and return ``None`` on failure."""

    try:
        text = load_statement_text(csv_path)
        rows = prepare_statement(text)
        logger.debug("loaded %d raw rows from %s", len(rows), csv_path)
        return rows
    except (StatementReadError, EmptyStatementError) as e:
        _err(str(e))
    return None


def _render_preview(console: Console, preview: ImportPreview, *, currency: str) -> None:
    labels = preview.labels
    value_index = preview.columns.value_index(preview.statement_type)
    value_kind = "Balance" if preview.statement_type is StatementType.BALANCE else "Amount"

    def _label(i: int | None) -> str:
        if i is None or i >= len(labels):
            return "(unset)"
        return f"{labels[i]} [#{i}]"

    console.print(f"Date column: {_label(preview.columns.date)}", markup=False)
    console.print(f"{value_kind} column: {_label(value_index)}", markup=False)

    table = Table(title=f"Preview (first {len(preview.preview_rows)} rows)")
    table.add_column("Row", justify="right")
    table.add_column("Date (raw)")
    table.add_column(f"{value_kind} (raw)")
    table.add_column("Parsed date")
    table.add_column(f"Parsed {value_kind.lower()}", justify="right")
    table.add_column("Status")
    for row in preview.preview_rows:
        table.add_row(
            str(row.row_number),
            Text(row.raw_date),
            Text(row.raw_value),
            row.date.isoformat() if row.date else "—",
            format_currency(row.amount, currency),
            "ok" if row.is_valid else "skipped",
        )
    console.print(table)

    s = preview.summary
    if s is None:
        console.print("No data rows.")
    else:
        console.print(
            f"Rows: {s.total_rows}  Valid: {s.valid_rows}  Skipped: {s.skipped_rows}  "
            f"Days: {s.unique_days}  Duplicates: {s.duplicate_count}"
        )
        if s.date_range is not None:
            console.print(
                f"Date range: {s.date_range.start.isoformat()} → {s.date_range.end.isoformat()}"
            )

    if preview.entries:
        last = preview.entries[-1]
        console.print(
            f"Entries to import: {len(preview.entries)} "
            f"(last balance {format_currency(last.amount, currency)} on {last.date.isoformat()})"
        )
        if preview.conflicts:
            console.print(f"Existing balances on the same dates: {preview.conflicts}")
    for b in preview.blockers:
        console.print(f"Not ready: {_BLOCKER_HINTS.get(b.value, b.value)}", markup=False)


def _existing_for_preview(
    account_id: str | None, database_url: str | None
) -> list[ExistingBalance]:
    """Stored balances for conflict counting; empty without an account or database."""

    if not account_id or not (database_url or os.getenv("DATABASE_URL")):
        return []

    from db.client import session_scope
    from .persistence import SqlBalanceStore

    with session_scope(database_url=database_url) as session:
        return SqlBalanceStore(session).existing_balances(account_id)


# ---- Command handlers ----------------------------------------------------------


def cmd_preview(
    csv_path: str | Path,
    *,
    config: ImportConfig,
    database_url: str | None = None,
    currency: str = "USD",
) -> int:
    """Normalize ``csv_path`` and print what an import would do.

    When an account is selected and a database is configured, stored balances
    are read to report same-date conflicts. Nothing is written.
    """

    rows = _load_rows(csv_path)
    if rows is None:
        return 1

    try:
        existing = _existing_for_preview(config.account_id, database_url)
    except (SQLAlchemyError, RuntimeError) as e:
        _err(f"failed to read existing balances: {e}")
        return 1

    preview = recompute(rows, config, existing)
    _render_preview(_console(), preview, currency=currency)
    return 0


def cmd_import(
    csv_path: str | Path,
    *,
    config: ImportConfig,
    database_url: str | None = None,
    currency: str = "USD",
) -> int:
    """Normalize ``csv_path`` and import the resulting daily balances.

    Errors are written to stderr and the function returns a non-zero exit
    status. Nothing is written unless the preview is ready.
    """

    from db.client import session_scope
    from .persistence import SqlAccountDirectory, SqlBalanceStore
    from .store import import_preview, import_status_message

    rows = _load_rows(csv_path)
    if rows is None:
        return 1
    if not config.account_id:
        _err("an account is required (--account)")
        return 1

    console = _console()
    try:
        with session_scope(database_url=database_url) as session:
            directory = SqlAccountDirectory(session)
            account = directory.get_account(config.account_id)
            if account is None:
                _err(f"unknown account: {config.account_id}")
                return 1

            store = SqlBalanceStore(session)
            preview = recompute(rows, config, store.existing_balances(account.id))
            _render_preview(console, preview, currency=currency)
            result = import_preview(
                store, preview, replace_existing=config.replace_existing
            )
    except ImportNotReadyError as e:
        hints = "; ".join(_BLOCKER_HINTS.get(b, b) for b in e.blockers)
        _err(f"not ready to import: {hints}")
        return 1
    except ImportFailedError as e:
        _err(f"import failed: {e}")
        return 1
    except (SQLAlchemyError, RuntimeError) as e:
        _err(f"database error: {e}")
        return 1

    message = import_status_message(result, account)
    if result.skipped:
        message += f" Kept {result.skipped} existing balance(s) on the same dates."
    typer.echo(message)
    return 0


def cmd_accounts(*, database_url: str | None = None) -> int:
    """Print the account directory as ``<id>\\t<name>\\t<type>`` lines."""

    from db.client import session_scope
    from .persistence import SqlAccountDirectory

    try:
        with session_scope(database_url=database_url) as session:
            accounts = SqlAccountDirectory(session).list_accounts()
    except (SQLAlchemyError, RuntimeError) as e:
        _err(f"failed to load accounts: {e}")
        return 1

    if not accounts:
        typer.echo("No accounts available. Create an account first.")
        return 0
    for a in accounts:
        typer.echo(f"{a.id}\t{a.name}\t{a.type}")
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import daily account balances from bank statement CSV exports. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults).
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a bank statement CSV export",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
STATEMENT_TYPE_OPTION: OptionInfo = typer.Option(
    "--statement-type",
    help="balance: rows state balances; transactions: rows state money in/out.",
    case_sensitive=False,
)
DATE_FORMAT_OPTION: OptionInfo = typer.Option(
    "--date-format",
    help="Order of ambiguous numeric dates (auto, mdy, dmy, ymd).",
    case_sensitive=False,
)
DATE_COLUMN_OPTION: OptionInfo = typer.Option(
    "--date-column", min=0, help="0-based date column (auto-detected when omitted)."
)
VALUE_COLUMN_OPTION: OptionInfo = typer.Option(
    "--value-column",
    min=0,
    help="0-based balance/amount column (auto-detected when omitted).",
)
HEADER_OPTION: OptionInfo = typer.Option(
    "--header/--no-header", help="Whether the first row holds column names."
)
STARTING_BALANCE_OPTION: OptionInfo = typer.Option(
    "--starting-balance", help="Opening balance (required for transactions mode)."
)
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
CURRENCY_OPTION: OptionInfo = typer.Option("--currency", help="Currency code for display.")
PREVIEW_ACCOUNT_OPTION: OptionInfo = typer.Option(
    "--account", help="Account id whose stored balances are checked for conflicts."
)
IMPORT_ACCOUNT_OPTION: OptionInfo = typer.Option(
    "--account", help="Account id to assign the balances to."
)
REPLACE_OPTION: OptionInfo = typer.Option(
    "--replace/--keep-existing",
    help="Overwrite stored balances that fall on the same dates.",
)


@app.command("preview")
def preview_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    statement_type: Annotated[StatementType, STATEMENT_TYPE_OPTION] = StatementType.BALANCE,
    date_format: Annotated[DateFormatPolicy, DATE_FORMAT_OPTION] = DateFormatPolicy.AUTO,
    date_column: Annotated[int | None, DATE_COLUMN_OPTION] = None,
    value_column: Annotated[int | None, VALUE_COLUMN_OPTION] = None,
    header: Annotated[bool, HEADER_OPTION] = True,
    starting_balance: Annotated[str, STARTING_BALANCE_OPTION] = "",
    account: Annotated[str | None, PREVIEW_ACCOUNT_OPTION] = None,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    currency: Annotated[str, CURRENCY_OPTION] = "USD",
) -> None:
    """Show detected columns, a row preview and the import summary."""

    config = _build_config(
        statement_type=statement_type,
        date_format=date_format,
        has_header_row=header,
        date_column=date_column,
        value_column=value_column,
        account_id=account,
        starting_balance=starting_balance,
    )
    rc = cmd_preview(csv_path, config=config, database_url=database_url, currency=currency)
    raise typer.Exit(rc)


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    account: Annotated[str, IMPORT_ACCOUNT_OPTION],
    statement_type: Annotated[StatementType, STATEMENT_TYPE_OPTION] = StatementType.BALANCE,
    date_format: Annotated[DateFormatPolicy, DATE_FORMAT_OPTION] = DateFormatPolicy.AUTO,
    date_column: Annotated[int | None, DATE_COLUMN_OPTION] = None,
    value_column: Annotated[int | None, VALUE_COLUMN_OPTION] = None,
    header: Annotated[bool, HEADER_OPTION] = True,
    starting_balance: Annotated[str, STARTING_BALANCE_OPTION] = "",
    replace: Annotated[bool, REPLACE_OPTION] = True,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
    currency: Annotated[str, CURRENCY_OPTION] = "USD",
) -> None:
    """Import daily balances for one account."""

    config = _build_config(
        statement_type=statement_type,
        date_format=date_format,
        has_header_row=header,
        date_column=date_column,
        value_column=value_column,
        account_id=account,
        starting_balance=starting_balance,
        replace_existing=replace,
    )
    rc = cmd_import(csv_path, config=config, database_url=database_url, currency=currency)
    raise typer.Exit(rc)


@app.command("accounts")
def accounts_cmd(
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """List accounts balances can be imported into."""

    raise typer.Exit(cmd_accounts(database_url=database_url))


@app.callback()
def _root() -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures package logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_import.cli`
    app()
