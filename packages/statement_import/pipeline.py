"""Statement normalization pipeline.

Stages, leaves first::

    parse_csv -> detect_columns -> normalize_rows -> dedupe_rows
              -> build_import_entries -> count_existing_date_matches

:func:`recompute` runs every stage after tokenization as one pure function of
``(rows, config, existing balances)``. Any change to the configuration (a
column override, a mode flip, a new starting balance) is a new call; nothing
is cached or updated in place, so identical inputs give identical previews.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date
from decimal import Decimal

from .columns import column_labels, detect_columns
from .errors import EmptyStatementError
from .logging_setup import get_logger
from .models import (
    DateFormatPolicy,
    DateRange,
    DedupedEntry,
    DedupeResult,
    ExistingBalance,
    ImportBlocker,
    ImportConfig,
    ImportEntry,
    ImportPreview,
    ImportSummary,
    NormalizedRow,
    RawRow,
    StatementType,
)
from .normalizers import normalize_date, parse_amount
from .tokenizer import parse_csv

logger = get_logger("statement_import.pipeline")


# ---------------------------------------------------------------------------
# Tokenize (structural checks)
# ---------------------------------------------------------------------------


def prepare_statement(text: str) -> list[RawRow]:
    """Tokenize ``text``; raise :class:`EmptyStatementError` when nothing is left."""

    rows = parse_csv(text)
    if not rows:
        raise EmptyStatementError("No rows found. Please check the CSV formatting.")
    return rows


# ---------------------------------------------------------------------------
# Row normalization
# ---------------------------------------------------------------------------


def _cell(row: RawRow, index: int) -> str:
    return row[index] if index < len(row) else ""


def normalize_rows(
    rows: Sequence[RawRow],
    *,
    has_header_row: bool,
    date_column: int,
    value_column: int,
    date_format: DateFormatPolicy = DateFormatPolicy.AUTO,
) -> list[NormalizedRow]:
    """Normalize every data row; invalid rows are kept and flagged."""

    data_rows = rows[1:] if has_header_row else rows
    offset = 2 if has_header_row else 1
    out: list[NormalizedRow] = []
    for i, row in enumerate(data_rows):
        raw_date = _cell(row, date_column)
        raw_value = _cell(row, value_column)
        out.append(
            NormalizedRow(
                row_number=i + offset,
                raw_date=raw_date,
                raw_value=raw_value,
                date=normalize_date(raw_date, date_format),
                amount=parse_amount(raw_value),
            )
        )
    return out


def valid_rows(rows: Iterable[NormalizedRow]) -> list[NormalizedRow]:
    return [r for r in rows if r.is_valid]


# ---------------------------------------------------------------------------
# Per-day aggregation
# ---------------------------------------------------------------------------


def dedupe_rows(rows: Iterable[NormalizedRow], statement_type: StatementType) -> DedupeResult:
    """Collapse valid rows to one entry per calendar date.

    Balance snapshots supersede each other (the last row in input order wins);
    transaction movements on the same day are summed. In both modes each row
    beyond the first for a date counts once in ``duplicate_count``.
    """

    by_date: dict[date, Decimal] = {}
    duplicate_count = 0
    for row in rows:
        if row.date is None or row.amount is None:
            continue
        if row.date in by_date:
            duplicate_count += 1
            if statement_type is StatementType.TRANSACTIONS:
                by_date[row.date] += row.amount
                continue
        by_date[row.date] = row.amount

    entries = tuple(DedupedEntry(date=d, amount=by_date[d]) for d in sorted(by_date))
    return DedupeResult(entries=entries, duplicate_count=duplicate_count)


# ---------------------------------------------------------------------------
# Import entries
# ---------------------------------------------------------------------------


def reconstruct_running_balance(
    account_id: str,
    starting_balance: Decimal,
    entries: Iterable[DedupedEntry],
) -> list[ImportEntry]:
    """Emit the closing balance of each day, oldest first.

    ``entries`` must already be in ascending date order (as produced by
    :func:`dedupe_rows`); each day's balance depends on every earlier day.
    """

    running = starting_balance
    out: list[ImportEntry] = []
    for entry in entries:
        running += entry.amount
        out.append(ImportEntry(account_id=account_id, date=entry.date, amount=running))
    return out


def build_import_entries(
    deduped: DedupeResult,
    *,
    account_id: str | None,
    statement_type: StatementType,
    starting_balance: Decimal | None,
) -> list[ImportEntry]:
    """Turn deduped entries into store-ready balances.

    Returns an empty list when no account is selected or, in transactions
    mode, when the starting balance is missing; the opening balance is never
    guessed.
    """

    if not account_id:
        return []
    if statement_type is StatementType.BALANCE:
        return [
            ImportEntry(account_id=account_id, date=e.date, amount=e.amount)
            for e in deduped.entries
        ]
    if starting_balance is None:
        return []
    return reconstruct_running_balance(account_id, starting_balance, deduped.entries)


# ---------------------------------------------------------------------------
# Conflicts and summary
# ---------------------------------------------------------------------------


def count_existing_date_matches(
    entries: Sequence[ImportEntry],
    existing: Iterable[ExistingBalance],
    *,
    account_id: str | None,
) -> int:
    """Count entries whose date already has a stored balance for the account."""

    if not account_id or not entries:
        return 0
    existing_dates = {b.date for b in existing if b.account_id == account_id}
    return sum(1 for e in entries if e.date in existing_dates)


def summarize(rows: Sequence[NormalizedRow], deduped: DedupeResult) -> ImportSummary | None:
    if not rows:
        return None
    n_valid = sum(1 for r in rows if r.is_valid)
    date_range = (
        DateRange(start=deduped.entries[0].date, end=deduped.entries[-1].date)
        if deduped.entries
        else None
    )
    return ImportSummary(
        total_rows=len(rows),
        valid_rows=n_valid,
        skipped_rows=len(rows) - n_valid,
        unique_days=len(deduped.entries),
        duplicate_count=deduped.duplicate_count,
        date_range=date_range,
    )


# ---------------------------------------------------------------------------
# Full recomputation
# ---------------------------------------------------------------------------


def recompute(
    rows: Sequence[RawRow],
    config: ImportConfig,
    existing: Iterable[ExistingBalance] = (),
) -> ImportPreview:
    """Run detection through conflict counting for one configuration."""

    statement_type = config.statement_type
    labels = column_labels(rows, has_header_row=config.has_header_row)
    columns = detect_columns(labels, statement_type, config.columns)
    date_column = columns.date
    value_column = columns.value_index(statement_type)

    if date_column is None or value_column is None:
        normalized: list[NormalizedRow] = []
    else:
        normalized = normalize_rows(
            rows,
            has_header_row=config.has_header_row,
            date_column=date_column,
            value_column=value_column,
            date_format=config.date_format,
        )

    deduped = dedupe_rows(valid_rows(normalized), statement_type)

    starting_balance = (
        parse_amount(config.starting_balance)
        if statement_type is StatementType.TRANSACTIONS
        else None
    )
    entries = build_import_entries(
        deduped,
        account_id=config.account_id,
        statement_type=statement_type,
        starting_balance=starting_balance,
    )
    conflicts = count_existing_date_matches(entries, existing, account_id=config.account_id)

    blockers: list[ImportBlocker] = []
    if not config.account_id:
        blockers.append(ImportBlocker.NO_ACCOUNT)
    if date_column is None:
        blockers.append(ImportBlocker.NO_DATE_COLUMN)
    if value_column is None:
        blockers.append(ImportBlocker.NO_VALUE_COLUMN)
    if statement_type is StatementType.TRANSACTIONS and starting_balance is None:
        blockers.append(ImportBlocker.NO_STARTING_BALANCE)
    if not entries:
        blockers.append(ImportBlocker.NO_ENTRIES)

    summary = summarize(normalized, deduped)
    logger.debug(
        "recomputed %s statement: rows=%d valid=%d days=%d duplicates=%d entries=%d conflicts=%d",
        statement_type.value,
        len(normalized),
        summary.valid_rows if summary else 0,
        len(deduped.entries),
        deduped.duplicate_count,
        len(entries),
        conflicts,
    )

    return ImportPreview(
        labels=labels,
        columns=columns,
        statement_type=statement_type,
        rows=tuple(normalized),
        deduped=deduped,
        entries=tuple(entries),
        summary=summary,
        conflicts=conflicts,
        blockers=tuple(blockers),
    )


def build_preview(
    text: str,
    config: ImportConfig,
    existing: Iterable[ExistingBalance] = (),
) -> ImportPreview:
    """Tokenize ``text`` and run :func:`recompute` over it."""

    return recompute(prepare_statement(text), config, existing)


__all__ = [
    "prepare_statement",
    "normalize_rows",
    "valid_rows",
    "dedupe_rows",
    "reconstruct_running_balance",
    "build_import_entries",
    "count_existing_date_matches",
    "summarize",
    "recompute",
    "build_preview",
]
