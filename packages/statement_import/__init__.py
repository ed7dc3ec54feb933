"""Public interface for the ``statement_import`` package.

This module exposes the pipeline functions and public models/types as the
stable import surface. There is no runtime logic here, only re-exports.
"""

from .columns import column_labels, detect_column_index, detect_columns
from .errors import (
    EmptyStatementError,
    ImportFailedError,
    ImportNotReadyError,
    StatementImportError,
    StatementReadError,
)
from .formatting import format_currency
from .models import (
    MAX_PREVIEW_ROWS,
    AccountInfo,
    ColumnLabels,
    ColumnSelection,
    DateFormatPolicy,
    DateRange,
    DedupedEntry,
    DedupeResult,
    ExistingBalance,
    ImportBlocker,
    ImportConfig,
    ImportEntry,
    ImportPreview,
    ImportResult,
    ImportSummary,
    NormalizedRow,
    RawRow,
    StatementType,
)
from .normalizers import normalize_date, parse_amount, parse_date_from_parts
from .pipeline import (
    build_import_entries,
    build_preview,
    count_existing_date_matches,
    dedupe_rows,
    normalize_rows,
    prepare_statement,
    recompute,
    reconstruct_running_balance,
    summarize,
    valid_rows,
)
from .store import AccountDirectory, BalanceStore, import_preview, import_status_message
from .tokenizer import parse_csv

__all__ = [
    # Pipeline
    "parse_csv",
    "prepare_statement",
    "column_labels",
    "detect_column_index",
    "detect_columns",
    "normalize_date",
    "parse_date_from_parts",
    "parse_amount",
    "normalize_rows",
    "valid_rows",
    "dedupe_rows",
    "reconstruct_running_balance",
    "build_import_entries",
    "count_existing_date_matches",
    "summarize",
    "recompute",
    "build_preview",
    # Hand-off
    "AccountDirectory",
    "BalanceStore",
    "import_preview",
    "import_status_message",
    "format_currency",
    # Models / types
    "MAX_PREVIEW_ROWS",
    "RawRow",
    "ColumnLabels",
    "StatementType",
    "DateFormatPolicy",
    "ImportBlocker",
    "ColumnSelection",
    "NormalizedRow",
    "DedupedEntry",
    "DedupeResult",
    "ImportEntry",
    "ExistingBalance",
    "AccountInfo",
    "DateRange",
    "ImportSummary",
    "ImportPreview",
    "ImportResult",
    "ImportConfig",
    # Errors
    "StatementImportError",
    "StatementReadError",
    "EmptyStatementError",
    "ImportNotReadyError",
    "ImportFailedError",
]
