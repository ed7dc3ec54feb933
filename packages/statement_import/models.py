"""Data models and type aliases for ``statement_import``.

Every stage of the ingestion pipeline exchanges immutable values defined here:

- tokenizer output (:data:`RawRow`), detector input (:data:`ColumnLabels`)
- per-row normalization (:class:`NormalizedRow`)
- per-day aggregation (:class:`DedupedEntry`, :class:`DedupeResult`)
- the hand-off unit for the balance store (:class:`ImportEntry`)
- the configuration object threaded through recomputation
  (:class:`ImportConfig`) and its result (:class:`ImportPreview`)

Absent parse results are ``None``; there are no sentinel values.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

# Rows shown in previews (CLI table, status screens).
MAX_PREVIEW_ROWS = 8

# ---------------------------------------------------------------------------
# Raw structure
# ---------------------------------------------------------------------------

type RawRow = tuple[str, ...]
"""Ordered text fields of one CSV record; position is significant."""

type ColumnLabels = tuple[str, ...]
"""Display name per column index (header text or ``"Column N"``)."""


class StatementType(StrEnum):
    """Whether rows state balances or signed money movements."""

    BALANCE = "balance"
    TRANSACTIONS = "transactions"


class DateFormatPolicy(StrEnum):
    """Month/day ordering used for ambiguous numeric dates."""

    AUTO = "auto"
    MDY = "mdy"
    DMY = "dmy"
    YMD = "ymd"


class ImportBlocker(StrEnum):
    """Reasons an import cannot be handed to the balance store yet."""

    NO_ACCOUNT = "no_account"
    NO_DATE_COLUMN = "no_date_column"
    NO_VALUE_COLUMN = "no_value_column"
    NO_STARTING_BALANCE = "no_starting_balance"
    NO_ENTRIES = "no_entries"


@dataclass(frozen=True, slots=True)
class ColumnSelection:
    """0-based column roles; ``None`` means unset.

    Balance and amount slots are kept separately so flipping the statement
    type does not lose the other mode's choice.
    """

    date: int | None = None
    balance: int | None = None
    amount: int | None = None

    def value_index(self, statement_type: StatementType) -> int | None:
        if statement_type is StatementType.BALANCE:
            return self.balance
        return self.amount

    def with_value(self, statement_type: StatementType, index: int | None) -> ColumnSelection:
        if statement_type is StatementType.BALANCE:
            return replace(self, balance=index)
        return replace(self, amount=index)


# ---------------------------------------------------------------------------
# Pipeline records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class NormalizedRow:
    """One data row after date/amount normalization.

    ``row_number`` is what a spreadsheet viewer would show (1-based, header
    counted). The row is valid iff both ``date`` and ``amount`` are present.
    """

    row_number: int
    raw_date: str
    raw_value: str
    date: date | None
    amount: Decimal | None

    @property
    def is_valid(self) -> bool:
        return self.date is not None and self.amount is not None


@dataclass(frozen=True, slots=True)
class DedupedEntry:
    date: date
    amount: Decimal


@dataclass(frozen=True, slots=True)
class DedupeResult:
    """Entries in strictly increasing date order plus the repeat count."""

    entries: tuple[DedupedEntry, ...]
    duplicate_count: int


@dataclass(frozen=True, slots=True)
class ImportEntry:
    """A closing balance for one account and day, ready for the store."""

    account_id: str
    date: date
    amount: Decimal


@dataclass(frozen=True, slots=True)
class ExistingBalance:
    """Read view of a persisted balance record."""

    account_id: str
    date: date
    amount: Decimal


@dataclass(frozen=True, slots=True)
class AccountInfo:
    id: str
    name: str
    type: str


@dataclass(frozen=True, slots=True)
class DateRange:
    start: date
    end: date


@dataclass(frozen=True, slots=True)
class ImportSummary:
    total_rows: int
    valid_rows: int
    skipped_rows: int
    unique_days: int
    duplicate_count: int
    date_range: DateRange | None


@dataclass(frozen=True, slots=True)
class ImportPreview:
    """Result of one full recomputation over a tokenized statement."""

    labels: ColumnLabels
    columns: ColumnSelection
    statement_type: StatementType
    rows: tuple[NormalizedRow, ...]
    deduped: DedupeResult
    entries: tuple[ImportEntry, ...]
    summary: ImportSummary | None
    conflicts: int
    blockers: tuple[ImportBlocker, ...]

    @property
    def ready(self) -> bool:
        return not self.blockers

    @property
    def preview_rows(self) -> tuple[NormalizedRow, ...]:
        return self.rows[:MAX_PREVIEW_ROWS]


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome reported by a balance store after an import."""

    account_id: str
    written: int
    skipped: int


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ImportConfig(BaseModel):
    """Every user-adjustable input of the pipeline apart from the raw text.

    Instances are immutable; an override (column pick, mode flip, new starting
    balance) is a new config passed to a fresh recomputation.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    has_header_row: bool = True
    statement_type: StatementType = StatementType.BALANCE
    date_format: DateFormatPolicy = DateFormatPolicy.AUTO
    date_column: int | None = None
    balance_column: int | None = None
    amount_column: int | None = None
    account_id: str | None = None
    # Raw text as typed; parsed with the amount normalizer.
    starting_balance: str = ""
    replace_existing: bool = True

    @field_validator("date_column", "balance_column", "amount_column")
    @classmethod
    def _non_negative_index(cls, v: int | None) -> int | None:
        if v is None:
            return None
        if v < 0:
            raise ValueError("column index must be >= 0")
        return v

    @field_validator("account_id")
    @classmethod
    def _blank_account_is_unset(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

    @property
    def columns(self) -> ColumnSelection:
        return ColumnSelection(
            date=self.date_column,
            balance=self.balance_column,
            amount=self.amount_column,
        )

    def with_columns(self, selection: ColumnSelection) -> ImportConfig:
        return self.model_copy(
            update={
                "date_column": selection.date,
                "balance_column": selection.balance,
                "amount_column": selection.amount,
            }
        )


__all__ = [
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
]
