"""Column labels and column-role detection.

Detection is a keyword scan over lower-cased, trimmed labels: the first label
(left to right) containing any keyword of the role wins. Keyword order does not
matter, so ``"Transaction Date"`` claims the amount role ahead of a later
``"Amount"`` column; an explicit override is the way out of such a header.

A selection that is already set and still in bounds is never re-detected; this
is how user overrides survive a mode flip or a header toggle.
"""

from __future__ import annotations

from collections.abc import Sequence

from .logging_setup import get_logger
from .models import ColumnLabels, ColumnSelection, RawRow, StatementType

logger = get_logger("statement_import.columns")

DATE_KEYWORDS: tuple[str, ...] = ("date", "posting", "transaction date")
BALANCE_KEYWORDS: tuple[str, ...] = (
    "balance",
    "ending balance",
    "closing balance",
    "running balance",
)
AMOUNT_KEYWORDS: tuple[str, ...] = (
    "amount",
    "transaction",
    "debit",
    "credit",
    "withdrawal",
    "deposit",
)


def _normalize_label(value: str) -> str:
    return value.strip().lower()


def column_labels(rows: Sequence[RawRow], *, has_header_row: bool) -> ColumnLabels:
    """Return one label per column of the widest row.

    Header cells are used when ``has_header_row`` is set and the cell is not
    blank; every other column is labelled ``"Column N"`` (1-based).
    """

    width = max((len(r) for r in rows), default=0)
    header: RawRow = rows[0] if has_header_row and rows else ()
    labels: list[str] = []
    for i in range(width):
        text = header[i].strip() if i < len(header) else ""
        labels.append(text or f"Column {i + 1}")
    return tuple(labels)


def detect_column_index(labels: Sequence[str], keywords: Sequence[str]) -> int | None:
    """Return the index of the first label containing one of ``keywords``."""

    for i, label in enumerate(labels):
        normalized = _normalize_label(label)
        if any(keyword in normalized for keyword in keywords):
            return i
    return None


def _in_bounds(index: int | None, width: int) -> bool:
    return index is not None and 0 <= index < width


def _fallback_value_index(width: int) -> int:
    return min(1, width - 1)


def detect_columns(
    labels: Sequence[str],
    statement_type: StatementType,
    current: ColumnSelection | None = None,
) -> ColumnSelection:
    """Fill unset or out-of-bounds roles for ``statement_type``.

    Only the value slot of the active mode is touched; the other mode's slot
    is carried over unchanged. With no columns at all every role is unset.
    """

    current = current or ColumnSelection()
    width = len(labels)
    if width == 0:
        return ColumnSelection()

    date_index = current.date
    if not _in_bounds(date_index, width):
        detected = detect_column_index(labels, DATE_KEYWORDS)
        date_index = detected if detected is not None else 0
        logger.debug("date column detected at %d", date_index)

    value_index = current.value_index(statement_type)
    if not _in_bounds(value_index, width):
        keywords = (
            BALANCE_KEYWORDS if statement_type is StatementType.BALANCE else AMOUNT_KEYWORDS
        )
        detected = detect_column_index(labels, keywords)
        value_index = detected if detected is not None else _fallback_value_index(width)
        logger.debug("%s value column detected at %d", statement_type.value, value_index)

    selection = ColumnSelection(
        date=date_index, balance=current.balance, amount=current.amount
    )
    return selection.with_value(statement_type, value_index)


__all__ = [
    "DATE_KEYWORDS",
    "BALANCE_KEYWORDS",
    "AMOUNT_KEYWORDS",
    "column_labels",
    "detect_column_index",
    "detect_columns",
]
