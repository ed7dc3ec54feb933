from __future__ import annotations

from statement_import import (
    ColumnSelection,
    StatementType,
    column_labels,
    detect_column_index,
    detect_columns,
)
from statement_import.columns import AMOUNT_KEYWORDS, BALANCE_KEYWORDS, DATE_KEYWORDS

LABELS = ("Date", "Description", "Amount", "Balance")


def test_labels_use_header_and_fill_blanks():
    rows = [("Date", "", " Balance "), ("1", "2", "3", "4")]
    assert column_labels(rows, has_header_row=True) == ("Date", "Column 2", "Balance", "Column 4")


def test_labels_without_header_are_numbered():
    rows = [("Date", "Balance"), ("1", "2", "3")]
    assert column_labels(rows, has_header_row=False) == ("Column 1", "Column 2", "Column 3")


def test_labels_of_no_rows():
    assert column_labels([], has_header_row=True) == ()


def test_first_matching_label_wins():
    labels = ["Transaction Date", "Description", "Amount"]
    # "transaction date" contains the "transaction" amount keyword.
    assert detect_column_index(labels, AMOUNT_KEYWORDS) == 0
    assert detect_column_index(labels, DATE_KEYWORDS) == 0


def test_earliest_matching_label_beats_exact_match():
    labels = ["Date", "Closing Balance Ref", "Balance"]
    assert detect_column_index(labels, BALANCE_KEYWORDS) == 1


def test_posting_date_and_running_balance():
    labels = ("Posting Date", "Running Balance")
    assert detect_columns(labels, StatementType.BALANCE) == ColumnSelection(date=0, balance=1)


def test_keyword_match_is_case_insensitive_substring():
    assert detect_column_index(["id", "POSTING DATE"], DATE_KEYWORDS) == 1
    assert detect_column_index(["id", "memo"], DATE_KEYWORDS) is None


def test_detect_balance_mode():
    assert detect_columns(LABELS, StatementType.BALANCE) == ColumnSelection(date=0, balance=3)


def test_detect_transactions_mode():
    assert detect_columns(LABELS, StatementType.TRANSACTIONS) == ColumnSelection(date=0, amount=2)


def test_mode_flip_keeps_other_slot():
    sel = detect_columns(LABELS, StatementType.BALANCE)
    flipped = detect_columns(LABELS, StatementType.TRANSACTIONS, sel)
    assert flipped == ColumnSelection(date=0, balance=3, amount=2)


def test_in_bounds_override_is_kept():
    current = ColumnSelection(date=1, balance=2)
    assert detect_columns(LABELS, StatementType.BALANCE, current) == current


def test_out_of_bounds_selection_is_redetected():
    current = ColumnSelection(date=9, balance=7)
    assert detect_columns(LABELS, StatementType.BALANCE, current) == ColumnSelection(
        date=0, balance=3
    )


def test_fallback_positions_without_keywords():
    assert detect_columns(("Column 1", "Column 2", "Column 3"), StatementType.BALANCE) == (
        ColumnSelection(date=0, balance=1)
    )
    assert detect_columns(("Column 1",), StatementType.TRANSACTIONS) == ColumnSelection(
        date=0, amount=0
    )


def test_no_columns_leaves_everything_unset():
    assert detect_columns((), StatementType.BALANCE, ColumnSelection(date=0)) == ColumnSelection()
