from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy.exc import SQLAlchemyError

from statement_import import (
    AccountInfo,
    ExistingBalance,
    ImportConfig,
    ImportEntry,
    ImportFailedError,
    ImportNotReadyError,
    ImportResult,
    build_preview,
    import_preview,
    import_status_message,
)

CSV = "Date,Balance\n2024-01-05,10.00\n2024-01-06,12.50\n"


class _RecordingStore:
    def __init__(self, *, fail: bool = False) -> None:
        self.calls: list[tuple[tuple[ImportEntry, ...], bool]] = []
        self._fail = fail

    def existing_balances(self, account_id: str) -> list[ExistingBalance]:
        return []

    def import_balances(
        self, entries: Sequence[ImportEntry], *, replace_existing: bool
    ) -> ImportResult:
        if self._fail:
            raise SQLAlchemyError("disk full")
        self.calls.append((tuple(entries), replace_existing))
        return ImportResult(account_id=entries[0].account_id, written=len(entries), skipped=0)


def test_ready_preview_is_handed_to_store_in_date_order():
    store = _RecordingStore()
    preview = build_preview(CSV, ImportConfig(account_id="chk"))

    result = import_preview(store, preview, replace_existing=False)

    assert result == ImportResult(account_id="chk", written=2, skipped=0)
    ((entries, replace_existing),) = store.calls
    assert replace_existing is False
    assert [e.date for e in entries] == [date(2024, 1, 5), date(2024, 1, 6)]
    assert entries[1].amount == Decimal("12.50")


def test_blocked_preview_never_reaches_store():
    store = _RecordingStore()
    preview = build_preview(CSV, ImportConfig())

    with pytest.raises(ImportNotReadyError) as excinfo:
        import_preview(store, preview, replace_existing=True)

    assert excinfo.value.blockers == ("no_account", "no_entries")
    assert store.calls == []


def test_store_failure_is_wrapped():
    preview = build_preview(CSV, ImportConfig(account_id="chk"))
    with pytest.raises(ImportFailedError, match="disk full"):
        import_preview(_RecordingStore(fail=True), preview, replace_existing=True)


def test_status_message_names_account():
    account = AccountInfo(id="chk", name="Everyday Checking", type="checking")
    result = ImportResult(account_id="chk", written=3, skipped=0)
    assert import_status_message(result, account) == (
        "Imported 3 daily balances for Everyday Checking."
    )


def test_status_message_singular_and_unknown_account():
    result = ImportResult(account_id="chk", written=1, skipped=0)
    assert import_status_message(result, None) == "Imported 1 daily balance for selected account."
