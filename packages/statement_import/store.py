"""Collaborator interfaces and the import hand-off.

The engine never writes anywhere itself. It reads existing balances through a
:class:`BalanceStore` (for conflict counting) and, once a preview is ready,
hands the ordered entries to the store's import operation. How same-date
records are resolved is the store's business, steered by the caller's
``replace_existing`` flag.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from .errors import ImportFailedError, ImportNotReadyError
from .logging_setup import get_logger
from .models import AccountInfo, ExistingBalance, ImportEntry, ImportPreview, ImportResult

logger = get_logger("statement_import.store")


class AccountDirectory(Protocol):
    """Read-only account lookup (id -> name/type)."""

    def list_accounts(self) -> list[AccountInfo]: ...

    def get_account(self, account_id: str) -> AccountInfo | None: ...


class BalanceStore(Protocol):
    """Persisted daily balances keyed by ``(account_id, date)``."""

    def existing_balances(self, account_id: str) -> list[ExistingBalance]: ...

    def import_balances(
        self, entries: Sequence[ImportEntry], *, replace_existing: bool
    ) -> ImportResult: ...


def import_preview(
    store: BalanceStore,
    preview: ImportPreview,
    *,
    replace_existing: bool,
) -> ImportResult:
    """Hand a ready preview's entries to ``store``.

    Raises :class:`ImportNotReadyError` when the preview has blockers and
    :class:`ImportFailedError` when the store rejects the write.
    """

    if not preview.ready:
        raise ImportNotReadyError([b.value for b in preview.blockers])

    account_id = preview.entries[0].account_id
    logger.info(
        "importing %d balances for account %s (replace_existing=%s, conflicts=%d)",
        len(preview.entries),
        account_id,
        replace_existing,
        preview.conflicts,
    )
    try:
        result = store.import_balances(preview.entries, replace_existing=replace_existing)
    except (SQLAlchemyError, OSError) as exc:
        raise ImportFailedError(f"balance store rejected the import: {exc}") from exc
    logger.info(
        "import finished for account %s: written=%d skipped=%d",
        result.account_id,
        result.written,
        result.skipped,
    )
    return result


def import_status_message(result: ImportResult, account: AccountInfo | None) -> str:
    """Human-readable confirmation, e.g. ``Imported 3 daily balances for Checking.``"""

    n = result.written
    noun = "daily balance" if n == 1 else "daily balances"
    name = account.name if account is not None else "selected account"
    return f"Imported {n} {noun} for {name}."


__all__ = [
    "AccountDirectory",
    "BalanceStore",
    "import_preview",
    "import_status_message",
]
