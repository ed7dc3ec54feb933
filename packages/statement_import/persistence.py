# ruff: noqa: I001
"""SQL-backed account directory and balance store.

Functions here read accounts and balances from the shared database owned by
``libs/db`` and write imported balances to ``account_balances``. They rely on
the ORM models in ``db.models.balances`` and a session from ``db.client``;
committing is the caller's job (``session_scope`` does it).

Idempotency rules for imports:
- rows are upserted on ``(account_id, date)``;
- ``replace_existing=True`` overwrites the stored amount for a clashing date,
  ``replace_existing=False`` keeps the stored amount and skips the entry.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from db.models.balances import Account, AccountBalance
from .models import AccountInfo, ExistingBalance, ImportEntry, ImportResult


def _to_decimal_2(d: Decimal) -> Decimal:
    return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _dialect_insert(session: Session) -> Any:
    """Return the dialect-specific ``insert`` that supports ON CONFLICT."""

    name = session.get_bind().dialect.name
    if name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert

        return insert
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert

        return insert
    raise RuntimeError(f"unsupported database dialect for balance upserts: {name!r}")


def _to_info(account: Account) -> AccountInfo:
    return AccountInfo(id=account.id, name=account.name, type=account.type)


def list_accounts(session: Session) -> list[AccountInfo]:
    rows = session.execute(select(Account).order_by(Account.name, Account.id)).scalars()
    return [_to_info(a) for a in rows]


def get_account(session: Session, account_id: str) -> AccountInfo | None:
    account = session.get(Account, account_id)
    return _to_info(account) if account is not None else None


def load_existing_balances(session: Session, *, account_id: str) -> list[ExistingBalance]:
    """Return the stored balances of ``account_id`` ordered by date."""

    stmt = (
        select(AccountBalance.account_id, AccountBalance.date, AccountBalance.amount)
        .where(AccountBalance.account_id == account_id)
        .order_by(AccountBalance.date)
    )
    return [
        ExistingBalance(account_id=row.account_id, date=row.date, amount=Decimal(row.amount))
        for row in session.execute(stmt)
    ]


def upsert_balances(
    session: Session,
    *,
    entries: Sequence[ImportEntry],
    replace_existing: bool,
) -> ImportResult:
    """Insert or update daily balances for a single account.

    All ``entries`` must belong to the same account. Returns how many entries
    were written and how many were skipped because a stored balance for the
    same date was kept.
    """

    if not entries:
        raise ValueError("no entries to import")
    account_ids = {e.account_id for e in entries}
    if len(account_ids) != 1:
        raise ValueError(f"entries span multiple accounts: {sorted(account_ids)}")
    (account_id,) = account_ids

    existing_dates = {
        b.date for b in load_existing_balances(session, account_id=account_id)
    }
    clashes = sum(1 for e in entries if e.date in existing_dates)

    now = func.current_timestamp()
    payloads = [
        {
            "account_id": e.account_id,
            "date": e.date,
            "amount": _to_decimal_2(e.amount),
            "updated_at": now,
        }
        for e in entries
    ]

    insert = _dialect_insert(session)
    stmt = insert(AccountBalance).values(payloads)
    if replace_existing:
        stmt = stmt.on_conflict_do_update(
            index_elements=[AccountBalance.account_id, AccountBalance.date],
            set_={
                "amount": stmt.excluded.amount,
                "updated_at": now,
            },
        )
    else:
        stmt = stmt.on_conflict_do_nothing(
            index_elements=[AccountBalance.account_id, AccountBalance.date],
        )
    session.execute(stmt)

    skipped = 0 if replace_existing else clashes
    return ImportResult(account_id=account_id, written=len(entries) - skipped, skipped=skipped)


class SqlAccountDirectory:
    """:class:`~statement_import.store.AccountDirectory` over a session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def list_accounts(self) -> list[AccountInfo]:
        return list_accounts(self._session)

    def get_account(self, account_id: str) -> AccountInfo | None:
        return get_account(self._session, account_id)


class SqlBalanceStore:
    """:class:`~statement_import.store.BalanceStore` over a session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def existing_balances(self, account_id: str) -> list[ExistingBalance]:
        return load_existing_balances(self._session, account_id=account_id)

    def import_balances(
        self, entries: Sequence[ImportEntry], *, replace_existing: bool
    ) -> ImportResult:
        return upsert_balances(
            self._session, entries=entries, replace_existing=replace_existing
        )


__all__ = [
    "list_accounts",
    "get_account",
    "load_existing_balances",
    "upsert_balances",
    "SqlAccountDirectory",
    "SqlBalanceStore",
]
