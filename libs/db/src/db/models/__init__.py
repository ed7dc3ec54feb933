"""Shared SQLAlchemy models registry for the workspace database.

Currently includes the account and daily-balance models used by
``statement_import``.
"""

from .balances import Account, AccountBalance, Base

__all__ = [
    "Base",
    "Account",
    "AccountBalance",
]
