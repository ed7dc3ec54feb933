"""Exception taxonomy for statement ingestion.

Per-row parse failures are not exceptional; they surface as ``None`` fields on
:class:`~statement_import.models.NormalizedRow`. Exceptions are reserved for
conditions that end processing of a file or an import attempt.
"""

from __future__ import annotations

from collections.abc import Sequence


class StatementImportError(Exception):
    """Base class for all errors raised by ``statement_import``."""


class StatementReadError(StatementImportError):
    """The statement file could not be read or decoded."""


class EmptyStatementError(StatementImportError):
    """Tokenization produced no rows; nothing can be imported from this file."""


class ImportNotReadyError(StatementImportError):
    """The configuration is incomplete, so no entries may be handed off."""

    def __init__(self, blockers: Sequence[str]) -> None:
        self.blockers: tuple[str, ...] = tuple(blockers)
        super().__init__("import is not ready: " + ", ".join(self.blockers))


class ImportFailedError(StatementImportError):
    """The balance store rejected the final write."""


__all__ = [
    "StatementImportError",
    "StatementReadError",
    "EmptyStatementError",
    "ImportNotReadyError",
    "ImportFailedError",
]
