"""Read a statement file into text.

Everything downstream is pure; this is the one place that touches the
filesystem. Exports are expected to be UTF-8, with or without a byte-order
mark (spreadsheet tools often add one). A failure here is structural and ends
processing of the file.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from ..errors import StatementReadError
from ..logging_setup import get_logger

logger = get_logger("statement_import.ingest.loader")


def load_statement_text(path: str | PathLike[str], *, encoding: str = "utf-8-sig") -> str:
    """Return the decoded contents of ``path``.

    Raises :class:`~statement_import.errors.StatementReadError` when the file
    is missing, unreadable, or not valid text in ``encoding``.
    """

    p = Path(path)
    try:
        # newline="" keeps CR/CRLF intact; the tokenizer handles line endings.
        with p.open(encoding=encoding, newline="") as f:
            text = f.read()
    except FileNotFoundError as exc:
        raise StatementReadError(f"File not found: {p}") from exc
    except PermissionError as exc:
        raise StatementReadError(f"Permission denied: {p}") from exc
    except IsADirectoryError as exc:
        raise StatementReadError(f"Not a file: {p}") from exc
    except UnicodeDecodeError as exc:
        raise StatementReadError(f"Unable to decode {p} as {encoding}: {exc}") from exc
    except OSError as exc:
        raise StatementReadError(f"Unable to read {p}: {exc}") from exc

    logger.debug("read %d characters from %s", len(text), p)
    return text


__all__ = ["load_statement_text"]
