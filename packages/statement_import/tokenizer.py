"""CSV tokenizer for bank statement exports.

A single-state scanner (inside/outside a quoted field) rather than the stdlib
:mod:`csv` reader: a stray quote must consume the rest of the input instead of
raising ``csv.Error``, and carriage returns are dropped wherever they appear
outside quotes.

Rules
-----
- ``"`` outside quotes opens a quoted field; the quote itself is not kept.
- Inside quotes, ``""`` is a literal quote and a single ``"`` closes the field.
- Outside quotes, ``,`` ends a field and ``\\n`` ends the field and the row.
- Outside quotes ``\\r`` is ignored, so CRLF reads as ``\\n``; a bare CR joins
  the text around it.
- Inside quotes every character other than ``"`` is kept verbatim, ``\\r``
  included.
- Rows whose fields are all blank are dropped.
"""

from __future__ import annotations

from .logging_setup import get_logger
from .models import RawRow

logger = get_logger("statement_import.tokenizer")


def _is_blank(row: RawRow) -> bool:
    return all(cell.strip() == "" for cell in row)


def parse_csv(text: str) -> list[RawRow]:
    """Split ``text`` into rows of raw string fields."""

    rows: list[RawRow] = []
    current_row: list[str] = []
    field: list[str] = []
    in_quotes = False

    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        i += 1

        if in_quotes:
            if ch == '"':
                if i < n and text[i] == '"':
                    field.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                field.append(ch)
            continue

        if ch == '"':
            in_quotes = True
        elif ch == ",":
            current_row.append("".join(field))
            field = []
        elif ch == "\r":
            continue
        elif ch == "\n":
            current_row.append("".join(field))
            rows.append(tuple(current_row))
            current_row = []
            field = []
        else:
            field.append(ch)

    if field or current_row:
        current_row.append("".join(field))
        rows.append(tuple(current_row))

    kept = [row for row in rows if not _is_blank(row)]
    if in_quotes:
        logger.debug("unterminated quoted field consumed the remainder of the input")
    logger.debug("tokenized %d rows (%d blank dropped)", len(kept), len(rows) - len(kept))
    return kept


__all__ = ["parse_csv"]
