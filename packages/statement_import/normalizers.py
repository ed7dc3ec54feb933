"""Date and amount normalizers for statement cells.

Both normalizers return ``None`` for text they cannot interpret; a bad cell
marks its row invalid and is never an exception.

Dates
-----
Recognized syntaxes, tried in order:

1. ``YYYY-M-D`` / ``YYYY/M/D`` (year first) read as year-month-day.
2. ``N-N-YYYY`` / ``N/N/YYYY`` (year last) resolved by the
   :class:`~statement_import.models.DateFormatPolicy`. No further fallback.
3. Three dot-separated parts (``D.M.YYYY``) resolved by the policy.
4. A generic parse (:func:`dateutil.parser.parse`); any time is dropped.
   Text with no letters and a single short number (``"12"``, ``"2024"``) is
   rejected first: the parser would fill the gaps from a default date.
   Compact ``YYYYMMDD`` still goes through.

Every candidate must survive a calendar round-trip, so ``02/30/2024`` or a
month of 13 is rejected instead of rolling over into the next month.

Under ``auto`` a first component above 12 selects day-month-year, otherwise
month-day-year. This is best effort: ``03/04/2024`` is read as March 4th.

Amounts
-------
``(1,234.50)`` is negative (accounting style), as is a leading ``-`` left after
currency symbols (any Unicode ``Sc`` character), a leading or trailing
three-letter currency code, thousands separators and whitespace are stripped.
Sign markers apply to the absolute value of the numeral.
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil import parser as dtparse

from .models import DateFormatPolicy

_ISO_LIKE = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")
_YEAR_LAST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")

# ISO 4217-style code before or after the numeral ("CHF 10", "12.00 USD").
_CURRENCY_CODE = re.compile(r"^[A-Z]{3}(?=[\s\d(+-])|(?<=[\d\s)])[A-Z]{3}$")
_DIGIT_RUN = re.compile(r"\d+")

# Missing date components default to a fixed day so the generic parse does not
# depend on today's date.
_FALLBACK_DEFAULT = datetime(2000, 1, 1)


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def _calendar_date(year: int, month: int, day: int) -> date | None:
    # date() raises instead of rolling over, which is the round-trip check.
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _as_int(part: str) -> int | None:
    return int(part) if part.isascii() and part.isdigit() else None


def parse_date_from_parts(parts: list[str], policy: DateFormatPolicy) -> date | None:
    """Resolve a three-part numeric date according to ``policy``.

    ``ymd`` applies only when the first part has four digits; ``mdy``/``dmy``
    only when the last part has four digits. Anything else is unresolved.
    """

    if len(parts) != 3:
        return None
    p1, p2, p3 = (p.strip() for p in parts)
    if not p1 or not p2 or not p3:
        return None

    a, b, c = _as_int(p1), _as_int(p2), _as_int(p3)
    if a is None or b is None or c is None:
        return None

    if policy is DateFormatPolicy.YMD:
        return _calendar_date(a, b, c) if len(p1) == 4 else None

    if policy in (DateFormatPolicy.MDY, DateFormatPolicy.DMY):
        if len(p3) != 4:
            return None
        if policy is DateFormatPolicy.MDY:
            return _calendar_date(c, a, b)
        return _calendar_date(c, b, a)

    # auto
    if len(p1) == 4:
        return _calendar_date(a, b, c)
    if len(p3) == 4:
        if a > 12 and b <= 12:
            return _calendar_date(c, b, a)
        return _calendar_date(c, a, b)
    return None


def _is_bare_number(s: str) -> bool:
    if any(ch.isalpha() for ch in s):
        return False
    runs = _DIGIT_RUN.findall(s)
    return len(runs) == 1 and len(runs[0]) <= 4


def normalize_date(raw: str, policy: DateFormatPolicy = DateFormatPolicy.AUTO) -> date | None:
    """Return the calendar date written in ``raw``, or ``None``."""

    s = raw.strip()
    if not s:
        return None

    m = _ISO_LIKE.match(s)
    if m:
        return _calendar_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _YEAR_LAST.match(s)
    if m:
        return parse_date_from_parts([m.group(1), m.group(2), m.group(3)], policy)

    dotted = s.split(".")
    if len(dotted) == 3:
        resolved = parse_date_from_parts(dotted, policy)
        if resolved is not None:
            return resolved

    if _is_bare_number(s):
        return None
    try:
        parsed = dtparse.parse(s, default=_FALLBACK_DEFAULT)
    except (ValueError, OverflowError):
        return None
    return _calendar_date(parsed.year, parsed.month, parsed.day)


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def _strip_noise(s: str) -> str:
    # Currency signs, thousands separators and any whitespace (incl. NBSP).
    return "".join(
        ch for ch in s if not (ch.isspace() or ch == "," or unicodedata.category(ch) == "Sc")
    )


def parse_amount(raw: str | None) -> Decimal | None:
    """Return the signed amount written in ``raw``, or ``None``."""

    if raw is None:
        return None
    s = _CURRENCY_CODE.sub("", raw.strip()).strip()
    if not s:
        return None

    negative = False
    if len(s) >= 2 and s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]

    s = _strip_noise(s)

    if s.startswith("-"):
        negative = True
        s = s[1:]

    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    if not value.is_finite():
        return None

    return -abs(value) if negative else value


__all__ = [
    "normalize_date",
    "parse_date_from_parts",
    "parse_amount",
]
