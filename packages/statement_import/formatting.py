"""Display formatting for amounts in previews (never used for parsing)."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "CAD": "$",
    "AUD": "$",
    "EUR": "€",
    "GBP": "£",
    "JPY": "¥",
    "INR": "₹",
}


def format_currency(amount: Decimal | None, currency: str = "USD") -> str:
    """Format ``amount`` as e.g. ``-$1,234.50``; ``None`` renders as ``—``."""

    if amount is None:
        return "—"
    code = currency.strip().upper()
    q = amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    symbol = _SYMBOLS.get(code)
    body = f"{abs(q):,.2f}"
    if symbol is None:
        return f"{sign}{body} {code}"
    return f"{sign}{symbol}{body}"


__all__ = ["format_currency"]
