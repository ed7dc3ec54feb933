from __future__ import annotations

from decimal import Decimal

from statement_import import format_currency


def test_format_currency():
    assert format_currency(Decimal("-1234.5")) == "-$1,234.50"
    assert format_currency(Decimal("0.005"), "eur") == "€0.01"
    assert format_currency(Decimal("12"), "XYZ") == "12.00 XYZ"
    assert format_currency(None) == "—"
