from __future__ import annotations

from statement_import import parse_csv


def test_splits_fields_and_rows():
    assert parse_csv("a,b\n1,2\n") == [("a", "b"), ("1", "2")]


def test_last_row_without_trailing_newline():
    assert parse_csv("a,b\n1,2") == [("a", "b"), ("1", "2")]


def test_trailing_comma_yields_empty_field():
    assert parse_csv("a,\n") == [("a", "")]


def test_quoted_field_keeps_commas_and_escaped_quotes():
    assert parse_csv('x,"a, ""b"""\n') == [("x", 'a, "b"')]


def test_quoted_field_keeps_newlines():
    assert parse_csv('a,"line1\nline2"\n') == [("a", "line1\nline2")]


def test_crlf_reads_as_newline():
    assert parse_csv("a,b\r\n1,2\r\n") == [("a", "b"), ("1", "2")]


def test_bare_cr_outside_quotes_is_ignored():
    assert parse_csv("a\rb,c\n") == [("ab", "c")]


def test_cr_inside_quotes_is_kept():
    assert parse_csv('"x\r\ny"\n') == [("x\r\ny",)]


def test_quoted_field_with_comma_newline_and_escaped_quote():
    assert parse_csv('"a,b\nc ""d"""') == [('a,b\nc "d"',)]


def test_blank_rows_are_dropped():
    assert parse_csv("a\n\n , \nb\n") == [("a",), ("b",)]


def test_unterminated_quote_consumes_rest_of_input():
    assert parse_csv('a,"bc\nd,e') == [("a", "bc\nd,e")]


def test_empty_text_has_no_rows():
    assert parse_csv("") == []
    assert parse_csv("\n\r\n") == []


def test_rows_may_have_different_widths():
    assert parse_csv("a,b,c\n1\n") == [("a", "b", "c"), ("1",)]
