"""
Tests for CSV parsing and the row-count bounds.
"""
import pytest

from leads import EmptyFileError, ImportLimits, ParseError, RowLimitError, check_row_count, parse_csv
from leads.parser import iter_rows, normalize_headers

from tests.utils.fakes import build_csv


def test_parse_keys_rows_by_header_in_file_order():
    table = parse_csv(build_csv(["Email", "First Name"], [["a@x.io", "Ann"], ["b@x.io", "Bob"]]))

    assert table.headers == ["Email", "First Name"]
    assert table.rows == [
        {"Email": "a@x.io", "First Name": "Ann"},
        {"Email": "b@x.io", "First Name": "Bob"},
    ]


def test_parse_skips_empty_lines():
    content = b"Email,Name\n\na@x.io,Ann\n\n,\nb@x.io,Bob\n\n"

    table = parse_csv(content)

    assert [row["Email"] for row in table.rows] == ["a@x.io", "b@x.io"]


def test_parse_handles_excel_bom():
    content = "\ufeffEmail,Phone\na@x.io,555\n".encode("utf-8")

    table = parse_csv(content)

    assert table.headers == ["Email", "Phone"]


def test_short_rows_are_padded_and_long_rows_truncated():
    content = b"Email,Phone,Notes\na@x.io\nb@x.io,1,hi,extra\n"

    table = parse_csv(content)

    assert table.rows[0] == {"Email": "a@x.io", "Phone": "", "Notes": ""}
    assert table.rows[1] == {"Email": "b@x.io", "Phone": "1", "Notes": "hi"}


def test_semicolon_delimited_file():
    content = build_csv(["Email", "Company"], [["a@x.io", "Acme"], ["b@x.io", "Globex"]], delimiter=";")

    table = parse_csv(content)

    assert table.headers == ["Email", "Company"]
    assert table.rows[1]["Company"] == "Globex"


def test_quoted_commas_stay_in_one_cell():
    content = b'Email,Location\na@x.io,"Austin, TX"\n'

    table = parse_csv(content)

    assert table.rows[0]["Location"] == "Austin, TX"


def test_very_long_cell_is_kept_whole():
    notes = "x" * 200_000

    table = parse_csv(build_csv(["Email", "Notes"], [["a@x.io", notes]]))

    assert table.rows == [{"Email": "a@x.io", "Notes": notes}]


def test_headers_are_made_unique():
    assert normalize_headers([" Email ", "Name", "Name", "", "Name_1"]) == [
        "Email", "Name", "Name_1", "Column_4", "Name_1_1",
    ]


def test_header_only_file_parses_to_zero_rows():
    table = parse_csv(b"Email,Phone\n")

    assert table.headers == ["Email", "Phone"]
    assert table.row_count == 0


def test_empty_file_has_no_headers():
    with pytest.raises(ParseError):
        parse_csv(b"")


def test_non_utf8_file_is_a_parse_error():
    with pytest.raises(ParseError) as exc:
        parse_csv("Email\nmünchen@x.de\n".encode("utf-16"))

    assert "UTF-8" in exc.value.message


def test_iter_rows_streams_lazily():
    rows = iter_rows("Email\na@x.io\nb@x.io\n")

    assert next(rows) == {"Email": "a@x.io"}
    assert next(rows) == {"Email": "b@x.io"}


def test_zero_rows_rejected():
    with pytest.raises(EmptyFileError):
        check_row_count(0)


def test_exactly_max_rows_accepted():
    check_row_count(1000)


def test_over_max_rows_rejected_with_count_and_limit():
    with pytest.raises(RowLimitError) as exc:
        check_row_count(1001)

    assert exc.value.row_count == 1001
    assert exc.value.limit == 1000
    assert "1,001" in exc.value.message
    assert "1,000" in exc.value.message


def test_custom_row_limit():
    with pytest.raises(RowLimitError):
        check_row_count(6, ImportLimits(max_rows=5))
