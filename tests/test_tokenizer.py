from __future__ import annotations

import textwrap

from statement_import.tokenizer import detect_delimiter, parse_csv_text, split_line


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def test_comma_file_with_quoted_delimiter():
    csv_text = _dedent(
        """
        Date,Description,Amount
        01/15/2024,"Coffee, large",-4.50
        01/16/2024,Paycheck,"1,500.00"
        """
    )

    tok = parse_csv_text(csv_text)

    assert tok.headers == ["Date", "Description", "Amount"]
    assert tok.rows == [
        {"Date": "01/15/2024", "Description": "Coffee, large", "Amount": "-4.50"},
        {"Date": "01/16/2024", "Description": "Paycheck", "Amount": "1,500.00"},
    ]


def test_semicolon_and_tab_delimiters_are_detected():
    semi = parse_csv_text("Datum;Omschrijving;Bedrag\n15-01-2024;Koffie;-4,50\n")
    assert semi.headers == ["Datum", "Omschrijving", "Bedrag"]
    assert semi.rows[0]["Bedrag"] == "-4,50"

    tab = parse_csv_text("Date\tMemo\tAmount\n2024-01-15\tRent, March\t-900\n")
    assert tab.headers == ["Date", "Memo", "Amount"]
    assert tab.rows[0]["Memo"] == "Rent, March"


def test_escaped_quotes_inside_quoted_field():
    tok = parse_csv_text('Memo,Amount\n"say ""hi"" now",2\n')
    assert tok.rows == [{"Memo": 'say "hi" now', "Amount": "2"}]


def test_bom_crlf_and_blank_lines():
    raw = "\ufeffDate,Amount\r\n\r\n2024-01-01,1.00\r\n   \r\n2024-01-02,2.00\r\n"
    tok = parse_csv_text(raw)
    assert tok.headers == ["Date", "Amount"]
    assert [r["Amount"] for r in tok.rows] == ["1.00", "2.00"]


def test_headers_and_values_are_trimmed():
    tok = parse_csv_text("  Date , Amount \n 2024-01-01 ,  3.00  \n")
    assert tok.headers == ["Date", "Amount"]
    assert tok.rows == [{"Date": "2024-01-01", "Amount": "3.00"}]


def test_short_rows_are_padded_and_long_rows_truncated():
    tok = parse_csv_text("A,B,C\n1,2\n1,2,3,4\n")
    assert tok.rows == [
        {"A": "1", "B": "2", "C": ""},
        {"A": "1", "B": "2", "C": "3"},
    ]


def test_empty_input_yields_empty_result():
    for raw in ("", "\n\n", "   \r\n"):
        tok = parse_csv_text(raw)
        assert tok.headers == []
        assert tok.rows == []


def test_detect_delimiter_counts_only_unquoted_characters():
    assert detect_delimiter("a;b;c,d") == ";"
    assert detect_delimiter('"a;b;c",d') == ","
    assert detect_delimiter("a\tb\tc") == "\t"


def test_detect_delimiter_defaults_to_comma():
    assert detect_delimiter("single") == ","
    # Tie between comma and semicolon keeps the comma.
    assert detect_delimiter("a,b;c") == ","


def test_split_line_keeps_empty_fields():
    assert split_line("a,,c,", ",") == ["a", "", "c", ""]
