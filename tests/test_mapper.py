from __future__ import annotations

import textwrap
from decimal import Decimal

from statement_import.mapper import normalize_status, parse_csv_with_mapping
from statement_import.models import ColumnMapping


def _dedent(s: str) -> str:
    return textwrap.dedent(s).lstrip("\n")


def _single(**overrides) -> ColumnMapping:
    data = {
        "dateColumn": "Date",
        "dateFormat": "MM/DD/YYYY",
        "amountColumn": "Amount",
        "descriptionColumn": "Description",
    }
    data.update(overrides)
    return ColumnMapping.parse(data)


STATEMENT = _dedent(
    """
    Date,Description,Amount
    01/15/2024,Coffee Shop,-4.50
    01/16/2024,Paycheck,"1,500.00"
    01/17/2024,Balance check,0.00
    bad-date,Oops,1.00
    01/18/2024,Bad amount,abc
    """
)


def test_statement_end_to_end():
    result = parse_csv_with_mapping(STATEMENT, _single())

    assert result.headers == ["Date", "Description", "Amount"]
    assert result.total_rows == 5

    coffee, pay = result.transactions
    assert (coffee.date, coffee.description, coffee.amount, coffee.type) == (
        "2024-01-15",
        "Coffee Shop",
        Decimal("4.50"),
        "expense",
    )
    assert coffee.row_number == 2
    assert coffee.merchant is None
    assert coffee.status is None
    assert (pay.amount, pay.type, pay.row_number) == (Decimal("1500.00"), "income", 3)

    date_err, amount_err = result.errors
    assert date_err.row == 5
    assert date_err.column == "Date"
    assert date_err.message == "Invalid date format: expected MM/DD/YYYY"
    assert date_err.raw_value == "bad-date"
    assert amount_err.row == 6
    assert amount_err.column == "Amount"
    assert amount_err.message == "Invalid amount format"
    assert amount_err.raw_value == "abc"


def test_every_row_is_accounted_for_once_zero_rows_are_kept():
    result = parse_csv_with_mapping(STATEMENT, _single(), skip_zero_amounts=False)

    assert len(result.transactions) + len(result.errors) == result.total_rows
    zero = result.transactions[2]
    assert zero.amount == Decimal("0.00")
    assert zero.type == "income"
    assert zero.row_number == 4


def test_signed_amount_is_recoverable_from_type():
    result = parse_csv_with_mapping(STATEMENT, _single())
    signed = [-t.amount if t.type == "expense" else t.amount for t in result.transactions]
    assert signed == [Decimal("-4.50"), Decimal("1500.00")]
    assert all(t.amount >= 0 for t in result.transactions)


def test_split_debit_credit_columns():
    csv_text = _dedent(
        """
        Date,Details,Debit,Credit
        2024-01-15,Groceries,52.10,
        2024-01-16,Salary,,"2,000.00"
        2024-01-17,Nothing,,
        """
    )
    mapping = ColumnMapping.parse(
        {
            "dateColumn": "Date",
            "dateFormat": "YYYY-MM-DD",
            "amountMode": "split",
            "debitColumn": "Debit",
            "creditColumn": "Credit",
            "descriptionColumn": "Details",
        }
    )

    result = parse_csv_with_mapping(csv_text, mapping)

    groceries, salary = result.transactions
    assert (groceries.type, groceries.amount) == ("expense", Decimal("52.10"))
    assert (salary.type, salary.amount) == ("income", Decimal("2000.00"))
    (err,) = result.errors
    assert err.row == 4
    assert err.message == "No valid amount found in debit or credit columns"
    assert err.raw_value == "debit: , credit: "


def test_negative_debit_is_still_an_expense():
    csv_text = "Date,Debit,Credit\n2024-01-15,-12.00,\n"
    mapping = ColumnMapping.parse(
        {
            "dateColumn": "Date",
            "dateFormat": "YYYY-MM-DD",
            "amountMode": "split",
            "debitColumn": "Debit",
            "creditColumn": "Credit",
        }
    )
    (tx,) = parse_csv_with_mapping(csv_text, mapping).transactions
    assert (tx.type, tx.amount) == ("expense", Decimal("12.00"))


def test_parentheses_and_european_separators():
    csv_text = _dedent(
        """
        Date;Description;Amount
        01/15/2024;Rent;(1.250,00)
        01/16/2024;Refund;12,50
        """
    )
    mapping = _single(negativeInParentheses=True)

    rent, refund = parse_csv_with_mapping(csv_text, mapping).transactions
    assert (rent.type, rent.amount) == ("expense", Decimal("1250.00"))
    assert (refund.type, refund.amount) == ("income", Decimal("12.50"))


def test_skip_header_rows_counts_the_header():
    csv_text = _dedent(
        """
        Date,Description,Amount
        Opening balance,,
        01/15/2024,Coffee,-4.50
        """
    )
    result = parse_csv_with_mapping(csv_text, _single(skipHeaderRows=2))

    assert result.errors == []
    (tx,) = result.transactions
    assert tx.row_number == 3
    assert result.total_rows == 2


def test_description_falls_back_to_merchant_then_date():
    csv_text = _dedent(
        """
        Date,Description,Payee,Amount
        01/15/2024,,ACME,-1.00
        01/16/2024,,,-2.00
        """
    )
    first, second = parse_csv_with_mapping(
        csv_text, _single(merchantColumn="Payee")
    ).transactions

    assert first.description == "ACME"
    assert first.merchant == "ACME"
    assert second.description == "Transaction on 2024-01-16"
    assert second.merchant is None


def test_status_vocabulary():
    csv_text = _dedent(
        """
        Date,Description,Amount,State
        01/15/2024,A,-1.00,Cleared
        01/16/2024,B,-1.00,PENDING
        01/17/2024,C,-1.00,something else
        """
    )
    result = parse_csv_with_mapping(csv_text, _single(statusColumn="State"))
    assert [t.status for t in result.transactions] == ["posted", "pending", None]


def test_normalize_status():
    assert normalize_status(" Settled ") == "posted"
    assert normalize_status("authorized") == "pending"
    assert normalize_status("") is None
    assert normalize_status(None) is None


def test_missing_mapped_column_reports_every_row():
    result = parse_csv_with_mapping(STATEMENT, _single(amountColumn="Amt"))

    assert result.transactions == []
    assert [e.row for e in result.errors] == [2, 3, 4, 5, 6]
    assert {e.message for e in result.errors} == {"Column not found in CSV headers: Amt"}
    assert {e.column for e in result.errors} == {"Amt"}


def test_mode_without_its_columns_is_a_row_error():
    csv_text = "Date,Description,Amount\n01/15/2024,A,-1.00\n01/16/2024,B,2.00\n"
    mapping = _single(amountMode="split", amountColumn=None, creditColumn="Amount")

    result = parse_csv_with_mapping(csv_text, mapping)

    assert result.transactions == []
    assert [e.row for e in result.errors] == [2, 3]
    assert {e.message for e in result.errors} == {"Amount column configuration is invalid"}


def test_one_bad_row_does_not_affect_its_neighbours():
    csv_text = _dedent(
        """
        Date,Description,Amount
        01/15/2024,Before,-1.00
        99/99/2024,Broken,-2.00
        01/17/2024,After,-3.00
        """
    )
    result = parse_csv_with_mapping(csv_text, _single())

    assert [t.description for t in result.transactions] == ["Before", "After"]
    assert [e.row for e in result.errors] == [3]


def test_raw_row_is_kept_for_diagnostics():
    (tx, _pay) = parse_csv_with_mapping(STATEMENT, _single()).transactions
    assert tx.raw_row == {"Date": "01/15/2024", "Description": "Coffee Shop", "Amount": "-4.50"}


def test_absent_optional_column_is_reported_not_invented():
    result = parse_csv_with_mapping(STATEMENT, _single(descriptionColumn="Memo"))

    assert result.transactions == []
    assert [e.row for e in result.errors] == [2, 3, 4, 5, 6]
    assert {e.message for e in result.errors} == {"Column not found in CSV headers: Memo"}
    assert {e.column for e in result.errors} == {"Memo"}


def test_absent_status_column_is_reported():
    csv_text = "Date,Description,Amount\n01/15/2024,Coffee,-4.50\n"

    result = parse_csv_with_mapping(csv_text, _single(statusColumn="Status"))

    (err,) = result.errors
    assert (err.row, err.column) == (2, "Status")
    assert result.transactions == []


def test_starbucks_paycheck_scenario():
    csv_text = _dedent(
        """
        Date,Description,Amount
        2026-01-05,Starbucks,-6.45
        2026-01-05,Paycheck,2500.00
        not-a-date,Bad Row,10.00
        """
    )
    mapping = ColumnMapping.parse(
        {
            "dateColumn": "Date",
            "descriptionColumn": "Description",
            "amountColumn": "Amount",
            "amountMode": "single",
            "dateFormat": "YYYY-MM-DD",
        }
    )

    result = parse_csv_with_mapping(csv_text, mapping)

    starbucks, paycheck = result.transactions
    assert (starbucks.description, starbucks.type, starbucks.amount) == (
        "Starbucks",
        "expense",
        Decimal("6.45"),
    )
    assert (paycheck.description, paycheck.type, paycheck.amount) == (
        "Paycheck",
        "income",
        Decimal("2500.00"),
    )
    (err,) = result.errors
    assert err.row == 4
    assert err.raw_value == "not-a-date"


def test_timestamped_dates_map_to_calendar_day():
    csv_text = "Date,Description,Amount\n01/15/2024 10:30,Coffee,-4.50\n"

    (tx,) = parse_csv_with_mapping(csv_text, _single()).transactions

    assert tx.date == "2024-01-15"
