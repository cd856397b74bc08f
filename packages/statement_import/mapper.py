"""Apply a confirmed :class:`ColumnMapping` to tokenized statement rows.

Contract
--------
Every data row produces exactly one of:

- a :class:`TransactionCandidate`;
- a :class:`RowError` (bad date, bad amount, unusable amount columns, or a
  mapped column missing from the file);
- nothing, when the amount is zero (balance-only and informational rows).

No data problem raises. A mapping that does not fit the file degrades into
one error per row, so the caller always gets a complete report.
"""

from __future__ import annotations

from collections.abc import Sequence

from .amounts import infer_direction, parse_amount
from .dates import parse_date
from .logging_setup import get_logger
from .models import (
    ColumnMapping,
    ParsedRow,
    ParseResult,
    RowError,
    TransactionCandidate,
    TransactionStatus,
    TransactionType,
)
from .tokenizer import parse_csv_text

_logger = get_logger("statement_import.mapper")

STATUS_VOCABULARY: dict[str, TransactionStatus] = {
    **dict.fromkeys(("posted", "cleared", "complete", "completed", "settled"), "posted"),
    **dict.fromkeys(("pending", "processing", "hold", "authorization", "authorized"), "pending"),
}


def normalize_status(raw: str | None) -> TransactionStatus | None:
    if not raw:
        return None
    return STATUS_VOCABULARY.get(raw.strip().lower())


def _cell(row: ParsedRow, column: str | None) -> str:
    if not column:
        return ""
    return (row.get(column) or "").strip()


def _missing_columns(mapping: ColumnMapping, headers: Sequence[str] | None) -> list[str]:
    if headers is None:
        return []
    known = set(headers)
    return [c for c in mapping.required_columns() if c not in known]


def _map_row(
    row: ParsedRow,
    row_number: int,
    mapping: ColumnMapping,
    *,
    skip_zero_amounts: bool,
) -> TransactionCandidate | RowError | None:
    raw_date = row.get(mapping.date_column)
    date = parse_date(raw_date, mapping.date_format)
    if date is None:
        return RowError(
            row=row_number,
            column=mapping.date_column,
            message=f"Invalid date format: expected {mapping.date_format}",
            raw_value=raw_date,
        )

    description = (
        _cell(row, mapping.description_column)
        or _cell(row, mapping.merchant_column)
        or f"Transaction on {date}"
    )

    options = {
        "negative_in_parentheses": mapping.negative_in_parentheses,
        "thousand_separator": mapping.thousand_separator,
        "decimal_separator": mapping.decimal_separator,
    }
    tx_type: TransactionType
    if mapping.amount_mode == "single" and mapping.amount_column:
        raw_amount = row.get(mapping.amount_column)
        signed = parse_amount(raw_amount, **options)
        if signed is None:
            return RowError(
                row=row_number,
                column=mapping.amount_column,
                message="Invalid amount format",
                raw_value=raw_amount,
            )
        tx_type, amount = infer_direction(signed)
    elif mapping.amount_mode == "split" and mapping.debit_column and mapping.credit_column:
        raw_debit = row.get(mapping.debit_column)
        raw_credit = row.get(mapping.credit_column)
        debit = parse_amount(raw_debit, **options)
        credit = parse_amount(raw_credit, **options)
        if debit is not None and debit != 0:
            tx_type, amount = "expense", abs(debit)
        elif credit is not None and credit != 0:
            tx_type, amount = "income", abs(credit)
        else:
            return RowError(
                row=row_number,
                message="No valid amount found in debit or credit columns",
                raw_value=f"debit: {raw_debit or ''}, credit: {raw_credit or ''}",
            )
    else:
        return RowError(row=row_number, message="Amount column configuration is invalid")

    if amount == 0 and skip_zero_amounts:
        return None

    return TransactionCandidate(
        date=date,
        description=description,
        amount=amount,
        type=tx_type,
        row_number=row_number,
        merchant=_cell(row, mapping.merchant_column) or None,
        status=normalize_status(_cell(row, mapping.status_column)),
        raw_row=row,
    )


def map_rows(
    rows: Sequence[ParsedRow],
    mapping: ColumnMapping,
    *,
    headers: Sequence[str] | None = None,
    skip_zero_amounts: bool = True,
) -> ParseResult:
    """Map tokenized ``rows`` to candidates and row errors.

    ``rows`` excludes the header line. ``mapping.skip_header_rows`` counts
    that header, so ``skip_header_rows - 1`` further rows are skipped.
    Row numbers in the result are 1-indexed lines of the source file. When
    ``headers`` is given, any mapped column absent from it is reported on
    every row.
    """

    skip = mapping.skip_header_rows
    data_rows = rows[skip - 1 :]
    missing = _missing_columns(mapping, headers)

    transactions: list[TransactionCandidate] = []
    errors: list[RowError] = []
    dropped = 0
    for i, row in enumerate(data_rows):
        row_number = i + skip + 1
        if missing:
            errors.append(
                RowError(
                    row=row_number,
                    column=missing[0],
                    message=f"Column not found in CSV headers: {missing[0]}",
                )
            )
            continue
        outcome = _map_row(row, row_number, mapping, skip_zero_amounts=skip_zero_amounts)
        if outcome is None:
            dropped += 1
        elif isinstance(outcome, RowError):
            errors.append(outcome)
        else:
            transactions.append(outcome)

    _logger.debug(
        "map_rows:done rows=%d transactions=%d errors=%d zero_dropped=%d",
        len(data_rows),
        len(transactions),
        len(errors),
        dropped,
    )
    return ParseResult(
        transactions=transactions,
        errors=errors,
        headers=list(headers) if headers is not None else [],
        total_rows=len(rows),
    )


def parse_csv_with_mapping(
    raw_text: str,
    mapping: ColumnMapping,
    *,
    skip_zero_amounts: bool = True,
) -> ParseResult:
    """Tokenize ``raw_text`` and map every row with ``mapping``."""

    tokenized = parse_csv_text(raw_text)
    return map_rows(
        tokenized.rows,
        mapping,
        headers=tokenized.headers,
        skip_zero_amounts=skip_zero_amounts,
    )


__all__ = ["STATUS_VOCABULARY", "map_rows", "normalize_status", "parse_csv_with_mapping"]
