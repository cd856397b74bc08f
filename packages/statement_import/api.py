"""Public orchestration for statement imports.

Three entry points mirror the import workflow of the budgeting app:

1. :func:`preview_csv` tokenizes an uploaded file and proposes a mapping
   (column roles + date format) for the user to confirm.
2. :func:`dry_run_import` applies a mapping and reports what an import
   would do, including how many rows are already recorded for the account.
3. :func:`import_csv` parses with the account's confirmed mapping, drops
   rows whose fingerprint already exists for the account and persists the
   rest together with their fingerprints.

Only structural failures raise (:class:`CsvStructureError`, plus
:class:`MappingError` / :class:`AccountNotFoundError` for account lookups).
Row problems come back as ``RowError`` values beside the successes.

Concurrent imports into the same account must be serialized by the caller;
the check-then-insert on fingerprints is not atomic across sessions.
"""

from __future__ import annotations

import time
from collections.abc import Mapping
from typing import Any

from sqlalchemy.orm import Session

from . import config
from .accounts import column_mapping_of, get_account
from .columns import detect_column_mapping
from .dates import detect_date_format
from .errors import CsvStructureError, MappingError
from .fingerprint import filter_new, hash_candidates
from .logging_setup import get_logger
from .mapper import map_rows
from .models import ColumnMapping, DryRunResult, ImportResult, PreviewResult
from .persistence import fetch_existing_hashes, insert_transactions, touch_last_synced
from .tokenizer import TokenizedCsv, parse_csv_text

_logger = get_logger("statement_import.api")


def _tokenize_or_raise(raw_text: str) -> TokenizedCsv:
    if not raw_text.strip():
        raise CsvStructureError("File is empty")
    tokenized = parse_csv_text(raw_text)
    if not tokenized.headers or not any(tokenized.headers):
        raise CsvStructureError("No columns detected in CSV")
    if not tokenized.rows:
        raise CsvStructureError("No data rows found in CSV")
    return tokenized


def preview_csv(
    raw_text: str,
    *,
    sample_size: int | None = None,
    date_sample_size: int | None = None,
) -> PreviewResult:
    """Tokenize ``raw_text`` and propose a column mapping.

    The date format is detected from the first ``date_sample_size`` values
    of the detected date column. Raises :class:`CsvStructureError` for an
    empty file, a missing header, or a file without data rows.
    """

    sample_size = sample_size or config.preview_rows()
    date_sample_size = date_sample_size or config.date_sample_rows()

    tokenized = _tokenize_or_raise(raw_text)
    detected = detect_column_mapping(tokenized.headers)
    if detected.date_column:
        samples = [r.get(detected.date_column) for r in tokenized.rows[:date_sample_size]]
        fmt = detect_date_format(samples)
        if fmt:
            detected = detected.model_copy(update={"date_format": fmt})

    _logger.info(
        "preview_csv:done headers=%d rows=%d date_column=%s date_format=%s amount_mode=%s",
        len(tokenized.headers),
        len(tokenized.rows),
        detected.date_column,
        detected.date_format,
        detected.amount_mode,
    )
    return PreviewResult(
        headers=tokenized.headers,
        sample_rows=tokenized.rows[:sample_size],
        detected_mapping=detected,
        total_rows=len(tokenized.rows),
    )


def dry_run_import(
    session: Session | None,
    raw_text: str,
    mapping: ColumnMapping | Mapping[str, Any] | str | None = None,
    *,
    account_id: int | None = None,
    limit: int | None = None,
) -> DryRunResult:
    """Parse with ``mapping`` and report what an import would do.

    When ``mapping`` is omitted the account's saved mapping is used. With an
    ``account_id`` (and a session) the duplicate count is computed against
    the account's recorded fingerprints; nothing is written.
    Structural failures raise :class:`CsvStructureError` as in :func:`preview_csv`.
    """

    limit = limit or config.dry_run_rows()
    if mapping is None:
        if session is None or account_id is None:
            raise MappingError("No column mapping provided")
        mapping = column_mapping_of(get_account(session, account_id))
        if mapping is None:
            raise MappingError("No column mapping provided")
    resolved = ColumnMapping.parse(mapping)

    tokenized = _tokenize_or_raise(raw_text)
    result = map_rows(
        tokenized.rows,
        resolved,
        headers=tokenized.headers,
        skip_zero_amounts=config.skip_zero_amounts(),
    )

    duplicate_count = 0
    if session is not None and account_id is not None and result.transactions:
        hashed = hash_candidates(result.transactions)
        existing = fetch_existing_hashes(
            session, account_id=account_id, hashes=[h.hash for h in hashed]
        )
        duplicate_count = filter_new(hashed, existing).duplicate_count

    return DryRunResult(
        transactions=result.transactions[:limit],
        total_count=len(result.transactions),
        duplicate_count=duplicate_count,
        errors=result.errors,
    )


def import_csv(
    session: Session,
    raw_text: str,
    *,
    account_id: int,
    mapping: ColumnMapping | Mapping[str, Any] | str | None = None,
) -> ImportResult:
    """Import ``raw_text`` into ``account_id``; idempotent per account.

    Uses ``mapping`` when given, otherwise the account's saved mapping.
    Writes happen in ``session``; the caller commits (``session_scope``).

    Raises
    ------
    AccountNotFoundError
        No CSV account ``account_id``.
    MappingError
        The account has no usable mapping and none was passed.
    CsvStructureError
        The file yielded neither transactions nor row errors.
    """

    t0 = time.perf_counter()
    account = get_account(session, account_id)
    if mapping is None:
        resolved = column_mapping_of(account)
        if resolved is None:
            raise MappingError("Account has no column mapping configured")
    else:
        resolved = ColumnMapping.parse(mapping)

    tokenized = parse_csv_text(raw_text)
    result = map_rows(
        tokenized.rows,
        resolved,
        headers=tokenized.headers,
        skip_zero_amounts=config.skip_zero_amounts(),
    )
    if not result.transactions and not result.errors:
        raise CsvStructureError("No transactions found in CSV")

    hashed = hash_candidates(result.transactions)
    existing = fetch_existing_hashes(
        session, account_id=account_id, hashes=[h.hash for h in hashed]
    )
    dedup = filter_new(hashed, existing)
    insert_transactions(session, account_id=account_id, items=dedup.new)
    touch_last_synced(session, account_id=account_id)

    _logger.info(
        "import_csv:done account_id=%d imported=%d skipped=%d errors=%d latency_ms=%.2f",
        account_id,
        len(dedup.new),
        dedup.duplicate_count,
        len(result.errors),
        (time.perf_counter() - t0) * 1000.0,
    )
    if result.errors:
        _logger.warning(
            "import_csv:row_errors account_id=%d count=%d first_row=%d first_message=%s",
            account_id,
            len(result.errors),
            result.errors[0].row,
            result.errors[0].message,
        )
    return ImportResult(
        imported_count=len(dedup.new),
        skipped_count=dedup.duplicate_count,
        errors=result.errors,
    )


__all__ = ["dry_run_import", "import_csv", "preview_csv"]
