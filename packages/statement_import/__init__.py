"""Public interface for the ``statement_import`` package.

Bank statement CSV ingestion for the budgeting ledger: tokenizing, column
and date-format detection, amount normalization, row mapping, fingerprint
deduplication, and the database-backed import workflow. Only re-exports live
here.
"""

from .amounts import detect_separators, parse_amount
from .api import dry_run_import, import_csv, preview_csv
from .columns import detect_column_mapping
from .dates import detect_date_format, parse_date
from .errors import AccountNotFoundError, CsvStructureError, MappingError
from .fingerprint import DedupResult, compute_transaction_hash, filter_new
from .mapper import map_rows, parse_csv_with_mapping
from .models import (
    ColumnMapping,
    DetectedMapping,
    DryRunResult,
    ImportResult,
    ParseResult,
    PreviewResult,
    RowError,
    TransactionCandidate,
)
from .tokenizer import TokenizedCsv, parse_csv_text

__all__ = [
    # Workflow
    "preview_csv",
    "dry_run_import",
    "import_csv",
    # Core
    "parse_csv_text",
    "detect_column_mapping",
    "detect_date_format",
    "parse_date",
    "parse_amount",
    "detect_separators",
    "map_rows",
    "parse_csv_with_mapping",
    "compute_transaction_hash",
    "filter_new",
    # Models
    "ColumnMapping",
    "DetectedMapping",
    "TransactionCandidate",
    "RowError",
    "ParseResult",
    "PreviewResult",
    "DryRunResult",
    "ImportResult",
    "DedupResult",
    "TokenizedCsv",
    # Errors
    "AccountNotFoundError",
    "CsvStructureError",
    "MappingError",
]
