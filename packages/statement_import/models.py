"""Data models for ``statement_import``.

Two families live here:

- ``ColumnMapping`` / ``DetectedMapping``: pydantic models describing one
  account's CSV dialect. The web client persists mappings with camelCase keys
  (``dateColumn``, ``amountMode`` ...); both spellings validate.
- Frozen dataclasses for the transient values flowing through an import
  (candidates, row errors, and the preview/dry-run/import results).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import MappingError

# ---------------------------------------------------------------------------
# Vocabulary
# ---------------------------------------------------------------------------

DateFormat = Literal[
    "YYYY-MM-DD",
    "MM/DD/YYYY",
    "DD/MM/YYYY",
    "MM-DD-YYYY",
    "DD-MM-YYYY",
    "M/D/YYYY",
    "D/M/YYYY",
]
AmountMode = Literal["single", "split"]
ThousandSeparator = Literal[",", ".", "", "auto"]
DecimalSeparator = Literal[".", ",", "auto"]
TransactionType = Literal["income", "expense"]
TransactionStatus = Literal["posted", "pending"]

# One CSV line keyed by header name; values are trimmed raw strings.
ParsedRow = dict[str, str]


# ---------------------------------------------------------------------------
# Column mappings
# ---------------------------------------------------------------------------


_MAPPING_CONFIG = ConfigDict(
    frozen=True,
    extra="forbid",
    str_strip_whitespace=True,
    alias_generator=to_camel,
    populate_by_name=True,
)

_OPTIONAL_COLUMNS = (
    "amount_column",
    "debit_column",
    "credit_column",
    "description_column",
    "merchant_column",
    "status_column",
)


class ColumnMapping(BaseModel):
    """A confirmed mapping from CSV headers to transaction fields.

    Consistency between ``amount_mode`` and the amount columns is not
    enforced here: a mapping whose mode lacks its columns still validates and
    every row is reported as a row error at import time.
    """

    model_config = _MAPPING_CONFIG

    version: Literal[1] = 1
    date_column: str
    date_format: DateFormat
    amount_mode: AmountMode = "single"
    amount_column: str | None = None
    debit_column: str | None = None
    credit_column: str | None = None
    description_column: str | None = None
    merchant_column: str | None = None
    status_column: str | None = None
    # Counts the header line itself, so 1 means "header only".
    skip_header_rows: int = Field(default=1, ge=1)
    negative_in_parentheses: bool = False
    thousand_separator: ThousandSeparator = "auto"
    decimal_separator: DecimalSeparator = "auto"

    @field_validator(*_OPTIONAL_COLUMNS, mode="before")
    @classmethod
    def _blank_column_is_unset(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("date_column")
    @classmethod
    def _date_column_non_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("date_column must be non-empty")
        return v

    def required_columns(self) -> list[str]:
        """Return every header name this mapping reads, in a stable order."""

        cols = [self.date_column]
        if self.amount_mode == "single":
            cols.append(self.amount_column or "")
        else:
            cols.extend([self.debit_column or "", self.credit_column or ""])
        for c in (self.description_column, self.merchant_column, self.status_column):
            if c:
                cols.append(c)
        return [c for c in cols if c]

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)

    @classmethod
    def parse(cls, data: str | Mapping[str, Any] | ColumnMapping) -> ColumnMapping:
        """Validate ``data`` (JSON text, a mapping, or an instance).

        Raises :class:`~statement_import.errors.MappingError` on failure.
        """

        if isinstance(data, ColumnMapping):
            return data
        try:
            if isinstance(data, str):
                return cls.model_validate_json(data)
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise MappingError(f"invalid column mapping: {exc}") from exc


class DetectedMapping(BaseModel):
    """A best-effort, partially filled mapping proposed during preview."""

    model_config = ConfigDict(
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    version: Literal[1] = 1
    date_column: str | None = None
    date_format: DateFormat | None = None
    amount_mode: AmountMode = "single"
    amount_column: str | None = None
    debit_column: str | None = None
    credit_column: str | None = None
    description_column: str | None = None
    merchant_column: str | None = None
    status_column: str | None = None
    skip_header_rows: int = 1
    negative_in_parentheses: bool = False
    thousand_separator: ThousandSeparator = "auto"
    decimal_separator: DecimalSeparator = "auto"

    def to_column_mapping(self, **overrides: Any) -> ColumnMapping:
        """Promote to a :class:`ColumnMapping`, applying ``overrides`` first.

        Raises :class:`MappingError` when the date column or format is still
        unknown after overrides.
        """

        data = self.model_dump(exclude_none=True)
        data.update({k: v for k, v in overrides.items() if v is not None})
        missing = [k for k in ("date_column", "date_format") if not data.get(k)]
        if missing:
            raise MappingError("mapping is incomplete; missing: " + ", ".join(missing))
        return ColumnMapping.parse(data)

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Transient import values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TransactionCandidate:
    """A normalized transaction produced from one CSV row.

    ``amount`` is always non-negative; direction lives in ``type``.
    ``row_number`` is the 1-indexed line number in the source file.
    """

    date: str
    description: str
    amount: Decimal
    type: TransactionType
    row_number: int
    merchant: str | None = None
    status: TransactionStatus | None = None
    raw_row: Mapping[str, str] = field(default_factory=dict, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "description": self.description,
            "amount": f"{self.amount:.2f}",
            "type": self.type,
            "merchant": self.merchant,
            "status": self.status,
            "rowNumber": self.row_number,
        }


@dataclass(frozen=True, slots=True)
class RowError:
    """A diagnostic for a row that could not be turned into a candidate."""

    row: int
    message: str
    column: str | None = None
    raw_value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"row": self.row, "message": self.message}
        if self.column is not None:
            out["column"] = self.column
        if self.raw_value is not None:
            out["rawValue"] = self.raw_value
        return out


@dataclass(frozen=True, slots=True)
class ParseResult:
    transactions: list[TransactionCandidate]
    errors: list[RowError]
    headers: list[str]
    total_rows: int


@dataclass(frozen=True, slots=True)
class PreviewResult:
    headers: list[str]
    sample_rows: list[ParsedRow]
    detected_mapping: DetectedMapping
    total_rows: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "headers": list(self.headers),
            "sampleRows": [dict(r) for r in self.sample_rows],
            "detectedMapping": self.detected_mapping.to_dict(),
            "totalRows": self.total_rows,
        }


@dataclass(frozen=True, slots=True)
class DryRunResult:
    transactions: list[TransactionCandidate]
    total_count: int
    duplicate_count: int
    errors: list[RowError]

    def to_dict(self) -> dict[str, Any]:
        return {
            "transactions": [t.to_dict() for t in self.transactions],
            "totalCount": self.total_count,
            "duplicateCount": self.duplicate_count,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True, slots=True)
class ImportResult:
    imported_count: int
    skipped_count: int
    errors: list[RowError]

    def to_dict(self) -> dict[str, Any]:
        return {
            "imported": self.imported_count,
            "skipped": self.skipped_count,
            "errors": [e.to_dict() for e in self.errors],
        }


__all__ = [
    "AmountMode",
    "ColumnMapping",
    "DateFormat",
    "DecimalSeparator",
    "DetectedMapping",
    "DryRunResult",
    "ImportResult",
    "ParseResult",
    "ParsedRow",
    "PreviewResult",
    "RowError",
    "ThousandSeparator",
    "TransactionCandidate",
    "TransactionStatus",
    "TransactionType",
]
