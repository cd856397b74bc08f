"""Exception types raised by ``statement_import``.

Only conditions that make an import meaningless are raised. Row-level data
problems are reported as :class:`~statement_import.models.RowError` values.
"""

from __future__ import annotations


class CsvStructureError(ValueError):
    """The payload has no parseable structure (empty file, no headers, no rows)."""


class MappingError(ValueError):
    """A column mapping is missing, incomplete, or fails validation."""


class AccountNotFoundError(LookupError):
    """No CSV account exists with the requested id."""

    def __init__(self, account_id: int) -> None:
        super().__init__(f"CSV account not found: {account_id}")
        self.account_id = account_id


__all__ = ["AccountNotFoundError", "CsvStructureError", "MappingError"]
