"""Shared SQLAlchemy models registry for the workspace database.

Holds the ledger models written by ``statement_import``.
"""

from .ledger import Base, CsvImportHash, LinkedAccount, Transaction

__all__ = [
    "Base",
    "CsvImportHash",
    "LinkedAccount",
    "Transaction",
]
