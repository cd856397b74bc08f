# ruff: noqa: I001
"""Transaction sink backed by the shared ledger database.

The ingestion core never touches the database. This module is the
collaborator it hands results to:

- ``fetch_existing_hashes``: fingerprints already recorded for an account.
- ``insert_transactions``: write accepted candidates plus their fingerprints.
- ``touch_last_synced``: stamp the account after a successful import.

Functions only flush; the caller owns the transaction (``session_scope``)
so rows and fingerprints commit or roll back together.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from db.models.ledger import CsvImportHash, LinkedAccount, Transaction
from .fingerprint import HashedCandidate

# Keeps IN (...) lists well under driver parameter limits.
_LOOKUP_CHUNK = 500

_CENTS = Decimal("0.01")


def fetch_existing_hashes(
    session: Session,
    *,
    account_id: int,
    hashes: Sequence[str],
) -> set[str]:
    """Return the subset of ``hashes`` already recorded for ``account_id``."""

    wanted = list(dict.fromkeys(hashes))
    found: set[str] = set()
    for start in range(0, len(wanted), _LOOKUP_CHUNK):
        chunk = wanted[start : start + _LOOKUP_CHUNK]
        stmt = select(CsvImportHash.hash).where(
            CsvImportHash.linked_account_id == account_id,
            CsvImportHash.hash.in_(chunk),
        )
        found.update(session.execute(stmt).scalars())
    return found


def insert_transactions(
    session: Session,
    *,
    account_id: int,
    items: Iterable[HashedCandidate],
) -> list[int]:
    """Insert accepted candidates and their fingerprints; return new ids.

    ``merchant`` falls back to the description and a missing status is
    stored as ``posted``.
    """

    batch = list(items)
    if not batch:
        return []

    rows = [
        Transaction(
            linked_account_id=account_id,
            date=it.candidate.date,
            description=it.candidate.description,
            amount=it.candidate.amount.quantize(_CENTS, rounding=ROUND_HALF_UP),
            type=it.candidate.type,
            merchant=it.candidate.merchant or it.candidate.description,
            status=it.candidate.status or "posted",
        )
        for it in batch
    ]
    session.add_all(rows)
    session.flush()

    session.add_all(
        CsvImportHash(linked_account_id=account_id, hash=it.hash, transaction_id=row.id)
        for it, row in zip(batch, rows, strict=True)
    )
    session.flush()
    return [row.id for row in rows]


def touch_last_synced(session: Session, *, account_id: int) -> None:
    session.execute(
        update(LinkedAccount)
        .where(LinkedAccount.id == account_id)
        .values(last_synced_at=datetime.now(UTC))
    )


__all__ = ["fetch_existing_hashes", "insert_transactions", "touch_last_synced"]
