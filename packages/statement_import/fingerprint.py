"""Content fingerprints and the duplicate gate for statement imports.

A fingerprint is a SHA-256 digest over
``date | abs(amount) to 2dp | description.strip().lower()[:100]``, truncated
to 32 hex characters. The account is not part of the digest; callers scope
fingerprints per account when storing and looking them up.

The gate performs no I/O. The set of hashes already recorded for an account
is passed in, which keeps it deterministic and trivially testable.
"""

from __future__ import annotations

import hashlib
from collections.abc import Collection, Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from .models import TransactionCandidate

HASH_LENGTH = 32
DESCRIPTION_KEY_LENGTH = 100

_CENTS = Decimal("0.01")


def _amount_key(amount: Decimal | float | int | str) -> str:
    d = abs(Decimal(str(amount))).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{d:.2f}"


def compute_transaction_hash(
    date: str, amount: Decimal | float | int | str, description: str
) -> str:
    """Return the fixed-length hex fingerprint for one transaction.

    ``date`` must already be canonical (``YYYY-MM-DD``). Case and surrounding
    whitespace of ``description`` do not affect the result; the sign of
    ``amount`` does not either.
    """

    key = "|".join(
        (
            date,
            _amount_key(amount),
            description.strip().lower()[:DESCRIPTION_KEY_LENGTH],
        )
    )
    return hashlib.sha256(key.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def candidate_hash(candidate: TransactionCandidate) -> str:
    return compute_transaction_hash(candidate.date, candidate.amount, candidate.description)


@dataclass(frozen=True, slots=True)
class HashedCandidate:
    candidate: TransactionCandidate
    hash: str


@dataclass(frozen=True, slots=True)
class DedupResult:
    new: list[HashedCandidate]
    duplicate_count: int


def hash_candidates(candidates: Iterable[TransactionCandidate]) -> list[HashedCandidate]:
    return [HashedCandidate(c, candidate_hash(c)) for c in candidates]


def filter_new(
    candidates: Iterable[TransactionCandidate | HashedCandidate],
    existing_hashes: Collection[str],
) -> DedupResult:
    """Drop candidates whose fingerprint is already in ``existing_hashes``.

    Candidates sharing a fingerprint inside one batch are all kept: two
    identical coffees on the same day are two purchases. On a later
    re-import every one of them is found in the store and counted.
    """

    new: list[HashedCandidate] = []
    duplicates = 0
    for item in candidates:
        if isinstance(item, HashedCandidate):
            hc = item
        else:
            hc = HashedCandidate(item, candidate_hash(item))
        if hc.hash in existing_hashes:
            duplicates += 1
        else:
            new.append(hc)
    return DedupResult(new=new, duplicate_count=duplicates)


__all__ = [
    "DESCRIPTION_KEY_LENGTH",
    "DedupResult",
    "HASH_LENGTH",
    "HashedCandidate",
    "candidate_hash",
    "compute_transaction_hash",
    "filter_new",
    "hash_candidates",
]
