"""Header-name heuristics that propose a column mapping for a new CSV dialect.

Each role owns an ordered list of lowercase substrings. For a role, patterns
are tried in order and the first header containing the pattern wins, so the
order of ``COLUMN_PATTERNS`` and of each list is significant.
"""

from __future__ import annotations

from collections.abc import Sequence

from .models import DetectedMapping

COLUMN_PATTERNS: tuple[tuple[str, tuple[str, ...]], ...] = (
    (
        "date",
        ("date", "transaction date", "posted date", "posting date", "trans date", "value date"),
    ),
    (
        "description",
        ("description", "memo", "narrative", "details", "transaction", "particulars", "reference"),
    ),
    ("debit", ("debit", "withdrawal", "payment", "dr", "money out", "outflow")),
    ("credit", ("credit", "deposit", "cr", "money in", "inflow")),
    ("amount", ("amount", "value", "sum", "total")),
    ("merchant", ("merchant", "payee", "vendor", "name", "counterparty")),
    ("status", ("status", "state", "transaction status", "posted", "pending")),
)

_PATTERNS = dict(COLUMN_PATTERNS)


def find_column(
    headers: Sequence[str],
    patterns: Sequence[str],
    *,
    exclude: str | None = None,
) -> str | None:
    """Return the first header matching the earliest pattern, or ``None``."""

    lowered = [h.lower() for h in headers]
    for pattern in patterns:
        for header, low in zip(headers, lowered, strict=True):
            if pattern in low:
                if exclude is not None and header == exclude:
                    # The role falls through to the next pattern.
                    break
                return header
    return None


def detect_column_mapping(headers: Sequence[str]) -> DetectedMapping:
    """Guess column roles from ``headers``.

    A debit-like and a credit-like column together select ``split`` mode;
    otherwise the mapping uses ``single`` mode and looks for an amount column.
    Roles without a match stay unset for the user to fill in.
    """

    date_col = find_column(headers, _PATTERNS["date"])
    description_col = find_column(headers, _PATTERNS["description"])
    debit_col = find_column(headers, _PATTERNS["debit"])
    credit_col = find_column(headers, _PATTERNS["credit"])

    fields: dict[str, object] = {
        "date_column": date_col,
        "description_column": description_col,
    }
    if debit_col and credit_col:
        fields.update(amount_mode="split", debit_column=debit_col, credit_column=credit_col)
    else:
        fields.update(amount_mode="single", amount_column=find_column(headers, _PATTERNS["amount"]))

    fields["merchant_column"] = find_column(
        headers, _PATTERNS["merchant"], exclude=description_col
    )
    fields["status_column"] = find_column(headers, _PATTERNS["status"])
    return DetectedMapping(**fields)


__all__ = ["COLUMN_PATTERNS", "detect_column_mapping", "find_column"]
