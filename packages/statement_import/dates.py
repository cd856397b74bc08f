"""Date format detection and parsing for statement rows.

Every parsed date is emitted as a canonical ``YYYY-MM-DD`` string. Keeping
dates as calendar strings (rather than datetimes) avoids the off-by-one day
shifts that come from treating a date-only value as a UTC instant.

Detection is heuristic. When every sample has both leading fields <= 12 the
true order is unrecoverable and the US month-first reading is chosen.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .models import DateFormat

# Candidate formats in priority order.
DATE_FORMAT_PATTERNS: tuple[tuple[DateFormat, re.Pattern[str]], ...] = (
    ("YYYY-MM-DD", re.compile(r"^\d{4}-\d{2}-\d{2}$")),
    ("MM/DD/YYYY", re.compile(r"^\d{2}/\d{2}/\d{4}$")),
    ("DD/MM/YYYY", re.compile(r"^\d{2}/\d{2}/\d{4}$")),
    ("MM-DD-YYYY", re.compile(r"^\d{2}-\d{2}-\d{4}$")),
    ("DD-MM-YYYY", re.compile(r"^\d{2}-\d{2}-\d{4}$")),
    ("M/D/YYYY", re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")),
    ("D/M/YYYY", re.compile(r"^\d{1,2}/\d{1,2}/\d{4}$")),
)

# (month-first, day-first) pairs that share a regex.
_AMBIGUOUS: dict[DateFormat, tuple[DateFormat, DateFormat, str]] = {
    "MM/DD/YYYY": ("MM/DD/YYYY", "DD/MM/YYYY", "/"),
    "DD/MM/YYYY": ("MM/DD/YYYY", "DD/MM/YYYY", "/"),
    "MM-DD-YYYY": ("MM-DD-YYYY", "DD-MM-YYYY", "-"),
    "DD-MM-YYYY": ("MM-DD-YYYY", "DD-MM-YYYY", "-"),
    "M/D/YYYY": ("M/D/YYYY", "D/M/YYYY", "/"),
    "D/M/YYYY": ("M/D/YYYY", "D/M/YYYY", "/"),
}

# Field order per format: indices of (year, month, day) after splitting.
_FIELD_ORDER: dict[DateFormat, tuple[str, tuple[int, int, int]]] = {
    "YYYY-MM-DD": ("-", (0, 1, 2)),
    "MM/DD/YYYY": ("/", (2, 0, 1)),
    "M/D/YYYY": ("/", (2, 0, 1)),
    "DD/MM/YYYY": ("/", (2, 1, 0)),
    "D/M/YYYY": ("/", (2, 1, 0)),
    "MM-DD-YYYY": ("-", (2, 0, 1)),
    "DD-MM-YYYY": ("-", (2, 1, 0)),
}

MIN_YEAR = 1900
MAX_YEAR = 2100  # exclusive

# A field's value is its leading digits; a trailing time ("2024 10:30") is ignored.
_LEADING_INT_RE = re.compile(r"\s*(\d+)")


def _leading_int(part: str) -> int | None:
    m = _LEADING_INT_RE.match(part)
    return int(m.group(1)) if m else None


def _disambiguate(
    samples: list[str], month_first: DateFormat, day_first: DateFormat, sep: str
) -> DateFormat:
    for sample in samples:
        parts = sample.split(sep)
        if len(parts) < 2:
            continue
        first, second = _leading_int(parts[0]), _leading_int(parts[1])
        if first is None or second is None:
            continue
        if first > 12:
            return day_first
        if second > 12:
            return month_first
    return month_first


def detect_date_format(samples: Iterable[str | None]) -> DateFormat | None:
    """Pick the first candidate format matching every non-empty sample.

    Returns ``None`` when there are no usable samples or nothing matches.
    """

    valid = [s.strip() for s in samples if s and s.strip()]
    if not valid:
        return None

    for fmt, regex in DATE_FORMAT_PATTERNS:
        if all(regex.match(s) for s in valid):
            pair = _AMBIGUOUS.get(fmt)
            if pair is None:
                return fmt
            return _disambiguate(valid, *pair)
    return None


def parse_date(value: str | None, fmt: DateFormat) -> str | None:
    """Parse ``value`` in ``fmt`` into ``YYYY-MM-DD``.

    Range checks are deliberately shallow: month 1..12, day 1..31 and year
    in [1900, 2100). A day that does not exist in its month (``02/31``) is
    accepted. Any failure returns ``None``.
    """

    if value is None:
        return None
    cleaned = value.strip()
    if not cleaned:
        return None
    layout = _FIELD_ORDER.get(fmt)
    if layout is None:
        return None
    sep, (yi, mi, di) = layout

    parts = cleaned.split(sep)
    if len(parts) != 3:
        return None
    year, month, day = (_leading_int(parts[i]) for i in (yi, mi, di))
    if year is None or month is None or day is None:
        return None

    if not 1 <= month <= 12:
        return None
    if not 1 <= day <= 31:
        return None
    if not MIN_YEAR <= year < MAX_YEAR:
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


__all__ = ["DATE_FORMAT_PATTERNS", "detect_date_format", "parse_date"]
