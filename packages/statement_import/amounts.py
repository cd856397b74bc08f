"""Locale-tolerant amount parsing.

Statement exports write money in many shapes: ``-1,234.56``, ``1.234,56``,
``(42.00)``, ``€ 12,50``. :func:`parse_amount` normalizes all of them into a
signed :class:`~decimal.Decimal` without going through binary floats, so the
value hashed into a fingerprint is exactly the value that was written.

The function is pure; fingerprints depend on it producing identical output
for identical input and options.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation

from .models import DecimalSeparator, ThousandSeparator, TransactionType

_CURRENCY_RE = re.compile(r"[$€£¥₹]")
_WHITESPACE_RE = re.compile(r"\s+")
# Digits with at most one ASCII decimal point, after separator normalization.
_NUMERIC_RE = re.compile(r"^(?:\d+(?:\.\d*)?|\.\d+)$")
_TWO_DIGITS_RE = re.compile(r"^\d{2}$")


def detect_separators(value: str) -> tuple[str, str]:
    """Infer ``(thousand, decimal)`` separators from a cleaned amount string.

    ``value`` must already be stripped of sign, parentheses and currency.
    An empty thousands separator means "none".
    """

    dots = value.count(".")
    commas = value.count(",")

    if dots == 0 and commas == 0:
        return "", "."
    if dots == 1 and commas == 0:
        return "", "."
    if dots == 0 and commas == 1:
        after = value[value.rfind(",") + 1 :]
        if _TWO_DIGITS_RE.match(after):
            return "", ","
        return ",", "."
    if dots > 1:
        return ".", ","
    if commas > 1:
        return ",", "."
    # Exactly one of each: the later one is the decimal point.
    if value.rfind(".") > value.rfind(","):
        return ",", "."
    return ".", ","


def parse_amount(
    value: str | None,
    *,
    negative_in_parentheses: bool = False,
    thousand_separator: ThousandSeparator = "auto",
    decimal_separator: DecimalSeparator = "auto",
) -> Decimal | None:
    """Parse ``value`` into a signed ``Decimal``; ``None`` when unparseable.

    Order of operations: parentheses (when enabled), currency symbols and
    whitespace, a leading sign (or a trailing minus), separator resolution,
    then numeric parsing.
    ``"auto"`` separators are inferred per value by :func:`detect_separators`.
    """

    if value is None:
        return None
    s = value.strip()
    if not s:
        return None

    negative = False
    if negative_in_parentheses and len(s) >= 2 and s.startswith("(") and s.endswith(")"):
        s = s[1:-1]
        negative = True

    s = _CURRENCY_RE.sub("", s)
    s = _WHITESPACE_RE.sub("", s)

    if s.startswith("-"):
        negative = True
        s = s[1:]
    elif s.startswith("+"):
        s = s[1:]
    elif s.endswith("-"):
        # Trailing-sign exports: "42.50-".
        negative = True
        s = s[:-1]

    thousand: str = thousand_separator
    decimal: str = decimal_separator
    if thousand == "auto" or decimal == "auto":
        detected_thousand, detected_decimal = detect_separators(s)
        if thousand == "auto":
            thousand = detected_thousand
        if decimal == "auto":
            decimal = detected_decimal

    if thousand:
        s = s.replace(thousand, "")
    if decimal and decimal != ".":
        s = s.replace(decimal, ".")

    if not _NUMERIC_RE.match(s):
        return None
    try:
        d = Decimal(s)
    except InvalidOperation:
        return None
    return -d if negative else d


def infer_direction(amount: Decimal) -> tuple[TransactionType, Decimal]:
    """Split a signed single-column amount into ``(type, magnitude)``.

    Negative values are expenses; zero and positive values are income.
    """

    if amount < 0:
        return "expense", -amount
    return "income", amount


__all__ = ["detect_separators", "infer_direction", "parse_amount"]
