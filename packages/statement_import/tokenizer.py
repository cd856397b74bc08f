"""Schema-free CSV tokenizer for bank statement exports.

Institution exports disagree on delimiters (``,``, ``;`` or tab), so the
delimiter is detected from the header line before any field is split. Quoted
fields follow the usual convention: a field wrapped in double quotes may
contain the delimiter, and ``""`` inside it is an escaped quote.

Records are line-oriented: a quoted field cannot span lines. Blank lines are
discarded before the header is chosen.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from .models import ParsedRow

DELIMITERS: tuple[str, ...] = (",", ";", "\t")

_LINE_SPLIT_RE = re.compile(r"\r?\n")


@dataclass(frozen=True, slots=True)
class TokenizedCsv:
    headers: list[str] = field(default_factory=list)
    rows: list[ParsedRow] = field(default_factory=list)


def detect_delimiter(line: str) -> str:
    """Return the delimiter with the most unquoted occurrences in ``line``.

    Ties and lines without any candidate fall back to the comma.
    """

    best = ","
    best_count = 0
    for d in DELIMITERS:
        count = 0
        in_quotes = False
        for ch in line:
            if ch == '"':
                in_quotes = not in_quotes
            elif ch == d and not in_quotes:
                count += 1
        if count > best_count:
            best, best_count = d, count
    return best


def split_line(line: str, delimiter: str) -> list[str]:
    """Split one CSV line into raw (untrimmed) field values."""

    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if in_quotes:
            if ch == '"':
                if i + 1 < n and line[i + 1] == '"':
                    current.append('"')
                    i += 1
                else:
                    in_quotes = False
            else:
                current.append(ch)
        elif ch == '"':
            in_quotes = True
        elif ch == delimiter:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def parse_csv_text(raw_text: str) -> TokenizedCsv:
    """Tokenize ``raw_text`` into trimmed headers and header-keyed rows.

    Missing trailing fields become ``""``; surplus fields are dropped. An
    empty payload yields an empty :class:`TokenizedCsv` rather than raising.
    """

    text = raw_text.removeprefix("\ufeff")
    lines = [ln for ln in _LINE_SPLIT_RE.split(text) if ln.strip()]
    if not lines:
        return TokenizedCsv()

    delimiter = detect_delimiter(lines[0])
    headers = [h.strip() for h in split_line(lines[0], delimiter)]

    rows: list[ParsedRow] = []
    for line in lines[1:]:
        values = split_line(line, delimiter)
        row: ParsedRow = {}
        for idx, header in enumerate(headers):
            row[header] = values[idx].strip() if idx < len(values) else ""
        rows.append(row)
    return TokenizedCsv(headers=headers, rows=rows)


__all__ = ["DELIMITERS", "TokenizedCsv", "detect_delimiter", "parse_csv_text", "split_line"]
