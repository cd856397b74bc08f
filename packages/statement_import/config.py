"""Environment-driven settings for ``statement_import``.

All knobs are plain environment variables (a local ``.env`` is loaded by the
CLI through python-dotenv). Values are read at call time so tests can use
``monkeypatch.setenv``.

- ``STATEMENT_IMPORT_PREVIEW_ROWS``: sample rows returned by preview (5).
- ``STATEMENT_IMPORT_DATE_SAMPLE_ROWS``: rows fed to date detection (10).
- ``STATEMENT_IMPORT_DRY_RUN_ROWS``: candidates returned by dry runs (20).
- ``STATEMENT_IMPORT_SKIP_ZERO_AMOUNTS``: drop zero-amount rows (true).
"""

from __future__ import annotations

import os

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def _env_int(name: str, default: int, *, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        return default
    return value if value >= minimum else default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in _TRUE:
        return True
    if v in _FALSE:
        return False
    return default


def preview_rows() -> int:
    return _env_int("STATEMENT_IMPORT_PREVIEW_ROWS", 5)


def date_sample_rows() -> int:
    return _env_int("STATEMENT_IMPORT_DATE_SAMPLE_ROWS", 10)


def dry_run_rows() -> int:
    return _env_int("STATEMENT_IMPORT_DRY_RUN_ROWS", 20)


def skip_zero_amounts() -> bool:
    return _env_bool("STATEMENT_IMPORT_SKIP_ZERO_AMOUNTS", True)


__all__ = ["date_sample_rows", "dry_run_rows", "preview_rows", "skip_zero_amounts"]
