"""Pytest configuration shared by the suite.

The workspace is not a single installable tree during development, so the
``packages/`` and ``libs/db/src`` directories are put on ``sys.path`` here
(ahead of the repo root) to make ``statement_import`` and ``db`` importable
along with ``tests.helpers``.

Settings are environment-driven; an autouse fixture clears every
``STATEMENT_IMPORT_*`` variable so a developer's shell or ``.env`` cannot
change behavior under test.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

_ROOT = Path(__file__).resolve().parents[1]
sys.path[:0] = [
    p
    for p in (str(_ROOT / "packages"), str(_ROOT / "libs/db/src"), str(_ROOT))
    if p not in sys.path
]

from tests.helpers.db import bootstrap_sqlite_db  # noqa: E402


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("STATEMENT_IMPORT_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def db_url(tmp_path: Path) -> Iterator[str]:
    """A fresh file-backed SQLite database bound as the shared engine."""

    from db.client import dispose_engine

    dispose_engine()
    url = bootstrap_sqlite_db(tmp_path / "ledger.db")
    try:
        yield url
    finally:
        dispose_engine()


@pytest.fixture
def repo_root() -> Path:
    return _ROOT
