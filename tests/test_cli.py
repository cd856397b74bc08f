from __future__ import annotations

import json
import textwrap
from pathlib import Path

import pytest
from typer.testing import CliRunner

from statement_import.cli import app

runner = CliRunner()

STATEMENT = textwrap.dedent(
    """\
    Date,Description,Amount
    01/15/2024,Coffee Shop,-4.50
    01/16/2024,Paycheck,"1,500.00"
    """
)


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    # The CLI reads .env from the working directory.
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def statement(workdir: Path) -> Path:
    path = workdir / "statement.csv"
    path.write_text(STATEMENT, encoding="utf-8")
    return path


def _json(result) -> object:
    assert result.exit_code == 0, result.output
    return json.loads(result.stdout)


def test_preview_prints_detected_mapping(statement):
    payload = _json(runner.invoke(app, ["preview", "--csv-path", str(statement)]))

    assert payload["headers"] == ["Date", "Description", "Amount"]
    assert payload["totalRows"] == 2
    assert payload["detectedMapping"]["dateFormat"] == "MM/DD/YYYY"


def test_preview_missing_file(workdir):
    result = runner.invoke(app, ["preview", "--csv-path", str(workdir / "nope.csv")])

    assert result.exit_code == 1
    assert "File not found" in result.output


def test_preview_empty_file(workdir):
    empty = workdir / "empty.csv"
    empty.write_text("", encoding="utf-8")

    result = runner.invoke(app, ["preview", "--csv-path", str(empty)])

    assert result.exit_code == 1
    assert "File is empty" in result.output


def test_dry_run_with_inline_mapping(statement):
    mapping = json.dumps(
        {"dateColumn": "Date", "dateFormat": "MM/DD/YYYY", "amountColumn": "Amount"}
    )

    payload = _json(
        runner.invoke(app, ["dry-run", "--csv-path", str(statement), "--mapping", mapping])
    )

    assert payload["totalCount"] == 2
    assert payload["duplicateCount"] == 0
    assert [t["amount"] for t in payload["transactions"]] == ["4.50", "1500.00"]


def test_dry_run_without_mapping_fails(statement):
    result = runner.invoke(app, ["dry-run", "--csv-path", str(statement)])

    assert result.exit_code == 1
    assert "No column mapping provided" in result.output


def test_account_lifecycle_and_import(statement, db_url):
    db = ["--database-url", db_url]

    created = _json(
        runner.invoke(
            app,
            [
                "accounts",
                "create",
                "--name",
                "Checking",
                "--institution",
                "Test Bank",
                "--detect-from",
                str(statement),
                *db,
            ],
        )
    )
    account_id = str(created["id"])
    assert created["csvColumnMapping"]["dateFormat"] == "MM/DD/YYYY"

    listed = _json(runner.invoke(app, ["accounts", "list", *db]))
    assert [a["id"] for a in listed] == [created["id"]]

    args = ["import", "--csv-path", str(statement), "--account-id", account_id, *db]
    first = _json(runner.invoke(app, args))
    second = _json(runner.invoke(app, args))
    assert (first["imported"], first["skipped"]) == (2, 0)
    assert (second["imported"], second["skipped"]) == (0, 2)

    dry = _json(
        runner.invoke(
            app, ["dry-run", "--csv-path", str(statement), "--account-id", account_id, *db]
        )
    )
    assert dry["duplicateCount"] == 2

    updated = _json(
        runner.invoke(app, ["accounts", "update", account_id, "--name", "Joint", *db])
    )
    assert updated["accountName"] == "Joint"

    shown = _json(runner.invoke(app, ["accounts", "show", account_id, *db]))
    assert shown["lastSyncedAt"] is not None

    assert _json(runner.invoke(app, ["accounts", "delete", account_id, *db])) == {
        "success": True
    }
    missing = runner.invoke(app, ["accounts", "show", account_id, *db])
    assert missing.exit_code == 1
    assert "CSV account not found" in missing.output


def test_accounts_create_from_mapping_file(workdir, db_url):
    mapping_file = workdir / "mapping.json"
    mapping_file.write_text(
        json.dumps({"dateColumn": "Date", "dateFormat": "YYYY-MM-DD", "amountColumn": "Amt"}),
        encoding="utf-8",
    )

    created = _json(
        runner.invoke(
            app,
            [
                "accounts",
                "create",
                "--name",
                "Card",
                "--institution",
                "Bank",
                "--mapping",
                str(mapping_file),
                "--database-url",
                db_url,
            ],
        )
    )

    assert created["csvColumnMapping"]["amountColumn"] == "Amt"


def test_accounts_create_requires_a_mapping_source(db_url):
    result = runner.invoke(
        app,
        ["accounts", "create", "--name", "A", "--institution", "B", "--database-url", db_url],
    )

    assert result.exit_code == 1
    assert "--mapping or --detect-from" in result.output


def test_import_into_unknown_account(statement, db_url):
    result = runner.invoke(
        app,
        ["import", "--csv-path", str(statement), "--account-id", "7", "--database-url", db_url],
    )

    assert result.exit_code == 1
    assert "CSV account not found: 7" in result.output
