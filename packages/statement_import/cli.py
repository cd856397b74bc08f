# ruff: noqa: I001
"""CLI for the ``statement_import`` package.

Command handlers (``cmd_*``) hold the logic and return a process exit code;
the Typer commands below only parse options and delegate. Environment
variables (notably ``DATABASE_URL``) are loaded from a local ``.env`` via
``python-dotenv`` before any command runs. Results are printed as JSON on
stdout; failures print ``Error: ...`` on stderr and exit with status 1.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .errors import AccountNotFoundError, CsvStructureError, MappingError
from .logging_setup import configure_logging


# ---- Small module-level helpers ----------------------------------------------


def _read_text(path: str | Path) -> str:
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def _load_csv(csv_path: str | Path) -> str | None:
    """Read ``csv_path`` or print a friendly error and return ``None``."""

    try:
        return _read_text(csv_path)
    except FileNotFoundError:
        print(f"Error: File not found: {csv_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {csv_path}", file=sys.stderr)
    except UnicodeDecodeError as e:
        print(f"Error: {csv_path} is not valid UTF-8: {e}", file=sys.stderr)
    return None


def _load_mapping_arg(value: str) -> dict[str, Any]:
    """Accept inline JSON or a path to a JSON file."""

    text = value
    if not value.lstrip().startswith("{"):
        text = _read_text(value)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise MappingError("column mapping must be a JSON object")
    return data


def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


# ---- Command handlers ----------------------------------------------------------


def cmd_preview(csv_path: str) -> int:
    from .api import preview_csv

    raw = _load_csv(csv_path)
    if raw is None:
        return 1
    try:
        result = preview_csv(raw)
    except CsvStructureError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit(result.to_dict())
    return 0


def cmd_dry_run(
    csv_path: str,
    *,
    mapping: str | None = None,
    account_id: int | None = None,
    database_url: str | None = None,
) -> int:
    from .api import dry_run_import

    raw = _load_csv(csv_path)
    if raw is None:
        return 1
    try:
        mapping_data = _load_mapping_arg(mapping) if mapping else None
        if account_id is None:
            result = dry_run_import(None, raw, mapping_data)
        else:
            from db.client import session_scope

            with session_scope(database_url=database_url) as session:
                result = dry_run_import(session, raw, mapping_data, account_id=account_id)
    except (MappingError, AccountNotFoundError, json.JSONDecodeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit(result.to_dict())
    return 0


def cmd_import(csv_path: str, *, account_id: int, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .api import import_csv

    raw = _load_csv(csv_path)
    if raw is None:
        return 1
    try:
        with session_scope(database_url=database_url) as session:
            result = import_csv(session, raw, account_id=account_id)
    except (CsvStructureError, MappingError, AccountNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: import failed: {e}", file=sys.stderr)
        return 1
    _emit(result.to_dict())
    return 0


def cmd_accounts_create(
    *,
    account_name: str,
    institution_name: str,
    mapping: str | None = None,
    detect_from: str | None = None,
    database_url: str | None = None,
) -> int:
    """Create a CSV account from an explicit mapping or one detected from a file."""

    from db.client import session_scope

    from .accounts import account_to_dict, create_account
    from .api import preview_csv

    try:
        if mapping:
            mapping_data: Any = _load_mapping_arg(mapping)
        elif detect_from:
            raw = _load_csv(detect_from)
            if raw is None:
                return 1
            mapping_data = preview_csv(raw).detected_mapping.to_column_mapping()
        else:
            print("Error: provide --mapping or --detect-from", file=sys.stderr)
            return 1
        with session_scope(database_url=database_url) as session:
            account = create_account(
                session,
                account_name=account_name,
                institution_name=institution_name,
                column_mapping=mapping_data,
            )
            payload = account_to_dict(account)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit(payload)
    return 0


def cmd_accounts_list(*, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .accounts import account_to_dict, list_accounts

    with session_scope(database_url=database_url) as session:
        payload = [account_to_dict(a) for a in list_accounts(session)]
    _emit(payload)
    return 0


def cmd_accounts_show(account_id: int, *, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .accounts import account_to_dict, get_account

    try:
        with session_scope(database_url=database_url) as session:
            payload = account_to_dict(get_account(session, account_id))
    except (AccountNotFoundError, MappingError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit(payload)
    return 0


def cmd_accounts_update(
    account_id: int,
    *,
    mapping: str | None = None,
    account_name: str | None = None,
    institution_name: str | None = None,
    database_url: str | None = None,
) -> int:
    from db.client import session_scope

    from .accounts import account_to_dict, update_account

    try:
        mapping_data = _load_mapping_arg(mapping) if mapping else None
        with session_scope(database_url=database_url) as session:
            account = update_account(
                session,
                account_id,
                column_mapping=mapping_data,
                account_name=account_name,
                institution_name=institution_name,
            )
            payload = account_to_dict(account)
    except (AccountNotFoundError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit(payload)
    return 0


def cmd_accounts_delete(account_id: int, *, database_url: str | None = None) -> int:
    from db.client import session_scope

    from .accounts import delete_account

    try:
        with session_scope(database_url=database_url) as session:
            delete_account(session, account_id)
    except AccountNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    _emit({"success": True})
    return 0


# ---- Typer-based console interface -------------------------------------------


app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    help=(
        "Import bank statement CSV files into the budgeting ledger. "
        "Loads DATABASE_URL from a local .env before running."
    ),
)
accounts_app = typer.Typer(no_args_is_help=True, help="Manage CSV accounts and their mappings.")
app.add_typer(accounts_app, name="accounts")


# Module-level option object to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects it through the ``Annotated`` metadata below.
CSV_PATH_OPTION: OptionInfo = typer.Option(
    ...,  # required
    "--csv-path",
    help="Path to a bank statement CSV file",
    dir_okay=False,
    file_okay=True,
    exists=False,  # allow non-existent here; the handler reports nice errors
)

_DATABASE_URL_HELP = "Override DATABASE_URL (falls back to env var)."
_MAPPING_HELP = "Column mapping as inline JSON or a path to a JSON file."


def _finish(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("preview")
def preview_cmd(csv_path: Annotated[Path, CSV_PATH_OPTION]) -> None:
    """Show headers, sample rows and the detected column mapping."""

    _finish(cmd_preview(str(csv_path)))


@app.command("dry-run")
def dry_run_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    mapping: str | None = typer.Option(None, "--mapping", help=_MAPPING_HELP),
    account_id: int | None = typer.Option(
        None, help="Count duplicates against this account (uses its mapping by default)."
    ),
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    """Parse with a mapping and report what an import would do."""

    _finish(
        cmd_dry_run(
            str(csv_path), mapping=mapping, account_id=account_id, database_url=database_url
        )
    )


@app.command("import")
def import_cmd(
    csv_path: Annotated[Path, CSV_PATH_OPTION],
    *,
    account_id: int = typer.Option(..., help="Target CSV account id."),
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    """Import a CSV into an account, skipping rows imported before."""

    _finish(cmd_import(str(csv_path), account_id=account_id, database_url=database_url))


@accounts_app.command("create")
def accounts_create_cmd(
    *,
    name: str = typer.Option(..., "--name", help="Account display name."),
    institution: str = typer.Option(..., "--institution", help="Institution name."),
    mapping: str | None = typer.Option(None, "--mapping", help=_MAPPING_HELP),
    detect_from: str | None = typer.Option(
        None, "--detect-from", help="Use the mapping detected from this CSV file."
    ),
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    """Create a CSV account."""

    _finish(
        cmd_accounts_create(
            account_name=name,
            institution_name=institution,
            mapping=mapping,
            detect_from=detect_from,
            database_url=database_url,
        )
    )


@accounts_app.command("list")
def accounts_list_cmd(
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    _finish(cmd_accounts_list(database_url=database_url))


@accounts_app.command("show")
def accounts_show_cmd(
    account_id: int,
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    _finish(cmd_accounts_show(account_id, database_url=database_url))


@accounts_app.command("update")
def accounts_update_cmd(
    account_id: int,
    *,
    mapping: str | None = typer.Option(None, "--mapping", help=_MAPPING_HELP),
    name: str | None = typer.Option(None, "--name"),
    institution: str | None = typer.Option(None, "--institution"),
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    """Replace the mapping and/or rename an account."""

    _finish(
        cmd_accounts_update(
            account_id,
            mapping=mapping,
            account_name=name,
            institution_name=institution,
            database_url=database_url,
        )
    )


@accounts_app.command("delete")
def accounts_delete_cmd(
    account_id: int,
    database_url: str | None = typer.Option(None, help=_DATABASE_URL_HELP),
) -> None:
    """Delete an account; its transactions are kept."""

    _finish(cmd_accounts_delete(account_id, database_url=database_url))


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


def main() -> None:  # pragma: no cover - console entry point
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
