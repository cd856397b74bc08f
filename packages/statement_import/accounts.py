# ruff: noqa: I001
"""CSV account service operations.

A CSV account owns the column mapping confirmed for its institution's
export dialect. The mapping is validated through
:class:`~statement_import.models.ColumnMapping` on every write and stored as
JSON text so the web client can read it back unchanged.

Deleting an account removes its import fingerprints (FK cascade) but keeps
its transactions, detached from the account.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, TypedDict

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.ledger import LinkedAccount
from .errors import AccountNotFoundError, MappingError
from .logging_setup import get_logger
from .models import ColumnMapping

_logger = get_logger("statement_import.accounts")

CSV_SOURCE = "csv"


class AccountDict(TypedDict):
    id: int
    accountSource: str
    institutionName: str
    accountName: str
    accountType: str
    accountSubtype: str
    status: str
    lastSyncedAt: str | None
    csvColumnMapping: dict[str, Any] | None
    createdAt: str | None


def _required_text(value: str | None, label: str) -> str:
    s = (value or "").strip()
    if not s:
        raise ValueError(f"{label} is required")
    return s


def column_mapping_of(account: LinkedAccount) -> ColumnMapping | None:
    """Return the account's validated mapping, or ``None`` when unset."""

    if not account.csv_column_mapping:
        return None
    return ColumnMapping.parse(account.csv_column_mapping)


def account_to_dict(account: LinkedAccount) -> AccountDict:
    mapping = column_mapping_of(account)
    return {
        "id": account.id,
        "accountSource": account.account_source,
        "institutionName": account.institution_name,
        "accountName": account.account_name,
        "accountType": account.account_type,
        "accountSubtype": account.account_subtype,
        "status": account.status,
        "lastSyncedAt": account.last_synced_at.isoformat() if account.last_synced_at else None,
        "csvColumnMapping": mapping.model_dump(by_alias=True, exclude_none=True)
        if mapping
        else None,
        "createdAt": account.created_at.isoformat() if account.created_at else None,
    }


def create_account(
    session: Session,
    *,
    account_name: str,
    institution_name: str,
    column_mapping: ColumnMapping | Mapping[str, Any] | str,
) -> LinkedAccount:
    """Create a CSV account with a confirmed column mapping."""

    name = _required_text(account_name, "Account name")
    institution = _required_text(institution_name, "Institution name")
    if not column_mapping:
        raise MappingError("Column mapping is required")
    mapping = ColumnMapping.parse(column_mapping)

    account = LinkedAccount(
        account_source=CSV_SOURCE,
        account_name=name,
        institution_name=institution,
        account_type="csv",
        account_subtype="csv_import",
        status="open",
        csv_column_mapping=mapping.to_json(),
    )
    session.add(account)
    session.flush()
    _logger.info(
        "accounts:create account_id=%d institution=%s", account.id, institution
    )
    return account


def list_accounts(session: Session) -> list[LinkedAccount]:
    stmt = (
        select(LinkedAccount)
        .where(LinkedAccount.account_source == CSV_SOURCE)
        .order_by(LinkedAccount.id)
    )
    return list(session.execute(stmt).scalars())


def get_account(session: Session, account_id: int) -> LinkedAccount:
    """Return the CSV account ``account_id`` or raise ``AccountNotFoundError``."""

    account = session.execute(
        select(LinkedAccount).where(
            LinkedAccount.id == account_id,
            LinkedAccount.account_source == CSV_SOURCE,
        )
    ).scalar_one_or_none()
    if account is None:
        raise AccountNotFoundError(account_id)
    return account


def update_account(
    session: Session,
    account_id: int,
    *,
    column_mapping: ColumnMapping | Mapping[str, Any] | str | None = None,
    account_name: str | None = None,
    institution_name: str | None = None,
) -> LinkedAccount:
    """Update the mapping and/or names; blank values are ignored.

    Raises ``ValueError`` when nothing would change.
    """

    account = get_account(session, account_id)
    changed: list[str] = []
    if column_mapping:
        account.csv_column_mapping = ColumnMapping.parse(column_mapping).to_json()
        changed.append("mapping")
    if account_name and account_name.strip():
        account.account_name = account_name.strip()
        changed.append("account_name")
    if institution_name and institution_name.strip():
        account.institution_name = institution_name.strip()
        changed.append("institution_name")
    if not changed:
        raise ValueError("No updates provided")
    session.flush()
    _logger.info("accounts:update account_id=%d fields=%s", account_id, ",".join(changed))
    return account


def delete_account(session: Session, account_id: int) -> None:
    account = get_account(session, account_id)
    session.delete(account)
    session.flush()
    _logger.info("accounts:delete account_id=%d", account_id)


__all__ = [
    "AccountDict",
    "account_to_dict",
    "column_mapping_of",
    "create_account",
    "delete_account",
    "get_account",
    "list_accounts",
    "update_account",
]
