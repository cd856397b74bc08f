# ruff: noqa: I001
"""Linked accounts, transactions and CSV import fingerprints.

Revision ID: 0001_csv_import_core
Revises: None
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_csv_import_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str, *, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "linked_accounts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("account_source", sa.String(), nullable=False, server_default=sa.text("'csv'")),
        sa.Column("institution_name", sa.String(), nullable=False),
        sa.Column("account_name", sa.String(), nullable=False),
        sa.Column("account_type", sa.String(), nullable=False, server_default=sa.text("'csv'")),
        sa.Column(
            "account_subtype",
            sa.String(),
            nullable=False,
            server_default=sa.text("'csv_import'"),
        ),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'open'")),
        sa.Column("csv_column_mapping", sa.Text(), nullable=True),
        _timestamp("last_synced_at", nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("status in ('open','closed')", name="ck_linked_accounts_status"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "linked_account_id",
            sa.Integer(),
            sa.ForeignKey("linked_accounts.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("date", sa.String(length=10), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(18, 2), nullable=False),
        sa.Column("type", sa.String(), nullable=False),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default=sa.text("'posted'")),
        _timestamp("deleted_at", nullable=True),
        _timestamp("created_at"),
        sa.CheckConstraint("type in ('income','expense')", name="ck_transactions_type"),
        sa.CheckConstraint("status in ('posted','pending')", name="ck_transactions_status"),
        sa.CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
    )
    op.create_index(
        "ix_transactions_account_date", "transactions", ["linked_account_id", "date"]
    )

    op.create_table(
        "csv_import_hashes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "linked_account_id",
            sa.Integer(),
            sa.ForeignKey("linked_accounts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("hash", sa.CHAR(32), nullable=False),
        sa.Column(
            "transaction_id",
            sa.Integer(),
            sa.ForeignKey("transactions.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _timestamp("created_at"),
    )
    op.create_index(
        "ix_csv_import_hashes_account_hash",
        "csv_import_hashes",
        ["linked_account_id", "hash"],
    )


def downgrade() -> None:
    op.drop_index("ix_csv_import_hashes_account_hash", table_name="csv_import_hashes")
    op.drop_table("csv_import_hashes")
    op.drop_index("ix_transactions_account_date", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("linked_accounts")
