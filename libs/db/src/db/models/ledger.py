from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    CHAR,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# ---------------------------
# linked_accounts
# ---------------------------


class LinkedAccount(Base):
    __tablename__ = "linked_accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 'csv' for statement-import accounts; other sources (bank sync) share the table.
    account_source: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'csv'")
    )
    institution_name: Mapped[str] = mapped_column(String, nullable=False)
    account_name: Mapped[str] = mapped_column(String, nullable=False)
    account_type: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'csv'"))
    account_subtype: Mapped[str] = mapped_column(
        String, nullable=False, server_default=text("'csv_import'")
    )
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'open'"))
    # JSON text of the confirmed column mapping (camelCase keys, as the web
    # client writes it). NULL until the user confirms a preview.
    csv_column_mapping: Mapped[str | None] = mapped_column(Text, nullable=True)
    last_synced_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint("status in ('open','closed')", name="ck_linked_accounts_status"),
    )


# ---------------------------
# transactions
# ---------------------------


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    linked_account_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("linked_accounts.id", ondelete="SET NULL"), nullable=True
    )
    # Canonical YYYY-MM-DD; kept as text so no timezone ever touches it.
    date: Mapped[str] = mapped_column(String(10), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    type: Mapped[str] = mapped_column(String, nullable=False)
    merchant: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'posted'"))
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    __table_args__ = (
        CheckConstraint("type in ('income','expense')", name="ck_transactions_type"),
        CheckConstraint("status in ('posted','pending')", name="ck_transactions_status"),
        CheckConstraint("amount >= 0", name="ck_transactions_amount_non_negative"),
        Index("ix_transactions_account_date", "linked_account_id", "date"),
    )


# ---------------------------
# csv_import_hashes
# ---------------------------


class CsvImportHash(Base):
    """Fingerprint of a transaction imported from CSV into an account.

    Rows are never removed when the transaction is soft-deleted, so a
    deleted transaction is still recognized as already imported.
    """

    __tablename__ = "csv_import_hashes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    linked_account_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("linked_accounts.id", ondelete="CASCADE"), nullable=False
    )
    hash: Mapped[str] = mapped_column(CHAR(32), nullable=False)
    transaction_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("transactions.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("CURRENT_TIMESTAMP")
    )

    # Not unique: identical same-day purchases legitimately share a hash.
    __table_args__ = (Index("ix_csv_import_hashes_account_hash", "linked_account_id", "hash"),)


__all__ = [
    "Base",
    "CsvImportHash",
    "LinkedAccount",
    "Transaction",
]
