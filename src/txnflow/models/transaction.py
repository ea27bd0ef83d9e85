"""Transaction model representing imported, categorized transactions."""
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, Date, Float, Index, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from txnflow.models.base import BaseModel


class Transaction(BaseModel):
    """A single ledger transaction, imported from a CSV export or the aggregator."""

    __tablename__ = "transactions"

    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    txn_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    original_description: Mapped[str] = mapped_column(Text, nullable=False)
    merchant: Mapped[str | None] = mapped_column(Text, nullable=True)
    merchant_key: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Signed (positive = inflow) and absolute amounts
    raw_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    type: Mapped[str] = mapped_column(String(10), nullable=False)

    category_id: Mapped[str | None] = mapped_column(String(120), nullable=True, index=True)
    category_name: Mapped[str] = mapped_column(String(100), nullable=False)
    subcategory: Mapped[str | None] = mapped_column(String(100), nullable=True)
    ledger_type: Mapped[str] = mapped_column(String(20), nullable=False)
    budget_type: Mapped[str] = mapped_column(String(20), nullable=False)
    category_source: Mapped[str] = mapped_column(String(30), nullable=False)
    category_confidence: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    needs_review: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    tag_ids: Mapped[list[str]] = mapped_column(JSON, default=list, nullable=False)
    ignore_for_budgeting: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ignore_for_reporting: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    source: Mapped[str] = mapped_column(String(20), default="csv", nullable=False)
    external_transaction_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("ix_transactions_user_id_merchant_key", "user_id", "merchant_key"),
        UniqueConstraint(
            "user_id", "external_transaction_id", name="uq_transactions_user_external_id"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, description={self.description}, "
            f"raw_amount={self.raw_amount}, category={self.category_name})>"
        )
