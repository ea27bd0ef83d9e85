"""User-owned automation rules."""
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from txnflow.models.base import BaseModel


class AutomationRule(BaseModel):
    """Condition/action rule applied to a user's transactions after categorization.

    `applied_count` is maintained by the ingestion pipeline only.
    """

    __tablename__ = "automation_rules"

    user_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    priority: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Conditions
    merchant_pattern: Mapped[str | None] = mapped_column(String(255), nullable=True)
    description_pattern: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount_min: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    amount_max: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    transaction_type: Mapped[str] = mapped_column(String(10), default="both", nullable=False)

    # Actions
    set_category_id: Mapped[str | None] = mapped_column(String(120), nullable=True)
    add_tag_ids: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    rename_transaction_to: Mapped[str | None] = mapped_column(Text, nullable=True)
    ignore_for_budgeting: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    ignore_for_reporting: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    applied_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_applied_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_automation_rules_user_id_priority", "user_id", "priority"),
    )

    def __repr__(self) -> str:
        return f"<AutomationRule(id={self.id}, name={self.name}, priority={self.priority})>"
