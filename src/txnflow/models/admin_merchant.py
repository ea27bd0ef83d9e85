"""Admin-curated merchant records used by the top categorization tier."""
from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from txnflow.models.base import BaseModel


class AdminMerchant(BaseModel):
    """A merchant an administrator has mapped to a category.

    `patterns` holds a JSON-encoded list of wildcard patterns
    (e.g. '["AMZN MKTP*", "AMAZON.COM*"]').
    """

    __tablename__ = "admin_merchants"

    merchant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    normalized_name: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    patterns: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<AdminMerchant(id={self.id}, merchant_name={self.merchant_name}, category={self.category})>"
