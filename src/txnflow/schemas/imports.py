"""Pydantic schemas for import, categorization and rule API endpoints."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from txnflow.schemas.internal import (
    AggregatorRecord,
    BudgetType,
    CategorizationStats,
    CategoryMatch,
    ExternalCategoryHint,
    LedgerType,
    RuleApplication,
)


# Request schemas


class RecordImportRequest(BaseModel):
    """Aggregator records to categorize and import."""

    records: list[AggregatorRecord] = Field(default_factory=list)


class CategorizeRequest(BaseModel):
    """A single transaction to run through the categorization cascade."""

    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., description="Signed amount, positive = inflow")
    merchant: str | None = Field(None, max_length=255)
    category_hint: ExternalCategoryHint | None = None


class QuickCategorizeRequest(BaseModel):
    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., description="Signed amount, positive = inflow")


class RuleApplyRequest(BaseModel):
    """Re-run automation rules over already imported transactions."""

    transaction_ids: list[UUID] | None = Field(
        None, description="Limit to these transactions (default: all of the user's transactions)"
    )
    rule_id: UUID | None = Field(None, description="Apply only this rule")


# Response schemas


class TransactionOut(BaseModel):
    """Imported transaction as stored."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID | None = None
    txn_date: date
    description: str
    original_description: str
    merchant: str | None = None
    raw_amount: Decimal
    amount: Decimal
    type: str
    category_id: str | None = None
    category_name: str
    subcategory: str | None = None
    ledger_type: LedgerType
    budget_type: BudgetType
    category_source: str
    category_confidence: float
    needs_review: bool
    tag_ids: list[str] = Field(default_factory=list)
    ignore_for_budgeting: bool = False
    ignore_for_reporting: bool = False
    source: str
    external_transaction_id: str | None = None


class ImportResult(BaseModel):
    """Outcome of one import request."""

    format_code: str | None = Field(None, description="Detected export format (CSV only)")
    imported: int = 0
    skipped_rows: int = Field(0, description="Rows dropped as malformed")
    duplicates: int = Field(0, description="Aggregator records already imported")
    rule_applications: int = 0
    categorization: CategorizationStats = Field(default_factory=CategorizationStats)
    transactions: list[TransactionOut] = Field(default_factory=list)
    applications: list[list[RuleApplication]] = Field(
        default_factory=list,
        description="Rule audit trail, index-aligned with transactions",
    )
    processing_time_ms: int = 0


class CategorizeResponse(BaseModel):
    match: CategoryMatch
    display_name: str


class QuickCategorizeResponse(BaseModel):
    category_id: str
    category_name: str
    subcategory: str | None = None
    display_name: str
    ledger_type: LedgerType
    legacy_type: str


class CategoryOut(BaseModel):
    id: str
    name: str
    subcategory: str | None = None
    display_name: str
    ledger_type: LedgerType
    budget_type: BudgetType
    external_primary: str | None = None
    external_detailed: str | None = None


class RuleApplyResult(BaseModel):
    processed: int = 0
    updated: int = 0
    rule_applications: int = 0
    applied_at: datetime | None = None


class RuleOut(BaseModel):
    """Automation rule with its usage statistics."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    is_active: bool
    priority: int
    merchant_pattern: str | None = None
    description_pattern: str | None = None
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    transaction_type: str = "both"
    set_category_id: str | None = None
    add_tag_ids: list[str] | None = None
    rename_transaction_to: str | None = None
    ignore_for_budgeting: bool = False
    ignore_for_reporting: bool = False
    applied_count: int = 0
    last_applied_at: datetime | None = None
