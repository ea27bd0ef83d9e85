"""Internal data schemas for the ingestion pipeline.

These models represent the intermediate values passed between the parser,
the categorization engine and the automation rule engine, before anything
is handed to the persistence layer.
"""

from datetime import date as Date, datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class LedgerType(str, Enum):
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"
    TRANSFER = "TRANSFER"
    DEBT_PRINCIPAL = "DEBT_PRINCIPAL"
    DEBT_INTEREST = "DEBT_INTEREST"
    ADJUSTMENT = "ADJUSTMENT"


class BudgetType(str, Enum):
    FIXED = "FIXED"
    FLEXIBLE = "FLEXIBLE"
    NON_MONTHLY = "NON_MONTHLY"


class MatchSource(str, Enum):
    ADMIN_MERCHANT = "admin_merchant"
    EXTERNAL_HINT = "external_hint"
    MERCHANT_TABLE = "merchant_table"
    KEYWORD_TABLE = "keyword_table"
    UNCATEGORIZED = "uncategorized"


class NormalizedRow(BaseModel):
    """A single transaction row extracted from a bank export.

    `raw_amount` is signed (positive = inflow); `amount` is always its
    absolute value.
    """

    model_config = ConfigDict(frozen=True)

    date: Date = Field(..., description="Posting date (no time component)")
    description: str = Field(..., description="Raw bank description text")
    merchant: str = Field(..., description="Best-effort payee name")
    raw_amount: Decimal = Field(..., description="Signed amount, positive = inflow")
    amount: Decimal = Field(..., description="Absolute amount for display")

    @model_validator(mode="after")
    def amount_matches_raw_amount(self) -> "NormalizedRow":
        if self.amount != abs(self.raw_amount):
            raise ValueError("amount must equal abs(raw_amount)")
        return self

    @property
    def display_date(self) -> str:
        """Canonical MM/dd/yyyy rendering."""
        return self.date.strftime("%m/%d/%Y")

    @classmethod
    def from_signed(
        cls,
        txn_date: Date,
        description: str,
        raw_amount: Decimal,
        merchant: str | None = None,
    ) -> "NormalizedRow":
        return cls(
            date=txn_date,
            description=description,
            merchant=merchant or description,
            raw_amount=raw_amount,
            amount=abs(raw_amount),
        )


class ParsedFile(BaseModel):
    """Result of parsing one uploaded file."""

    format_code: str | None = Field(None, description="checking, credit, generic or None")
    headers: list[str] = Field(default_factory=list)
    rows: list[NormalizedRow] = Field(default_factory=list)
    skipped_rows: int = Field(default=0, description="Data rows dropped as malformed")


class ExternalCategoryHint(BaseModel):
    """Structured category hint supplied by the aggregator."""

    primary: str | None = None
    detailed: str | None = None
    confidence_label: str | None = Field(
        None, description="VERY_HIGH, HIGH, MEDIUM, LOW or unset"
    )


class CategoryMatch(BaseModel):
    """Output of the categorization cascade."""

    category_id: str
    category_name: str
    subcategory: str | None = None
    confidence: float = Field(..., ge=0.0, le=1.0)
    source: MatchSource
    ledger_type: LedgerType
    budget_type: BudgetType


class AggregatorRecord(BaseModel):
    """A transaction as delivered by the external bank aggregator."""

    external_id: str | None = None
    description: str = Field(..., min_length=1)
    merchant: str | None = None
    amount: Decimal = Field(..., description="Signed amount, positive = inflow")
    timestamp: datetime
    category_hint: ExternalCategoryHint | None = None


class RuleDefinition(BaseModel):
    """Read-only view of an automation rule consumed by the rule engine."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID | str
    name: str
    is_active: bool = True
    priority: int = 0

    merchant_pattern: str | None = None
    description_pattern: str | None = None
    amount_min: Decimal | None = None
    amount_max: Decimal | None = None
    transaction_type: str | None = "both"

    set_category_id: str | None = None
    add_tag_ids: list[str] | None = None
    rename_transaction_to: str | None = None
    ignore_for_budgeting: bool = False
    ignore_for_reporting: bool = False


class RuleApplication(BaseModel):
    """Audit entry produced for every rule evaluated against a transaction."""

    rule_id: str
    rule_name: str
    applied: bool = False
    reason: str = ""


class TransactionDraft(BaseModel):
    """Working transaction carried through categorization and automation."""

    date: Date
    description: str
    original_description: str
    merchant: str | None = None
    raw_amount: Decimal
    amount: Decimal
    type: str | None = Field(None, description="'income' or 'expense'")

    category_id: str | None = None
    category_name: str = "Uncategorized"
    subcategory: str | None = None
    ledger_type: LedgerType = LedgerType.EXPENSE
    budget_type: BudgetType = BudgetType.FLEXIBLE
    category_confidence: float = 0.0
    category_source: str = MatchSource.UNCATEGORIZED.value

    tag_ids: list[str] = Field(default_factory=list)
    ignore_for_budgeting: bool = False
    ignore_for_reporting: bool = False

    source: str = "csv"
    external_transaction_id: str | None = None

    @property
    def needs_review(self) -> bool:
        return self.category_source == MatchSource.UNCATEGORIZED.value

    def apply_match(self, match: CategoryMatch) -> None:
        self.category_id = match.category_id
        self.category_name = match.category_name
        self.subcategory = match.subcategory
        self.ledger_type = match.ledger_type
        self.budget_type = match.budget_type
        self.category_confidence = match.confidence
        self.category_source = match.source.value


class CategorizationStats(BaseModel):
    """Summary of how a batch of transactions was categorized."""

    total: int = 0
    by_source: dict[str, int] = Field(default_factory=dict)
    average_confidence: float = 0.0
    needs_review: int = 0


class RuleRunResult(BaseModel):
    """Outcome of applying a user's rules to one transaction."""

    transaction: TransactionDraft
    applications: list[RuleApplication] = Field(default_factory=list)
    applied_rule_ids: list[str] = Field(default_factory=list)


class BatchRuleResult(BaseModel):
    """Outcome of applying a user's rules to a list of transactions.

    `transactions` and `applications` are index-aligned with the input.
    """

    transactions: list[TransactionDraft] = Field(default_factory=list)
    applications: list[list[RuleApplication]] = Field(default_factory=list)
    applied_counts: dict[str, int] = Field(default_factory=dict)
    total_applications: int = 0
    failed: int = 0
