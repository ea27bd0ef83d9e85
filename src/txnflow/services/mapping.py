"""Conversions between working drafts and persisted transactions."""

from datetime import datetime
from uuid import UUID

from txnflow.categorization.rules import normalize_merchant
from txnflow.ledger import legacy_type
from txnflow.models.transaction import Transaction
from txnflow.schemas.internal import (
    AggregatorRecord,
    BudgetType,
    LedgerType,
    NormalizedRow,
    TransactionDraft,
)

# Width of the indexed merchant_key column
MERCHANT_KEY_MAX_LENGTH = 255


def draft_from_row(row: NormalizedRow) -> TransactionDraft:
    return TransactionDraft(
        date=row.date,
        description=row.description,
        original_description=row.description,
        merchant=row.merchant,
        raw_amount=row.raw_amount,
        amount=row.amount,
        source="csv",
    )


def draft_from_record(record: AggregatorRecord) -> TransactionDraft:
    timestamp: datetime = record.timestamp
    return TransactionDraft(
        date=timestamp.date(),
        description=record.description,
        original_description=record.description,
        merchant=record.merchant or record.description,
        raw_amount=record.amount,
        amount=abs(record.amount),
        source="aggregator",
        external_transaction_id=record.external_id,
    )


def draft_from_transaction(txn: Transaction) -> TransactionDraft:
    return TransactionDraft(
        date=txn.txn_date,
        description=txn.description,
        original_description=txn.original_description,
        merchant=txn.merchant,
        raw_amount=txn.raw_amount,
        amount=txn.amount,
        type=txn.type,
        category_id=txn.category_id,
        category_name=txn.category_name,
        subcategory=txn.subcategory,
        ledger_type=LedgerType(txn.ledger_type),
        budget_type=BudgetType(txn.budget_type),
        category_confidence=txn.category_confidence,
        category_source=txn.category_source,
        tag_ids=list(txn.tag_ids or []),
        ignore_for_budgeting=txn.ignore_for_budgeting,
        ignore_for_reporting=txn.ignore_for_reporting,
        source=txn.source,
        external_transaction_id=txn.external_transaction_id,
    )


def transaction_from_draft(user_id: UUID, draft: TransactionDraft) -> Transaction:
    txn = Transaction(
        user_id=user_id,
        txn_date=draft.date,
        original_description=draft.original_description,
        raw_amount=draft.raw_amount,
        amount=draft.amount,
        source=draft.source,
        external_transaction_id=draft.external_transaction_id,
    )
    apply_draft(txn, draft)
    return txn


def merchant_key(text: str | None) -> str | None:
    """Normalized merchant key, cut to the indexed column width."""
    return normalize_merchant(text)[:MERCHANT_KEY_MAX_LENGTH] or None


def apply_draft(txn: Transaction, draft: TransactionDraft) -> bool:
    """Copy mutable draft fields onto a transaction. Returns True if anything changed."""
    values = {
        "description": draft.description,
        "merchant": draft.merchant,
        "merchant_key": merchant_key(draft.merchant or draft.description),
        "type": draft.type or legacy_type(draft.ledger_type, draft.raw_amount),
        "category_id": draft.category_id,
        "category_name": draft.category_name,
        "subcategory": draft.subcategory,
        "ledger_type": draft.ledger_type.value,
        "budget_type": draft.budget_type.value,
        "category_source": draft.category_source,
        "category_confidence": draft.category_confidence,
        "needs_review": draft.needs_review,
        "tag_ids": list(draft.tag_ids),
        "ignore_for_budgeting": draft.ignore_for_budgeting,
        "ignore_for_reporting": draft.ignore_for_reporting,
    }
    changed = False
    for key, value in values.items():
        if getattr(txn, key, None) != value:
            setattr(txn, key, value)
            changed = True
    return changed
