"""Ledger-type helpers for reporting.

Only INCOME, EXPENSE and DEBT_INTEREST transactions count towards profit
and loss; transfers, debt principal and adjustments move money between
the user's own accounts or correct earlier entries.
"""

from collections.abc import Iterable
from decimal import Decimal

from pydantic import BaseModel

from txnflow.schemas.internal import LedgerType, TransactionDraft

PROFIT_LOSS_LEDGER_TYPES = frozenset(
    {LedgerType.INCOME, LedgerType.EXPENSE, LedgerType.DEBT_INTEREST}
)

LEDGER_LABELS: dict[LedgerType, str] = {
    LedgerType.INCOME: "Income",
    LedgerType.EXPENSE: "Expense",
    LedgerType.TRANSFER: "Transfer",
    LedgerType.DEBT_PRINCIPAL: "Debt Principal",
    LedgerType.DEBT_INTEREST: "Debt Interest",
    LedgerType.ADJUSTMENT: "Adjustment",
}


class ProfitLossSummary(BaseModel):
    total_income: Decimal = Decimal("0")
    total_expenses: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")
    counted: int = 0
    excluded: int = 0


def includes_in_profit_loss(ledger_type: LedgerType | str) -> bool:
    return LedgerType(ledger_type) in PROFIT_LOSS_LEDGER_TYPES


def ledger_label(ledger_type: LedgerType | str) -> str:
    try:
        return LEDGER_LABELS[LedgerType(ledger_type)]
    except ValueError:
        return str(ledger_type)


def legacy_type(ledger_type: LedgerType | str | None, raw_amount: Decimal) -> str:
    """Map a ledger type onto the two-valued income/expense type.

    INCOME is income, EXPENSE and DEBT_INTEREST are expenses; transfers,
    adjustments and debt principal fall back to the amount sign.
    """
    if ledger_type == LedgerType.INCOME:
        return "income"
    if ledger_type in (LedgerType.EXPENSE, LedgerType.DEBT_INTEREST):
        return "expense"
    return "income" if raw_amount >= 0 else "expense"


def summarize_profit_loss(transactions: Iterable[TransactionDraft]) -> ProfitLossSummary:
    """Total income and expenses over P&L ledger types.

    Transactions flagged ignore_for_reporting are excluded.
    """
    summary = ProfitLossSummary()
    for txn in transactions:
        if txn.ignore_for_reporting or not includes_in_profit_loss(txn.ledger_type):
            summary.excluded += 1
            continue

        summary.counted += 1
        if txn.ledger_type == LedgerType.INCOME:
            summary.total_income += abs(txn.amount)
        else:
            summary.total_expenses += abs(txn.amount)

    summary.net_income = summary.total_income - summary.total_expenses
    return summary
