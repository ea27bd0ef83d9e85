"""Tests for ledger-type helpers and the profit/loss summary."""

from datetime import date
from decimal import Decimal

from txnflow.ledger import (
    includes_in_profit_loss,
    ledger_label,
    legacy_type,
    summarize_profit_loss,
)
from txnflow.schemas.internal import LedgerType, TransactionDraft


def draft(raw_amount, ledger_type, **kwargs):
    raw = Decimal(raw_amount)
    return TransactionDraft(
        date=date(2024, 1, 1),
        description="X",
        original_description="X",
        raw_amount=raw,
        amount=abs(raw),
        ledger_type=ledger_type,
        **kwargs,
    )


class TestLegacyType:
    """Test the income/expense mapping."""

    def test_income_and_expense(self):
        assert legacy_type(LedgerType.INCOME, Decimal("-1")) == "income"
        assert legacy_type(LedgerType.EXPENSE, Decimal("1")) == "expense"
        assert legacy_type(LedgerType.DEBT_INTEREST, Decimal("1")) == "expense"

    def test_others_follow_sign(self):
        assert legacy_type(LedgerType.TRANSFER, Decimal("50")) == "income"
        assert legacy_type(LedgerType.TRANSFER, Decimal("-50")) == "expense"
        assert legacy_type(LedgerType.ADJUSTMENT, Decimal("0")) == "income"
        assert legacy_type(None, Decimal("-1")) == "expense"

    def test_accepts_strings(self):
        assert legacy_type("INCOME", Decimal("-1")) == "income"


class TestProfitLoss:
    """Test P&L inclusion and summary."""

    def test_includes_in_profit_loss(self):
        assert includes_in_profit_loss(LedgerType.INCOME)
        assert includes_in_profit_loss("DEBT_INTEREST")
        assert not includes_in_profit_loss(LedgerType.TRANSFER)
        assert not includes_in_profit_loss(LedgerType.DEBT_PRINCIPAL)
        assert not includes_in_profit_loss(LedgerType.ADJUSTMENT)

    def test_summary(self):
        summary = summarize_profit_loss(
            [
                draft("2000", LedgerType.INCOME),
                draft("-50", LedgerType.EXPENSE),
                draft("-12.50", LedgerType.DEBT_INTEREST),
                draft("-500", LedgerType.TRANSFER),
                draft("-30", LedgerType.EXPENSE, ignore_for_reporting=True),
            ]
        )

        assert summary.total_income == Decimal("2000")
        assert summary.total_expenses == Decimal("62.50")
        assert summary.net_income == Decimal("1937.50")
        assert summary.counted == 3
        assert summary.excluded == 2

    def test_empty_summary(self):
        summary = summarize_profit_loss([])
        assert summary.net_income == Decimal("0")


def test_ledger_label():
    assert ledger_label(LedgerType.DEBT_PRINCIPAL) == "Debt Principal"
    assert ledger_label("TRANSFER") == "Transfer"
    assert ledger_label("SOMETHING") == "SOMETHING"
