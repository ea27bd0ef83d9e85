"""Unit tests for AutomationService."""

from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.core.exceptions import RuleNotFoundError
from txnflow.schemas.internal import (
    BudgetType,
    LedgerType,
    MatchSource,
    RuleDefinition,
    TransactionDraft,
)
from txnflow.services.automation import AutomationService
from txnflow.services.mapping import transaction_from_draft


@pytest.fixture
def mock_db():
    db = AsyncMock(spec=AsyncSession)
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def service(mock_db):
    service = AutomationService(mock_db)
    service.rule_repo.list_user_rules = AsyncMock(return_value=[])
    service.rule_repo.increment_applied_counts = AsyncMock()
    service.transaction_repo.save = AsyncMock()
    return service


def draft(description="NETFLIX.COM", raw_amount="-15.49"):
    raw = Decimal(raw_amount)
    return TransactionDraft(
        date=date(2024, 1, 15),
        description=description,
        original_description=description,
        merchant=description,
        raw_amount=raw,
        amount=abs(raw),
        category_name="Entertainment",
        ledger_type=LedgerType.EXPENSE,
        budget_type=BudgetType.FLEXIBLE,
        category_confidence=0.65,
        category_source=MatchSource.KEYWORD_TABLE.value,
    )


def netflix_rule(**kwargs):
    kwargs.setdefault("id", str(uuid4()))
    return RuleDefinition(
        name="Netflix",
        merchant_pattern="NETFLIX*",
        rename_transaction_to="Netflix",
        **kwargs,
    )


class TestApply:
    """Test rule application during import."""

    @pytest.mark.asyncio
    async def test_no_rules_returns_drafts_unchanged(self, service):
        drafts = [draft(), draft("SPOTIFY")]

        result = await service.apply(uuid4(), drafts)

        assert result.transactions == drafts
        assert result.applications == [[], []]
        assert result.total_applications == 0
        service.rule_repo.increment_applied_counts.assert_not_called()

    @pytest.mark.asyncio
    async def test_apply_writes_nothing(self, service):
        rule = netflix_rule()
        service.rule_repo.list_user_rules = AsyncMock(return_value=[rule])

        result = await service.apply(uuid4(), [draft(), draft(), draft("SPOTIFY")])

        assert result.total_applications == 2
        assert [t.description for t in result.transactions] == ["Netflix", "Netflix", "SPOTIFY"]
        assert result.applied_counts == {str(rule.id): 2}
        service.rule_repo.increment_applied_counts.assert_not_called()

    @pytest.mark.asyncio
    async def test_record_applied_defers_commit(self, service):
        rule = netflix_rule()
        service.rule_repo.list_user_rules = AsyncMock(return_value=[rule])
        result = await service.apply(uuid4(), [draft(), draft()])

        await service.record_applied(result, commit=False)

        service.rule_repo.increment_applied_counts.assert_awaited_once_with(
            {str(rule.id): 2}, commit=False
        )


class TestReapply:
    """Test re-running rules over stored transactions."""

    @pytest.mark.asyncio
    async def test_updates_changed_transactions(self, service):
        user_id = uuid4()
        rule = netflix_rule()
        transactions = [
            transaction_from_draft(user_id, draft()),
            transaction_from_draft(user_id, draft("SPOTIFY")),
        ]
        service.rule_repo.list_user_rules = AsyncMock(return_value=[rule])
        service.transaction_repo.get_by_user = AsyncMock(return_value=transactions)

        result = await service.reapply(user_id)

        assert result.processed == 2
        assert result.updated == 1
        assert result.rule_applications == 1
        assert result.applied_at is not None
        assert transactions[0].description == "Netflix"
        assert transactions[0].original_description == "NETFLIX.COM"
        assert transactions[1].description == "SPOTIFY"
        service.transaction_repo.save.assert_awaited_once()
        service.rule_repo.increment_applied_counts.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_single_rule_by_id(self, service):
        user_id = uuid4()
        rule = netflix_rule()
        service.rule_repo.get_user_rule = AsyncMock(return_value=rule)
        service.transaction_repo.get_by_ids = AsyncMock(
            return_value=[transaction_from_draft(user_id, draft())]
        )

        result = await service.reapply(user_id, transaction_ids=[uuid4()], rule_id=uuid4())

        assert result.updated == 1
        service.rule_repo.list_user_rules.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_rule(self, service):
        service.rule_repo.get_user_rule = AsyncMock(side_effect=RuleNotFoundError())

        with pytest.raises(RuleNotFoundError):
            await service.reapply(uuid4(), rule_id=uuid4())

    @pytest.mark.asyncio
    async def test_nothing_to_do(self, service):
        service.transaction_repo.get_by_user = AsyncMock(return_value=[])

        result = await service.reapply(uuid4())

        assert result.processed == 0
        assert result.updated == 0
        service.transaction_repo.save.assert_not_called()

    @pytest.mark.asyncio
    async def test_save_failure_rolls_back(self, service, mock_db):
        user_id = uuid4()
        service.rule_repo.list_user_rules = AsyncMock(return_value=[netflix_rule()])
        service.transaction_repo.get_by_user = AsyncMock(
            return_value=[transaction_from_draft(user_id, draft())]
        )
        service.transaction_repo.save = AsyncMock(
            side_effect=OperationalError("UPDATE", {}, Exception("down"))
        )

        with pytest.raises(OperationalError):
            await service.reapply(user_id)

        mock_db.rollback.assert_awaited_once()
        # Increments were staged uncommitted, so the rollback discards them
        _, kwargs = service.rule_repo.increment_applied_counts.call_args
        assert kwargs["commit"] is False

    @pytest.mark.asyncio
    async def test_pages_through_all_transactions(self, service, monkeypatch):
        monkeypatch.setattr("txnflow.services.automation.REAPPLY_PAGE_SIZE", 2)
        user_id = uuid4()
        pages = [
            [transaction_from_draft(user_id, draft()) for _ in range(2)],
            [transaction_from_draft(user_id, draft())],
        ]
        service.rule_repo.list_user_rules = AsyncMock(return_value=[netflix_rule()])
        service.transaction_repo.get_by_user = AsyncMock(side_effect=pages)

        result = await service.reapply(user_id)

        assert result.processed == 3
        assert service.transaction_repo.get_by_user.await_count == 2
