"""Automation rule service.

Loads a user's rules, runs them through AutomationRulesEngine and records
how often each rule applied.
"""

import logging
from collections.abc import Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.automation.engine import AutomationRulesEngine, as_rule_definitions
from txnflow.models.base import utcnow
from txnflow.repositories.automation_rule import AutomationRuleRepository
from txnflow.repositories.transaction import TransactionRepository
from txnflow.schemas.imports import RuleApplyResult
from txnflow.schemas.internal import BatchRuleResult, TransactionDraft
from txnflow.services.mapping import apply_draft, draft_from_transaction

logger = logging.getLogger(__name__)

REAPPLY_PAGE_SIZE = 1000


class AutomationService:
    """Service for applying user automation rules."""

    def __init__(self, db: AsyncSession, engine: AutomationRulesEngine | None = None):
        self.db = db
        self.engine = engine or AutomationRulesEngine()
        self.rule_repo = AutomationRuleRepository(db)
        self.transaction_repo = TransactionRepository(db)

    async def apply(
        self, user_id: UUID, drafts: Sequence[TransactionDraft]
    ) -> BatchRuleResult:
        """Apply all of the user's rules to categorized drafts.

        Nothing is written here. The caller records applied counts with
        record_applied once the drafts are stored. With no rules the drafts
        come back unchanged.
        """
        rules = await self.rule_repo.list_user_rules(user_id)
        if not rules:
            return BatchRuleResult(
                transactions=list(drafts),
                applications=[[] for _ in drafts],
            )

        return self.engine.apply_rules_batch(drafts, as_rule_definitions(rules))

    async def record_applied(self, result: BatchRuleResult, commit: bool = True) -> None:
        """Add one run's applied counts to the rules.

        With commit=False the increments ride on the caller's next commit.
        """
        await self.rule_repo.increment_applied_counts(result.applied_counts, commit=commit)

    async def reapply(
        self,
        user_id: UUID,
        transaction_ids: Sequence[UUID] | None = None,
        rule_id: UUID | None = None,
    ) -> RuleApplyResult:
        """Re-run rules over transactions that are already stored.

        Args:
            user_id: Owner of the rules and transactions
            transaction_ids: Limit to these transactions (default: all)
            rule_id: Apply only this rule (default: all of the user's rules)

        Returns:
            RuleApplyResult with processed/updated counts

        Raises:
            RuleNotFoundError: If rule_id is not one of the user's rules
        """
        if rule_id is not None:
            rules = [await self.rule_repo.get_user_rule(user_id, rule_id)]
        else:
            rules = await self.rule_repo.list_user_rules(user_id)
        definitions = as_rule_definitions(rules)

        if transaction_ids is not None:
            transactions = await self.transaction_repo.get_by_ids(user_id, transaction_ids)
        else:
            transactions = await self._load_all(user_id)

        if not definitions or not transactions:
            return RuleApplyResult(processed=len(transactions))

        try:
            drafts = [draft_from_transaction(txn) for txn in transactions]
            result = self.engine.apply_rules_batch(drafts, definitions)

            updated = 0
            for txn, draft in zip(transactions, result.transactions):
                if apply_draft(txn, draft):
                    updated += 1

            applied_at = utcnow()
            await self.rule_repo.increment_applied_counts(
                result.applied_counts, applied_at, commit=False
            )
            await self.transaction_repo.save()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Automation rules re-applied",
            extra={
                "user_id": str(user_id),
                "processed": len(transactions),
                "updated": updated,
                "applications": result.total_applications,
            },
        )
        return RuleApplyResult(
            processed=len(transactions),
            updated=updated,
            rule_applications=result.total_applications,
            applied_at=applied_at,
        )

    async def _load_all(self, user_id: UUID) -> list:
        transactions = []
        skip = 0
        while True:
            page = await self.transaction_repo.get_by_user(
                user_id, skip=skip, limit=REAPPLY_PAGE_SIZE
            )
            transactions.extend(page)
            if len(page) < REAPPLY_PAGE_SIZE:
                return transactions
            skip += REAPPLY_PAGE_SIZE
