"""Automation rule repository."""
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.core.exceptions import RuleNotFoundError
from txnflow.models.automation_rule import AutomationRule
from txnflow.models.base import utcnow
from txnflow.repositories.base import BaseRepository


class AutomationRuleRepository(BaseRepository[AutomationRule]):
    """Repository for user automation rules."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AutomationRule)

    async def list_user_rules(self, user_id: UUID) -> list[AutomationRule]:
        """All of a user's rules (active or not), in creation order."""
        result = await self._execute(
            select(AutomationRule)
            .where(AutomationRule.user_id == user_id, AutomationRule.deleted_at.is_(None))
            .order_by(AutomationRule.created_at, AutomationRule.id)
            .execution_options(populate_existing=True),
            "list_user_rules",
        )
        return list(result.scalars().all())

    async def get_user_rule(self, user_id: UUID, rule_id: UUID) -> AutomationRule:
        """Get one of the user's rules.

        Raises:
            RuleNotFoundError: If the rule does not exist or belongs to another user
        """
        result = await self._execute(
            select(AutomationRule).where(
                AutomationRule.id == rule_id,
                AutomationRule.user_id == user_id,
                AutomationRule.deleted_at.is_(None),
            ).execution_options(populate_existing=True),
            "get_user_rule",
        )
        rule = result.scalar_one_or_none()
        if rule is None:
            raise RuleNotFoundError({"rule_id": str(rule_id)})
        return rule

    async def increment_applied_counts(
        self, counts: dict[str, int], applied_at: datetime | None = None, commit: bool = True
    ) -> None:
        """Atomically add to each rule's applied_count and stamp last_applied_at.

        Each rule gets a single `applied_count = applied_count + n` UPDATE,
        so concurrent imports never lose increments. The UPDATEs bypass the ORM, so the
        rule queries above use populate_existing.

        With commit=False the UPDATEs join the caller's transaction and are
        only kept if the caller's commit succeeds.
        """
        if not counts:
            return

        applied_at = applied_at or utcnow()
        for rule_id, n in counts.items():
            if n <= 0:
                continue
            await self._execute(
                update(AutomationRule)
                .where(AutomationRule.id == UUID(str(rule_id)))
                .values(
                    applied_count=AutomationRule.applied_count + n,
                    last_applied_at=applied_at,
                )
                .execution_options(synchronize_session=False),
                "increment_applied_counts",
            )
        if commit:
            await self._commit("increment_applied_counts")
