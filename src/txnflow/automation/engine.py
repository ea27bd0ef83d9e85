"""Automation rules engine.

Applies user-defined condition/action rules to categorized transactions.

Rules are evaluated highest priority first, each against the transaction
as left by the rules before it: a rename by a high-priority rule changes
what a lower-priority description pattern sees. The engine itself is
pure; incrementing each rule's persisted applied count is left to
AutomationService so that it happens once per run through the repository.
"""

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from txnflow.automation.patterns import InvalidPatternError, matches
from txnflow.categorization.taxonomy import Taxonomy, get_taxonomy
from txnflow.schemas.internal import (
    BatchRuleResult,
    RuleApplication,
    RuleDefinition,
    RuleRunResult,
    TransactionDraft,
)

logger = logging.getLogger(__name__)

AUTOMATION_SOURCE = "automation_rule"
AUTOMATION_CONFIDENCE = 1.0


def as_rule_definitions(rules: Iterable[Any]) -> list[RuleDefinition]:
    """Accept RuleDefinition instances or ORM rows with the same attributes."""
    return [
        rule if isinstance(rule, RuleDefinition) else RuleDefinition.model_validate(rule)
        for rule in rules
    ]


def infer_transaction_type(transaction: TransactionDraft) -> str:
    """Explicit type if set, else the sign of the raw amount."""
    if transaction.type:
        return transaction.type.lower()
    return "income" if transaction.raw_amount >= 0 else "expense"


class AutomationRulesEngine:
    """Applies automation rules to transactions.

    Example:
        >>> engine = AutomationRulesEngine()
        >>> result = engine.apply_rules(draft, rules)
        >>> [a.applied for a in result.applications]
        [True, False]
    """

    def __init__(self, taxonomy: Taxonomy | None = None):
        self.taxonomy = taxonomy if taxonomy is not None else get_taxonomy()

    @staticmethod
    def order_rules(rules: Iterable[RuleDefinition]) -> list[RuleDefinition]:
        """Active rules, highest priority first; ties keep input order."""
        active = [rule for rule in rules if rule.is_active]
        return sorted(active, key=lambda rule: -(rule.priority or 0))

    def apply_rules(self, transaction: TransactionDraft, rules: Sequence[Any]) -> RuleRunResult:
        """Apply rules to a single transaction.

        The input transaction is not modified; the result carries a copy.

        Args:
            transaction: Categorized working transaction
            rules: The user's rules (any order, inactive rules are skipped)

        Returns:
            RuleRunResult with the updated copy, one RuleApplication per
            evaluated rule, and the ids of rules that applied
        """
        working = transaction.model_copy(deep=True)
        applications: list[RuleApplication] = []
        applied_ids: list[str] = []

        for rule in self.order_rules(as_rule_definitions(rules)):
            application = self.evaluate_rule(rule, working)
            applications.append(application)
            if application.applied:
                working = self._apply_actions(rule, working)
                applied_ids.append(str(rule.id))
                logger.debug(
                    "Applied automation rule",
                    extra={"rule_id": str(rule.id), "rule_name": rule.name},
                )

        return RuleRunResult(
            transaction=working,
            applications=applications,
            applied_rule_ids=applied_ids,
        )

    def apply_rules_batch(
        self,
        transactions: Sequence[TransactionDraft],
        rules: Sequence[Any],
    ) -> BatchRuleResult:
        """Apply rules to many transactions, preserving input order.

        A failure on one transaction leaves that transaction unchanged and
        does not affect the others.
        """
        definitions = as_rule_definitions(rules)
        result = BatchRuleResult()

        for index, transaction in enumerate(transactions):
            try:
                run = self.apply_rules(transaction, definitions)
            except Exception as e:
                logger.error(
                    "Automation rules failed for transaction",
                    extra={"index": index, "error": str(e), "error_type": type(e).__name__},
                    exc_info=True,
                )
                result.transactions.append(transaction)
                result.applications.append([])
                result.failed += 1
                continue

            result.transactions.append(run.transaction)
            result.applications.append(run.applications)
            for rule_id in run.applied_rule_ids:
                result.applied_counts[rule_id] = result.applied_counts.get(rule_id, 0) + 1
            result.total_applications += len(run.applied_rule_ids)

            if run.transaction.description != transaction.description:
                logger.info(
                    "Transaction renamed by automation rule",
                    extra={"from": transaction.description, "to": run.transaction.description},
                )

        if result.total_applications:
            logger.info(
                "Automation rules applied",
                extra={
                    "applications": result.total_applications,
                    "transactions": len(transactions),
                    "rules": len(definitions),
                },
            )
        return result

    def evaluate_rule(self, rule: RuleDefinition, transaction: TransactionDraft) -> RuleApplication:
        """Check every present condition of a rule against the transaction."""
        application = RuleApplication(rule_id=str(rule.id), rule_name=rule.name)

        rule_type = (rule.transaction_type or "both").lower()
        if rule_type != "both":
            transaction_type = infer_transaction_type(transaction)
            if transaction_type != rule_type:
                application.reason = (
                    f"Transaction type {transaction_type} doesn't match rule filter {rule_type}"
                )
                return application

        amount = abs(transaction.amount)
        if rule.amount_min is not None and amount < rule.amount_min:
            application.reason = f"Amount {amount} below minimum {rule.amount_min}"
            return application
        if rule.amount_max is not None and amount > rule.amount_max:
            application.reason = f"Amount {amount} above maximum {rule.amount_max}"
            return application

        try:
            if rule.merchant_pattern:
                merchant = transaction.merchant or ""
                if not matches(merchant, rule.merchant_pattern):
                    application.reason = (
                        f'Merchant "{merchant}" doesn\'t match pattern "{rule.merchant_pattern}"'
                    )
                    return application

            if rule.description_pattern:
                description = transaction.description or ""
                if not matches(description, rule.description_pattern):
                    application.reason = (
                        f'Description "{description}" doesn\'t match pattern '
                        f'"{rule.description_pattern}"'
                    )
                    return application
        except InvalidPatternError as e:
            logger.warning(
                "Automation rule has a malformed pattern",
                extra={"rule_id": str(rule.id), "pattern": e.pattern, "reason": e.reason},
            )
            application.reason = f"Invalid pattern: {e}"
            return application

        application.applied = True
        application.reason = "All conditions matched"
        return application

    def _apply_actions(self, rule: RuleDefinition, transaction: TransactionDraft) -> TransactionDraft:
        """Apply actions in order: category, rename, tags, ignore flags."""
        updated = transaction.model_copy(deep=True)

        if rule.set_category_id:
            updated.category_id = rule.set_category_id
            updated.category_source = AUTOMATION_SOURCE
            updated.category_confidence = AUTOMATION_CONFIDENCE
            entry = self.taxonomy.get(rule.set_category_id)
            if entry is not None:
                updated.category_name = entry.name
                updated.subcategory = entry.subcategory
                updated.ledger_type = entry.ledger_type
                updated.budget_type = entry.budget_type

        if rule.rename_transaction_to:
            updated.description = rule.rename_transaction_to

        if rule.add_tag_ids:
            # dict preserves insertion order, so existing tags stay first
            updated.tag_ids = list(dict.fromkeys([*updated.tag_ids, *rule.add_tag_ids]))

        # Flags are only ever raised by a rule, never cleared
        updated.ignore_for_budgeting = updated.ignore_for_budgeting or rule.ignore_for_budgeting
        updated.ignore_for_reporting = updated.ignore_for_reporting or rule.ignore_for_reporting

        return updated
