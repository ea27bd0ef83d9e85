"""Automation rule endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends

from txnflow.api.deps import get_automation_service, get_rule_repository
from txnflow.repositories.automation_rule import AutomationRuleRepository
from txnflow.schemas.imports import RuleApplyRequest, RuleApplyResult, RuleOut
from txnflow.services.automation import AutomationService

router = APIRouter(prefix="/users/{user_id}/rules", tags=["rules"])


@router.get("", response_model=list[RuleOut])
async def list_rules(
    user_id: UUID,
    rule_repo: AutomationRuleRepository = Depends(get_rule_repository),
) -> list[RuleOut]:
    """The user's rules in creation order, with applied counts."""
    rules = await rule_repo.list_user_rules(user_id)
    return [RuleOut.model_validate(rule) for rule in rules]


@router.post("/apply", response_model=RuleApplyResult)
async def apply_rules(
    user_id: UUID,
    payload: RuleApplyRequest | None = None,
    service: AutomationService = Depends(get_automation_service),
) -> RuleApplyResult:
    """Re-run rules over already imported transactions.

    Error Codes:
    - API_003: rule_id is not one of the user's rules
    """
    payload = payload or RuleApplyRequest()
    return await service.reapply(
        user_id,
        transaction_ids=payload.transaction_ids,
        rule_id=payload.rule_id,
    )
