"""Categorization endpoints: single-transaction preview and the taxonomy."""

from fastapi import APIRouter, Depends

from txnflow.api.deps import get_categorization_engine
from txnflow.categorization.engine import CategorizationEngine, synthesized_uncategorized
from txnflow.categorization.rules import classify_description
from txnflow.categorization.taxonomy import get_taxonomy
from txnflow.ledger import legacy_type
from txnflow.schemas.imports import (
    CategorizeRequest,
    CategorizeResponse,
    CategoryOut,
    QuickCategorizeRequest,
    QuickCategorizeResponse,
)

router = APIRouter(tags=["categorization"])


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize(
    payload: CategorizeRequest,
    engine: CategorizationEngine = Depends(get_categorization_engine),
) -> CategorizeResponse:
    """Run one transaction through the full categorization cascade."""
    match = engine.categorize(
        payload.description,
        payload.amount,
        merchant=payload.merchant,
        external_hint=payload.category_hint,
    )
    display_name = match.category_name
    if match.subcategory:
        display_name = f"{match.category_name} > {match.subcategory}"
    return CategorizeResponse(match=match, display_name=display_name)


@router.post("/categorize/quick", response_model=QuickCategorizeResponse)
async def categorize_quick(payload: QuickCategorizeRequest) -> QuickCategorizeResponse:
    """Classify from the description and amount sign only (no database)."""
    entry = classify_description(payload.description, payload.amount)
    if entry is None:
        match = synthesized_uncategorized()
        return QuickCategorizeResponse(
            category_id=match.category_id,
            category_name=match.category_name,
            display_name=match.category_name,
            ledger_type=match.ledger_type,
            legacy_type=legacy_type(match.ledger_type, payload.amount),
        )

    return QuickCategorizeResponse(
        category_id=entry.id,
        category_name=entry.name,
        subcategory=entry.subcategory,
        display_name=entry.display_name,
        ledger_type=entry.ledger_type,
        legacy_type=legacy_type(entry.ledger_type, payload.amount),
    )


@router.get("/categories", response_model=list[CategoryOut])
async def list_categories() -> list[CategoryOut]:
    """The category taxonomy, parents before their subcategories."""
    return [
        CategoryOut(
            id=entry.id,
            name=entry.name,
            subcategory=entry.subcategory,
            display_name=entry.display_name,
            ledger_type=entry.ledger_type,
            budget_type=entry.budget_type,
            external_primary=entry.external_primary,
            external_detailed=entry.external_detailed,
        )
        for entry in get_taxonomy()
    ]
