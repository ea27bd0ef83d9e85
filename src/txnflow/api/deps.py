"""FastAPI dependency injection for services and the database."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.categorization.cache import get_admin_merchant_cache
from txnflow.categorization.engine import CategorizationEngine
from txnflow.db.session import get_db
from txnflow.repositories.admin_merchant import AdminMerchantRepository
from txnflow.repositories.automation_rule import AutomationRuleRepository
from txnflow.services.automation import AutomationService
from txnflow.services.ingestion import IngestionService


async def get_ingestion_service(
    db: AsyncSession = Depends(get_db),
) -> IngestionService:
    """
    Get ingestion service instance.

    Args:
        db: Database session

    Returns:
        IngestionService instance
    """
    return IngestionService(db)


async def get_automation_service(
    db: AsyncSession = Depends(get_db),
) -> AutomationService:
    return AutomationService(db)


async def get_rule_repository(
    db: AsyncSession = Depends(get_db),
) -> AutomationRuleRepository:
    return AutomationRuleRepository(db)


async def get_categorization_engine(
    db: AsyncSession = Depends(get_db),
) -> CategorizationEngine:
    """
    Get a categorization engine loaded with the current admin-merchant snapshot.

    Args:
        db: Database session (used only when the cache needs loading)

    Returns:
        CategorizationEngine instance
    """
    cache = get_admin_merchant_cache()
    admin_merchants = await cache.get(AdminMerchantRepository(db))
    return CategorizationEngine(admin_merchants=admin_merchants)
