"""Admin merchant repository."""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.models.admin_merchant import AdminMerchant
from txnflow.repositories.base import BaseRepository


class AdminMerchantRepository(BaseRepository[AdminMerchant]):
    """Repository for admin-curated merchant records."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, AdminMerchant)

    async def list_active_admin_merchants(self) -> list[AdminMerchant]:
        """All active merchants in a stable order (oldest first).

        Ordering matters: equal match scores are resolved first-seen wins.
        """
        result = await self._execute(
            select(AdminMerchant)
            .where(AdminMerchant.is_active.is_(True), AdminMerchant.deleted_at.is_(None))
            .order_by(AdminMerchant.created_at, AdminMerchant.id),
            "list_active_admin_merchants",
        )
        return list(result.scalars().all())
