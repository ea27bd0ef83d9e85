"""In-process cache of the admin-merchant snapshot."""

import logging
from datetime import datetime
from typing import Protocol

from txnflow.categorization.scoring import AdminMerchantSnapshot
from txnflow.config import settings
from txnflow.models.base import utcnow

logger = logging.getLogger(__name__)


class AdminMerchantSource(Protocol):
    async def list_active_admin_merchants(self) -> list: ...


class AdminMerchantCache:
    """Lazily loaded, swap-on-refresh admin-merchant snapshot.

    The snapshot is loaded on first use and after `invalidate()`. A refresh
    builds a complete new tuple before replacing the old one, so concurrent
    readers see either the previous snapshot or the new one. Lookup
    failures propagate to the caller.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._snapshot: tuple[AdminMerchantSnapshot, ...] | None = None
        self.loaded_at: datetime | None = None

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    async def get(self, source: AdminMerchantSource) -> tuple[AdminMerchantSnapshot, ...]:
        if self._snapshot is None or not self.enabled:
            return await self.refresh(source)
        return self._snapshot

    async def refresh(self, source: AdminMerchantSource) -> tuple[AdminMerchantSnapshot, ...]:
        records = await source.list_active_admin_merchants()
        snapshot = tuple(AdminMerchantSnapshot.from_record(record) for record in records)
        self._snapshot = snapshot
        self.loaded_at = utcnow()
        logger.info("Admin merchant cache refreshed", extra={"merchants": len(snapshot)})
        return snapshot

    def invalidate(self) -> None:
        """Drop the snapshot; the next `get` reloads it."""
        self._snapshot = None
        self.loaded_at = None


_cache_instance: AdminMerchantCache | None = None


def get_admin_merchant_cache() -> AdminMerchantCache:
    """Get or create the global AdminMerchantCache instance."""
    global _cache_instance
    if _cache_instance is None:
        _cache_instance = AdminMerchantCache(enabled=settings.admin_merchant_cache_enabled)
    return _cache_instance
