"""Transaction repository with bulk insert and review queries."""
from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.models.transaction import Transaction
from txnflow.repositories.base import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Transaction model."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Transaction)

    async def bulk_create(self, transactions: list[Transaction]) -> list[Transaction]:
        """Insert many transactions in one commit, preserving order."""
        if not transactions:
            return []
        self.db.add_all(transactions)
        await self._commit("bulk_create")
        return transactions

    async def get_by_user(
        self, user_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[Transaction]:
        """Get all transactions for a user with pagination."""
        result = await self._execute(
            select(Transaction)
            .where(Transaction.user_id == user_id, Transaction.deleted_at.is_(None))
            .order_by(Transaction.txn_date.desc(), Transaction.created_at)
            .offset(skip)
            .limit(limit),
            "get_by_user",
        )
        return list(result.scalars().all())

    async def get_by_ids(self, user_id: UUID, ids: Iterable[UUID]) -> list[Transaction]:
        """Get a user's transactions by id. Ids owned by other users are ignored."""
        ids = list(ids)
        if not ids:
            return []
        result = await self._execute(
            select(Transaction).where(
                Transaction.user_id == user_id,
                Transaction.id.in_(ids),
                Transaction.deleted_at.is_(None),
            ),
            "get_by_ids",
        )
        return list(result.scalars().all())

    async def list_needs_review(
        self, user_id: UUID, skip: int = 0, limit: int = 100
    ) -> list[Transaction]:
        """Transactions whose category came from the fallback tier."""
        result = await self._execute(
            select(Transaction)
            .where(
                Transaction.user_id == user_id,
                Transaction.needs_review.is_(True),
                Transaction.deleted_at.is_(None),
            )
            .order_by(Transaction.txn_date.desc())
            .offset(skip)
            .limit(limit),
            "list_needs_review",
        )
        return list(result.scalars().all())

    async def existing_external_ids(self, user_id: UUID, external_ids: Iterable[str]) -> set[str]:
        """Subset of aggregator ids already imported for the user."""
        external_ids = [eid for eid in external_ids if eid]
        if not external_ids:
            return set()
        result = await self._execute(
            select(Transaction.external_transaction_id).where(
                Transaction.user_id == user_id,
                Transaction.external_transaction_id.in_(external_ids),
            ),
            "existing_external_ids",
        )
        return {row for row in result.scalars().all() if row}

    async def save(self) -> None:
        """Commit changes made to loaded transactions."""
        await self._commit("save")
