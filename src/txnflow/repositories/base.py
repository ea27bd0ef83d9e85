"""Base repository with generic CRUD operations."""
import logging
from typing import Any, Generic, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from txnflow.core.exceptions import PersistenceError
from txnflow.models.base import BaseModel, utcnow

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    """Generic repository providing CRUD operations for any model.

    Driver and connection failures are raised as PersistenceError;
    IntegrityError is left as-is so callers (and the API error handler)
    can tell constraint violations apart from an unavailable store.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    async def _execute(self, statement: Any, operation: str):
        try:
            return await self.db.execute(statement)
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error(
                "Database operation failed",
                extra={
                    "model": self.model.__name__,
                    "operation": operation,
                    "error_type": type(e).__name__,
                },
            )
            raise PersistenceError(
                {"model": self.model.__name__, "operation": operation, "error": str(e)}
            ) from e

    async def _commit(self, operation: str) -> None:
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise PersistenceError(
                {"model": self.model.__name__, "operation": operation, "error": str(e)}
            ) from e

    async def get_by_id(self, id: UUID) -> T | None:
        """Get a single (not soft-deleted) record by ID."""
        result = await self._execute(
            select(self.model).where(self.model.id == id, self.model.deleted_at.is_(None)),
            "get_by_id",
        )
        return result.scalar_one_or_none()

    async def create(self, obj: T) -> T:
        """Create a new record."""
        self.db.add(obj)
        await self._commit("create")
        await self.db.refresh(obj)
        return obj

    async def soft_delete(self, id: UUID) -> bool:
        """Soft delete a record by setting deleted_at."""
        obj = await self.get_by_id(id)
        if not obj:
            return False

        obj.deleted_at = utcnow()
        await self._commit("soft_delete")
        return True
