"""
Base repository with common CRUD operations.

Uses SQLAlchemy async session for non-blocking database access.

Usage:
    class RunRepository(BaseRepository[Run]):
        def __init__(self, db: AsyncSession):
            super().__init__(db, Run)

        async def list_for_user(self, user_id: str) -> list[Run]:
            return await self.get_all(order_by=Run.created_at.desc(), user_id=user_id)
"""

from typing import Any, Generic, Optional, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """
    Base repository for database operations.

    Methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession, model: Type[T]):
        self.db = db
        self.model = model

    def _filtered(self, query, filters: dict[str, Any]):
        for key, value in filters.items():
            query = query.where(getattr(self.model, key) == value)
        return query

    async def get_by_id(self, id: str | int) -> T | None:
        """Get entity by primary key, None if missing."""
        return await self.db.get(self.model, id)

    async def get_all(self, order_by: Optional[Any] = None, **filters) -> list[T]:
        """
        Get all entities matching field values.

        Args:
            order_by: Optional ORDER BY clause
            **filters: Field name-value pairs to filter by

        Returns:
            List of matching entities
        """
        query = self._filtered(select(self.model), filters)
        if order_by is not None:
            query = query.order_by(order_by)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, **kwargs) -> T:
        """Create new entity and return it with generated fields loaded."""
        entity = self.model(**kwargs)
        self.db.add(entity)
        await self.db.flush()
        await self.db.refresh(entity)
        return entity

    async def delete(self, entity: T) -> None:
        await self.db.delete(entity)
        await self.db.flush()

    async def count(self, **filters) -> int:
        """Count entities matching field values."""
        query = self._filtered(select(func.count()).select_from(self.model), filters)
        result = await self.db.execute(query)
        return result.scalar() or 0
