"""
Run repository.

Data access layer for Run model.
"""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.repository import BaseRepository
from .models import Run


@dataclass
class RunTotals:
    """Lifetime totals for one user."""
    total_runs: int = 0
    total_distance_km: float = 0.0
    total_duration_s: int = 0


class RunRepository(BaseRepository[Run]):
    """Repository for run operations."""

    def __init__(self, db: AsyncSession):
        super().__init__(db, Run)

    async def list_for_user(self, user_id: str) -> list[Run]:
        """
        Get user's runs, newest first.

        Args:
            user_id: User's ID

        Returns:
            List of runs
        """
        return await self.get_all(order_by=Run.created_at.desc(), user_id=user_id)

    async def totals_for_user(self, user_id: str) -> RunTotals:
        """
        Aggregate run count, distance and duration for a user.

        Args:
            user_id: User's ID

        Returns:
            RunTotals (zeros when the user has no runs)
        """
        result = await self.db.execute(
            select(
                func.count(Run.id),
                func.coalesce(func.sum(Run.distance_km), 0.0),
                func.coalesce(func.sum(Run.duration_s), 0),
            ).where(Run.user_id == user_id)
        )
        count, distance, duration = result.one()
        return RunTotals(
            total_runs=int(count),
            total_distance_km=float(distance),
            total_duration_s=int(duration),
        )
