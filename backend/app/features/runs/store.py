"""
SQL-backed run store.

Implements the RunStore collaborator of RunTracker on top of the
async SQLAlchemy session factory.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.features.tracking.exceptions import PersistenceError
from app.features.tracking.models import RunMetadata, RunSummary
from app.shared.constants import RunSource
from .models import Run
from .repository import RunRepository

logger = logging.getLogger(__name__)


def ms_to_datetime(ms: Optional[int]) -> Optional[datetime]:
    """Epoch milliseconds to naive UTC datetime."""
    if ms is None:
        return None
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).replace(tzinfo=None)


class SqlRunStore:
    """
    Saves finished runs for one user.

    Each save runs in its own session and commits immediately.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], user_id: str):
        self.session_factory = session_factory
        self.user_id = user_id

    async def save_run(self, summary: RunSummary, metadata: RunMetadata) -> Run:
        """
        Insert a run row.

        Raises:
            PersistenceError: If the database rejects the write
        """
        try:
            async with self.session_factory() as db:
                repo = RunRepository(db)
                run = await repo.create(
                    user_id=self.user_id,
                    distance_km=summary.distance_km,
                    duration_s=summary.duration_s,
                    average_pace_min_km=summary.average_pace_min_km,
                    calories=summary.calories,
                    route_data=[point.to_dict() for point in summary.route],
                    effort_level=metadata.effort_level.value,
                    mood_rating=metadata.mood,
                    source=RunSource.TRACKED.value,
                    started_at=ms_to_datetime(summary.started_at_ms),
                )
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Error saving run for user {self.user_id}: {e}")
            raise PersistenceError(f"Database rejected run: {e}") from e

        logger.info(f"Saved run {run.id} for user {self.user_id}")
        return run
