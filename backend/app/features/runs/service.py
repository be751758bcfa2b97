"""
Run service.

Manual entry, totals and GPX export for stored runs.
"""

import logging
from datetime import datetime, timezone

import gpxpy
import gpxpy.gpx
from sqlalchemy.ext.asyncio import AsyncSession

from app.features.tracking.stats import average_pace, estimate_calories
from app.config import settings
from app.shared.constants import RunSource
from .models import Run
from .repository import RunRepository, RunTotals
from .schemas import ManualRunCreate

logger = logging.getLogger(__name__)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class RunService:
    """Business logic around stored runs."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = RunRepository(db)

    async def create_manual(self, data: ManualRunCreate) -> Run:
        """
        Store a run entered by hand.

        Calories are estimated from distance when not given.
        """
        duration = data.duration_s
        calories = data.calories
        if calories is None:
            calories = estimate_calories(data.distance_km, settings.body_weight_kg)

        run = await self.repo.create(
            user_id=data.user_id,
            distance_km=data.distance_km,
            duration_s=duration,
            average_pace_min_km=average_pace(duration, data.distance_km),
            calories=calories,
            route_data=[],
            effort_level=data.effort_level.value,
            mood_rating=data.mood,
            notes=data.notes,
            source=RunSource.MANUAL.value,
            started_at=_naive_utc(data.start_time),
        )
        await self.db.commit()
        logger.info(f"Manual run {run.id} created for user {data.user_id}")
        return run

    async def get(self, run_id: str) -> Run | None:
        return await self.repo.get_by_id(run_id)

    async def list_for_user(self, user_id: str) -> list[Run]:
        return await self.repo.list_for_user(user_id)

    async def totals(self, user_id: str) -> RunTotals:
        return await self.repo.totals_for_user(user_id)

    async def delete(self, run: Run) -> None:
        await self.repo.delete(run)
        await self.db.commit()
        logger.info(f"Run {run.id} deleted")

    @staticmethod
    def to_gpx(run: Run) -> str:
        """
        Export the recorded route as GPX 1.1 XML.

        Raises:
            ValueError: If the run has no recorded route
        """
        points = run.route_data or []
        if not points:
            raise ValueError("Run has no recorded route")

        gpx = gpxpy.gpx.GPX()
        gpx.creator = "run-tracker"

        track = gpxpy.gpx.GPXTrack(name=f"Run {run.id}")
        gpx.tracks.append(track)
        segment = gpxpy.gpx.GPXTrackSegment()
        track.segments.append(segment)

        for point in points:
            segment.points.append(
                gpxpy.gpx.GPXTrackPoint(
                    latitude=point["latitude"],
                    longitude=point["longitude"],
                    time=datetime.fromtimestamp(point["timestamp"] / 1000, tz=timezone.utc),
                )
            )

        return gpx.to_xml()
