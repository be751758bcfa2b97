"""
Tests for stored runs.

Uses an in-memory SQLite database through aiosqlite.
"""

import asyncio
from datetime import datetime, timedelta, timezone

import gpxpy
import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.session import init_db
from app.features.runs import ManualRunCreate, RunRepository, RunService, SqlRunStore
from app.features.tracking import (
    LocationPoint,
    PersistenceError,
    RunMetadata,
    RunSummary,
)
from app.shared.constants import EffortLevel


# =============================================================================
# Fixtures
# =============================================================================

def _memory_engine():
    return create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )


def _session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


SUMMARY = RunSummary(
    distance_km=1.112,
    duration_s=60,
    average_pace_min_km=0.9,
    calories=62,
    route=(
        LocationPoint(37.7749, -122.4194, 1_700_000_000_000),
        LocationPoint(37.7849, -122.4194, 1_700_000_060_000),
    ),
    started_at_ms=1_700_000_000_000,
)
METADATA = RunMetadata(effort_level=EffortLevel.HARD, mood=5)


async def _with_db(callback):
    """Run callback(session_factory) against a fresh in-memory database."""
    engine = _memory_engine()
    try:
        await init_db(engine)
        return await callback(_session_factory(engine))
    finally:
        await engine.dispose()


# =============================================================================
# SqlRunStore
# =============================================================================

class TestSqlRunStore:
    """Tests for the tracker's persistence collaborator."""

    def test_save_run_creates_row(self):
        async def scenario(factory):
            run = await SqlRunStore(factory, "user-1").save_run(SUMMARY, METADATA)
            async with factory() as db:
                stored = await RunRepository(db).get_by_id(run.id)
            return run, stored

        run, stored = asyncio.run(_with_db(scenario))

        assert run.id
        assert stored is not None
        assert stored.user_id == "user-1"
        assert stored.distance_km == pytest.approx(1.112)
        assert stored.duration_s == 60
        assert stored.calories == 62
        assert stored.effort_level == "hard"
        assert stored.mood_rating == 5
        assert stored.source == "tracked"
        assert stored.point_count == 2
        assert stored.route_data[0] == {
            "latitude": 37.7749,
            "longitude": -122.4194,
            "timestamp": 1_700_000_000_000,
        }
        assert stored.started_at == datetime(2023, 11, 14, 22, 13, 20)

    def test_database_error_becomes_persistence_error(self):
        """Without tables the insert fails and is reported as PersistenceError."""
        async def scenario():
            engine = _memory_engine()
            try:
                store = SqlRunStore(_session_factory(engine), "user-1")
                await store.save_run(SUMMARY, METADATA)
            finally:
                await engine.dispose()

        with pytest.raises(PersistenceError):
            asyncio.run(scenario())


# =============================================================================
# RunRepository
# =============================================================================

class TestRunRepository:

    def test_totals_and_listing(self):
        async def scenario(factory):
            store = SqlRunStore(factory, "user-1")
            await store.save_run(SUMMARY, METADATA)
            await store.save_run(SUMMARY, METADATA)
            await SqlRunStore(factory, "user-2").save_run(SUMMARY, METADATA)

            async with factory() as db:
                repo = RunRepository(db)
                return (
                    await repo.totals_for_user("user-1"),
                    await repo.totals_for_user("nobody"),
                    await repo.list_for_user("user-1"),
                    await repo.count(user_id="user-2"),
                )

        totals, empty, runs, other_count = asyncio.run(_with_db(scenario))

        assert totals.total_runs == 2
        assert totals.total_distance_km == pytest.approx(2.224)
        assert totals.total_duration_s == 120
        assert empty.total_runs == 0
        assert empty.total_distance_km == 0
        assert len(runs) == 2
        assert other_count == 1


# =============================================================================
# RunService
# =============================================================================

class TestRunService:

    def test_manual_run_estimates_calories(self):
        start = datetime.now() - timedelta(days=1)
        data = ManualRunCreate(
            user_id="user-1",
            start_time=start,
            end_time=start + timedelta(minutes=30),
            distance_km=5.0,
        )

        async def scenario(factory):
            async with factory() as db:
                return await RunService(db).create_manual(data)

        run = asyncio.run(_with_db(scenario))

        assert run.source == "manual"
        assert run.duration_s == 1800
        assert run.average_pace_min_km == pytest.approx(6.0)
        assert run.calories == 280  # 0.8 * 70 * 5
        assert run.effort_level == "moderate"
        assert run.mood_rating == 3

    def test_manual_run_keeps_given_calories(self):
        start = datetime.now() - timedelta(hours=2)
        data = ManualRunCreate(
            user_id="user-1",
            start_time=start,
            end_time=start + timedelta(minutes=45),
            distance_km=8.0,
            calories=600,
            effort_level="hard",
            mood=4,
            notes="Hill repeats",
        )

        async def scenario(factory):
            async with factory() as db:
                return await RunService(db).create_manual(data)

        run = asyncio.run(_with_db(scenario))
        assert run.calories == 600
        assert run.notes == "Hill repeats"

    def test_gpx_export(self):
        async def scenario(factory):
            run = await SqlRunStore(factory, "user-1").save_run(SUMMARY, METADATA)
            return RunService.to_gpx(run)

        xml = asyncio.run(_with_db(scenario))
        parsed = gpxpy.parse(xml)
        points = parsed.tracks[0].segments[0].points

        assert len(points) == 2
        assert points[1].latitude == pytest.approx(37.7849)
        assert points[0].time.year == 2023

    def test_gpx_export_without_route(self):
        async def scenario(factory):
            start = datetime.now() - timedelta(hours=1)
            async with factory() as db:
                run = await RunService(db).create_manual(
                    ManualRunCreate(
                        user_id="user-1",
                        start_time=start,
                        end_time=start + timedelta(minutes=20),
                        distance_km=3.0,
                    )
                )
            return run

        run = asyncio.run(_with_db(scenario))
        with pytest.raises(ValueError):
            RunService.to_gpx(run)


class TestManualRunValidation:

    def _payload(self, **overrides):
        start = datetime.now() - timedelta(days=1)
        payload = {
            "user_id": "user-1",
            "start_time": start,
            "end_time": start + timedelta(minutes=30),
            "distance_km": 5.0,
        }
        payload.update(overrides)
        return payload

    def test_end_before_start(self):
        payload = self._payload()
        payload["end_time"] = payload["start_time"] - timedelta(minutes=1)
        with pytest.raises(ValidationError):
            ManualRunCreate(**payload)

    def test_mixed_timezone_awareness(self):
        start = datetime.now(timezone.utc) - timedelta(days=1)
        payload = self._payload(
            start_time=start.replace(tzinfo=None),
            end_time=start + timedelta(minutes=30),
        )
        with pytest.raises(ValidationError):
            ManualRunCreate(**payload)

    def test_aware_times(self):
        start = datetime.now(timezone.utc) - timedelta(days=1)
        data = ManualRunCreate(
            **self._payload(start_time=start, end_time=start + timedelta(minutes=30))
        )
        assert data.duration_s == 1800

    def test_future_start(self):
        start = datetime.now() + timedelta(days=1)
        with pytest.raises(ValidationError):
            ManualRunCreate(**self._payload(start_time=start, end_time=start + timedelta(hours=1)))

    def test_older_than_90_days(self):
        start = datetime.now() - timedelta(days=91)
        with pytest.raises(ValidationError):
            ManualRunCreate(**self._payload(start_time=start, end_time=start + timedelta(hours=1)))

    @pytest.mark.parametrize("field,value", [
        ("distance_km", 0.05),
        ("distance_km", 501),
        ("calories", 10),
        ("calories", 2500),
        ("mood", 0),
        ("mood", 6),
        ("notes", "x" * 501),
        ("effort_level", "crawl"),
    ])
    def test_out_of_range_fields(self, field, value):
        with pytest.raises(ValidationError):
            ManualRunCreate(**self._payload(**{field: value}))
