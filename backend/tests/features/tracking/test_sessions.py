"""
Tests for TrackingSessionManager.
"""

import asyncio

from app.features.tracking import LocationSample, TrackingSessionManager, TrackingState


class TestTrackingSessionManager:

    def test_get_or_create_reuses_session(self):
        manager = TrackingSessionManager()

        first = manager.get_or_create("user-1")
        assert manager.get_or_create("user-1") is first
        assert manager.get("user-2") is None
        assert len(manager) == 1
        assert first.provider.permission_granted is False

    def test_discard_releases_tracker(self):
        manager = TrackingSessionManager()

        async def scenario():
            session = manager.get_or_create("user-1")
            session.provider.permission_granted = True
            await session.tracker.request_permission()
            await session.tracker.start()
            running = manager.active_count
            await manager.discard("user-1")
            await manager.discard("user-1")  # unknown user is ignored
            return session, running

        session, running = asyncio.run(scenario())
        assert running == 1
        assert len(manager) == 0
        assert manager.active_count == 0
        assert session.tracker.state is TrackingState.IDLE
        assert session.provider.push(LocationSample(37.0, -122.0, timestamp=0)) == 0

    def test_close_all(self):
        manager = TrackingSessionManager()
        manager.get_or_create("user-1")
        manager.get_or_create("user-2")

        asyncio.run(manager.close_all())
        assert len(manager) == 0
