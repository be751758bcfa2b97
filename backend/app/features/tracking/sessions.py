"""
Tracking session registry.

Keeps one RunTracker per user for the HTTP layer. The mobile client
posts its GPS fixes, which are pushed into the user's
PushLocationProvider and from there into the tracker.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from app.config import settings
from .location import PushLocationProvider, WatchOptions
from .tracker import RunStore, RunTracker

logger = logging.getLogger(__name__)


StoreFactory = Callable[[str], RunStore]


@dataclass
class TrackingSession:
    """A user's tracker together with the provider feeding it."""
    user_id: str
    tracker: RunTracker
    provider: PushLocationProvider


class TrackingSessionManager:
    """
    Registry of tracking sessions, one per user.

    Usage:
        manager = TrackingSessionManager(store_factory=lambda uid: SqlRunStore(..., uid))
        session = manager.get_or_create(user_id)
        await session.tracker.start()
        # ... on shutdown ...
        await manager.close_all()
    """

    def __init__(self, store_factory: Optional[StoreFactory] = None):
        self.store_factory = store_factory
        self._sessions: dict[str, TrackingSession] = {}

    def get(self, user_id: str) -> Optional[TrackingSession]:
        return self._sessions.get(user_id)

    def get_or_create(self, user_id: str) -> TrackingSession:
        """Get the user's session, creating tracker and provider on first use."""
        session = self._sessions.get(user_id)
        if session is None:
            provider = PushLocationProvider(permission_granted=False)
            store = self.store_factory(user_id) if self.store_factory else None
            tracker = RunTracker(
                provider,
                store,
                tick_interval=settings.tick_interval_seconds,
                body_weight_kg=settings.body_weight_kg,
                watch_options=WatchOptions(
                    time_interval_ms=settings.location_time_interval_ms,
                    distance_interval_m=settings.location_distance_interval_m,
                ),
                current_pace_window_minutes=settings.current_pace_window_minutes,
                current_pace_window_km=settings.current_pace_window_km,
            )
            session = TrackingSession(user_id=user_id, tracker=tracker, provider=provider)
            self._sessions[user_id] = session
            logger.debug(f"Created tracking session for user {user_id}")
        return session

    async def discard(self, user_id: str) -> None:
        """Close and forget a user's session."""
        session = self._sessions.pop(user_id, None)
        if session is not None:
            await session.tracker.close()

    async def close_all(self) -> None:
        """Release every tracker's subscription and tick."""
        for user_id in list(self._sessions):
            await self.discard(user_id)
        logger.info("All tracking sessions closed")

    @property
    def active_count(self) -> int:
        return sum(1 for s in self._sessions.values() if s.tracker.is_running)

    def __len__(self) -> int:
        return len(self._sessions)
