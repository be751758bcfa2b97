"""
Live run tracker.

Owns one tracking session at a time:

    IDLE --start--> RUNNING --pause--> PAUSED --resume--> RUNNING
    RUNNING|PAUSED --stop--> STOPPED --start--> RUNNING (new session)

Two sources mutate a session, both on the same event loop:
- the location subscription, which appends one point per sample
- the tick task, which recomputes RunStats from the route every second

Calls that make no sense in the current state (pause twice, resume
while running, stop when idle, start while running) are no-ops so that
double taps in the UI are harmless.

Usage:
    tracker = RunTracker(provider, store)
    await tracker.request_permission()
    await tracker.start()
    ...
    summary = await tracker.stop()
    run = await tracker.save(RunMetadata(EffortLevel.HARD, mood=4))
"""

import asyncio
import logging
import time
from typing import Any, Callable, Optional, Protocol

from app.shared.constants import (
    CURRENT_PACE_WINDOW_KM,
    CURRENT_PACE_WINDOW_MINUTES,
    DEFAULT_BODY_WEIGHT_KG,
)
from .exceptions import PermissionDenied, PersistenceError, SubscriptionError
from .location import LocationProvider, LocationSubscription, WatchOptions
from .models import (
    LocationPoint,
    LocationSample,
    RunMetadata,
    RunStats,
    RunSummary,
    TrackingState,
)
from .stats import compute_stats

logger = logging.getLogger(__name__)


StatsListener = Callable[[RunStats], None]


def wall_clock_ms() -> int:
    """Current epoch time in milliseconds."""
    return int(time.time() * 1000)


class RunStore(Protocol):
    """Persistence collaborator used by RunTracker.save()."""

    async def save_run(self, summary: RunSummary, metadata: RunMetadata) -> Any:
        """
        Persist a finished run and return the stored record.

        Raises:
            PersistenceError: If the store rejects the write
        """
        ...


class RunTracker:
    """
    GPS run tracking session.

    All lifecycle methods are coroutines: start() and resume() wait for
    the location subscription, pause() and stop() wait for the
    subscription and tick to be released.
    """

    def __init__(
        self,
        location: LocationProvider,
        store: Optional[RunStore] = None,
        *,
        clock: Optional[Callable[[], int]] = None,
        tick_interval: float = 1.0,
        body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG,
        watch_options: Optional[WatchOptions] = None,
        current_pace_window_minutes: float = CURRENT_PACE_WINDOW_MINUTES,
        current_pace_window_km: float = CURRENT_PACE_WINDOW_KM,
    ):
        self.location = location
        self.store = store
        self.tick_interval = tick_interval
        self.body_weight_kg = body_weight_kg
        self.watch_options = watch_options or WatchOptions()
        self.current_pace_window_minutes = current_pace_window_minutes
        self.current_pace_window_km = current_pace_window_km
        self._clock = clock or wall_clock_ms

        self.state = TrackingState.IDLE
        self.has_permission = False

        # Session accumulators
        self.start_time_ms = 0
        self.paused_accumulated_ms = 0
        self.last_pause_time_ms: Optional[int] = None
        self._route: list[LocationPoint] = []
        self._stats = RunStats()

        # Outcome of the last session
        self.summary: Optional[RunSummary] = None
        self.error: Optional[Exception] = None

        self._subscription: Optional[LocationSubscription] = None
        self._tick_task: Optional[asyncio.Task] = None
        self._listeners: list[StatsListener] = []
        # Bumped on every state transition; a subscribe that awaited across one is stale
        self._transition = 0

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        """True for an active session, paused or not."""
        return self.state in (TrackingState.RUNNING, TrackingState.PAUSED)

    @property
    def is_paused(self) -> bool:
        return self.state is TrackingState.PAUSED

    @property
    def route(self) -> tuple[LocationPoint, ...]:
        return tuple(self._route)

    @property
    def stats(self) -> RunStats:
        """Stats published by the last tick."""
        return self._stats

    def snapshot(self) -> RunStats:
        """Recompute stats right now without waiting for the next tick."""
        if self.is_running:
            return self._compute(self._clock())
        return self._stats

    def add_listener(self, listener: StatsListener) -> None:
        """Register a callback receiving RunStats on every tick."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StatsListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def request_permission(self) -> bool:
        """Ask the provider for location access and remember the answer."""
        self.has_permission = bool(await self.location.request_permission())
        if not self.has_permission:
            logger.warning("Location permission denied")
        return self.has_permission

    async def start(self) -> None:
        """
        Start a new session.

        Raises:
            PermissionDenied: Location access was not granted
            SubscriptionError: The location stream could not be opened
        """
        if self.is_running:
            logger.warning("start() ignored: a session is already active")
            return

        if not self.has_permission:
            raise PermissionDenied("Location permission is required to start a run")

        previous = (self.state, self.summary, self.error)

        self.start_time_ms = self._clock()
        self.paused_accumulated_ms = 0
        self.last_pause_time_ms = None
        self._route = []
        self._stats = RunStats()
        self.summary = None
        self.error = None
        transition = self._enter(TrackingState.RUNNING)

        try:
            subscribed = await self._subscribe(transition)
        except SubscriptionError:
            if self._transition == transition:
                self.state, self.summary, self.error = previous
            raise

        if not subscribed:
            logger.info("start() superseded while opening location updates")
            return

        self._start_tick()
        logger.info("Run started")

    async def pause(self) -> None:
        if self.state is not TrackingState.RUNNING:
            logger.debug(f"pause() ignored in state {self.state.value}")
            return

        now = self._clock()
        self._publish(self._compute(now))
        self.last_pause_time_ms = now
        self._enter(TrackingState.PAUSED)
        await self._release_and_wait()
        logger.info("Run paused")

    async def resume(self) -> None:
        """
        Resume a paused session.

        Raises:
            SubscriptionError: The location stream could not be reopened;
                the session is finalized and stays available for save()
        """
        if self.state is not TrackingState.PAUSED:
            logger.debug(f"resume() ignored in state {self.state.value}")
            return

        now = self._clock()
        if self.last_pause_time_ms is not None:
            self.paused_accumulated_ms += now - self.last_pause_time_ms
            self.last_pause_time_ms = None
        transition = self._enter(TrackingState.RUNNING)

        try:
            subscribed = await self._subscribe(transition)
        except SubscriptionError as e:
            if self._transition == transition:
                self.error = e
                self._finalize(now)
            raise

        if not subscribed:
            logger.info("resume() superseded while opening location updates")
            return

        self._start_tick()
        logger.info("Run resumed")

    async def stop(self) -> Optional[RunSummary]:
        """
        Finish the session.

        Returns:
            Final RunSummary, or None if no session was active
        """
        if not self.is_running:
            logger.debug(f"stop() ignored in state {self.state.value}")
            return None

        now = self._clock()
        await self._release_and_wait()
        summary = self._finalize(now)
        logger.info(
            f"Run stopped: {summary.distance_km:.3f} km in {summary.duration_s}s "
            f"({len(summary.route)} points)"
        )
        return summary

    async def save(self, metadata: RunMetadata) -> Any:
        """
        Persist the last finished session.

        Returns:
            Stored record, or None when there is nothing to save
            (no finished session, or zero distance)

        Raises:
            PersistenceError: The store rejected the run; the summary is
                kept so save() can be retried
        """
        summary = self.summary
        if summary is None or summary.is_empty:
            logger.info("save() skipped: no distance recorded")
            return None

        if self.store is None:
            raise PersistenceError("No run store configured")

        try:
            record = await self.store.save_run(summary, metadata)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save run: {e}") from e

        # A run is stored once; repeated save() calls find nothing to save
        if self.summary is summary:
            self.summary = None
        logger.info(f"Run saved ({summary.distance_km:.3f} km)")
        return record

    async def close(self) -> None:
        """Release subscription and tick on teardown. Drops an active session."""
        if self.is_running:
            logger.warning("Tracker closed with an active session")
            self._enter(TrackingState.IDLE)
        await self._release_and_wait()

    async def __aenter__(self) -> "RunTracker":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Location stream
    # -------------------------------------------------------------------------

    async def _subscribe(self, transition: int) -> bool:
        """
        Open the location stream for the transition that requested it.

        Returns:
            False if another transition happened while waiting for the
            provider; the new subscription is removed again.
        """
        try:
            subscription = await self.location.watch_position(
                self._on_sample,
                self.watch_options,
                on_error=self._on_stream_error,
            )
        except Exception as e:
            logger.error(f"Location subscription failed: {e}")
            raise SubscriptionError(f"Could not start location updates: {e}") from e

        if self._transition != transition or self.state is not TrackingState.RUNNING:
            subscription.remove()
            return False

        if self._subscription is not None:
            self._subscription.remove()
        self._subscription = subscription
        return True

    def _on_sample(self, sample: LocationSample) -> None:
        if self.state is not TrackingState.RUNNING:
            logger.debug("Location sample ignored: not running")
            return

        timestamp = sample.timestamp if sample.timestamp is not None else self._clock()
        self._route.append(
            LocationPoint(
                latitude=sample.latitude,
                longitude=sample.longitude,
                timestamp=timestamp,
            )
        )

    def _on_stream_error(self, error: Exception) -> None:
        if not self.is_running:
            return

        logger.error(f"Location stream failed, ending run: {error}")
        self.error = SubscriptionError(f"Location updates stopped: {error}")
        self._finalize(self._clock())

    # -------------------------------------------------------------------------
    # Tick
    # -------------------------------------------------------------------------

    def _start_tick(self) -> None:
        if self._tick_task is not None and not self._tick_task.done():
            self._tick_task.cancel()
        self._tick_task = asyncio.create_task(self._tick_loop())

    async def _tick_loop(self) -> None:
        while self.state is TrackingState.RUNNING:
            await asyncio.sleep(self.tick_interval)
            if self.state is not TrackingState.RUNNING:
                break
            self._publish(self._compute(self._clock()))

    def _publish(self, stats: RunStats) -> None:
        self._stats = stats
        for listener in list(self._listeners):
            try:
                listener(stats)
            except Exception:
                logger.exception("Stats listener failed")

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _paused_ms(self, now: int) -> int:
        paused = self.paused_accumulated_ms
        if self.state is TrackingState.PAUSED and self.last_pause_time_ms is not None:
            paused += now - self.last_pause_time_ms
        return paused

    def _compute(self, now: int) -> RunStats:
        return compute_stats(
            self._route,
            now_ms=now,
            start_ms=self.start_time_ms,
            paused_ms=self._paused_ms(now),
            body_weight_kg=self.body_weight_kg,
            window_minutes=self.current_pace_window_minutes,
            window_km=self.current_pace_window_km,
        )

    def _finalize(self, now: int) -> RunSummary:
        # Stats must be computed before leaving PAUSED so an open pause is excluded
        self._release()
        stats = self._compute(now)
        self._publish(stats)
        self.summary = RunSummary(
            distance_km=stats.distance_km,
            duration_s=stats.duration_s,
            average_pace_min_km=stats.average_pace_min_km,
            calories=stats.calories,
            route=tuple(self._route),
            started_at_ms=self.start_time_ms,
        )
        self._enter(TrackingState.STOPPED)
        self.last_pause_time_ms = None
        return self.summary

    def _enter(self, state: TrackingState) -> int:
        self.state = state
        self._transition += 1
        return self._transition

    def _release(self) -> Optional[asyncio.Task]:
        if self._subscription is not None:
            self._subscription.remove()
            self._subscription = None

        task, self._tick_task = self._tick_task, None
        if task is not None and not task.done():
            task.cancel()
        return task

    async def _release_and_wait(self) -> None:
        task = self._release()
        if task is None or task is asyncio.current_task():
            return
        try:
            await task
        except asyncio.CancelledError:
            pass
