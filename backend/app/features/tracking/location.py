"""
Location provider abstraction.

RunTracker only sees LocationProvider: it asks for permission once and
opens a push subscription that calls back with every new sample.

PushLocationProvider is the in-memory implementation. The HTTP layer
pushes samples posted by the mobile client into it, and tests push
synthetic samples with controlled timestamps.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional, Protocol

from app.shared.constants import LOCATION_DISTANCE_INTERVAL_M, LOCATION_TIME_INTERVAL_MS
from .models import LocationSample

logger = logging.getLogger(__name__)


SampleCallback = Callable[[LocationSample], None]
ErrorCallback = Callable[[Exception], None]


@dataclass(frozen=True)
class WatchOptions:
    """Target sampling cadence: every N ms or every N meters moved."""
    time_interval_ms: int = LOCATION_TIME_INTERVAL_MS
    distance_interval_m: float = LOCATION_DISTANCE_INTERVAL_M


class LocationSubscription(Protocol):
    """Handle returned by watch_position(). remove() must be idempotent."""

    def remove(self) -> None:
        ...


class LocationProvider(ABC):
    """Source of position updates."""

    @abstractmethod
    async def request_permission(self) -> bool:
        """Ask for location access. Returns True if granted."""

    @abstractmethod
    async def watch_position(
        self,
        on_sample: SampleCallback,
        options: WatchOptions,
        on_error: Optional[ErrorCallback] = None,
    ) -> LocationSubscription:
        """
        Start delivering samples to on_sample.

        Raises:
            Exception: Any provider failure while setting up the stream
        """


# =============================================================================
# In-memory push provider
# =============================================================================

class PushSubscription:
    """Subscription handle of PushLocationProvider."""

    def __init__(
        self,
        provider: "PushLocationProvider",
        on_sample: SampleCallback,
        options: WatchOptions,
        on_error: Optional[ErrorCallback],
    ):
        self._provider = provider
        self.on_sample = on_sample
        self.on_error = on_error
        self.options = options
        self.active = True

    def remove(self) -> None:
        if not self.active:
            return
        self.active = False
        self._provider._detach(self)


class PushLocationProvider(LocationProvider):
    """
    Location provider fed explicitly through push().

    Usage:
        provider = PushLocationProvider()
        tracker = RunTracker(provider)
        await tracker.request_permission()
        await tracker.start()
        provider.push(LocationSample(37.77, -122.42, timestamp=0))
    """

    def __init__(self, permission_granted: bool = True):
        self.permission_granted = permission_granted
        self._subscriptions: list[PushSubscription] = []
        self._next_watch_error: Optional[Exception] = None

    async def request_permission(self) -> bool:
        return self.permission_granted

    async def watch_position(
        self,
        on_sample: SampleCallback,
        options: WatchOptions,
        on_error: Optional[ErrorCallback] = None,
    ) -> PushSubscription:
        if self._next_watch_error is not None:
            error, self._next_watch_error = self._next_watch_error, None
            raise error

        subscription = PushSubscription(self, on_sample, options, on_error)
        self._subscriptions.append(subscription)
        logger.debug(f"Location watch opened ({len(self._subscriptions)} active)")
        return subscription

    def push(self, sample: LocationSample) -> int:
        """
        Deliver a sample to every live subscription.

        Returns:
            Number of subscriptions the sample reached
        """
        delivered = 0
        for subscription in list(self._subscriptions):
            subscription.on_sample(sample)
            delivered += 1
        return delivered

    def fail(self, error: Exception) -> None:
        """Report a stream failure to every live subscription."""
        for subscription in list(self._subscriptions):
            if subscription.on_error is not None:
                subscription.on_error(error)

    def fail_next_watch(self, error: Exception) -> None:
        """Make the next watch_position() call raise error."""
        self._next_watch_error = error

    @property
    def active_subscriptions(self) -> int:
        return len(self._subscriptions)

    def _detach(self, subscription: PushSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)
            logger.debug(f"Location watch removed ({len(self._subscriptions)} active)")
