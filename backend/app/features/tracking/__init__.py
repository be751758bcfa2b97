"""
Live GPS run tracking.

Usage:
    from app.features.tracking import RunTracker, PushLocationProvider
    from app.features.tracking.stats import compute_stats

Components:
- RunTracker: Session state machine (start/pause/resume/stop/save)
- compute_stats: Pure stats derivation from a route
- LocationProvider: Location source interface
- TrackingSessionManager: One tracker per user for the API
"""

from .exceptions import (
    TrackingError,
    PermissionDenied,
    SubscriptionError,
    PersistenceError,
)
from .location import (
    LocationProvider,
    LocationSubscription,
    PushLocationProvider,
    WatchOptions,
)
from .models import (
    LocationPoint,
    LocationSample,
    RunMetadata,
    RunStats,
    RunSummary,
    TrackingState,
)
from .stats import compute_stats
from .tracker import RunStore, RunTracker
from .sessions import TrackingSession, TrackingSessionManager

__all__ = [
    # Exceptions
    "TrackingError",
    "PermissionDenied",
    "SubscriptionError",
    "PersistenceError",
    # Location
    "LocationProvider",
    "LocationSubscription",
    "PushLocationProvider",
    "WatchOptions",
    # Models
    "LocationPoint",
    "LocationSample",
    "RunMetadata",
    "RunStats",
    "RunSummary",
    "TrackingState",
    # Logic
    "compute_stats",
    "RunStore",
    "RunTracker",
    # Sessions
    "TrackingSession",
    "TrackingSessionManager",
]
