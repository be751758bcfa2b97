"""
Tracking domain types.

Plain dataclasses and enums with no framework imports, shared by the
tracker, the stats functions and the persistence store.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional

from app.shared.constants import EffortLevel, MOOD_MIN, MOOD_MAX


class TrackingState(str, Enum):
    """Lifecycle state of a RunTracker."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class LocationPoint:
    """A recorded GPS fix. Timestamp is epoch milliseconds."""
    latitude: float
    longitude: float
    timestamp: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LocationSample:
    """
    A raw sample as delivered by a location provider.

    Providers that do not know the fix time leave timestamp empty;
    the tracker stamps it with its own clock on receipt.
    """
    latitude: float
    longitude: float
    timestamp: Optional[int] = None


@dataclass(frozen=True)
class RunStats:
    """Live statistics, recomputed from the route on every tick."""
    distance_km: float = 0.0
    duration_s: int = 0
    current_pace_min_km: float = 0.0
    average_pace_min_km: float = 0.0
    calories: int = 0


@dataclass(frozen=True)
class RunSummary:
    """Final snapshot of a session, produced on stop."""
    distance_km: float
    duration_s: int
    average_pace_min_km: float
    calories: int
    route: tuple[LocationPoint, ...] = field(default_factory=tuple)
    started_at_ms: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        """True when nothing worth saving was recorded."""
        return self.distance_km == 0


@dataclass(frozen=True)
class RunMetadata:
    """Post-run input collected from the runner before saving."""
    effort_level: EffortLevel
    mood: int

    def __post_init__(self):
        if not MOOD_MIN <= self.mood <= MOOD_MAX:
            raise ValueError(
                f"mood must be between {MOOD_MIN} and {MOOD_MAX}, got {self.mood}"
            )
        # Accept plain strings from callers
        object.__setattr__(self, "effort_level", EffortLevel(self.effort_level))
