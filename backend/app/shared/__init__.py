"""
Shared utilities (NOT business logic).

Usage:
    from app.shared import haversine, calculate_total_distance
    from app.shared.formatters import format_pace
"""
from .geo import (
    haversine,
    segment_distance,
    calculate_total_distance,
    EARTH_RADIUS_KM,
)
from .formatters import (
    format_duration,
    format_duration_short,
    format_pace,
    format_distance,
)
from .constants import (
    EffortLevel,
    RunSource,
    MOOD_MIN,
    MOOD_MAX,
)
from .repository import BaseRepository

__all__ = [
    # geo
    "haversine",
    "segment_distance",
    "calculate_total_distance",
    "EARTH_RADIUS_KM",
    # formatters
    "format_duration",
    "format_duration_short",
    "format_pace",
    "format_distance",
    # constants
    "EffortLevel",
    "RunSource",
    "MOOD_MIN",
    "MOOD_MAX",
    # repository
    "BaseRepository",
]
