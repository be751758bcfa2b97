"""
Live run statistics.

Pure functions over a recorded route. The tracker tick and the stop
snapshot both go through compute_stats(), so stats are always rebuilt
from the route instead of patched incrementally.
"""

import math
from typing import Sequence

from app.shared.constants import (
    CALORIES_PER_KG_PER_KM,
    CURRENT_PACE_WINDOW_KM,
    CURRENT_PACE_WINDOW_MINUTES,
    DEFAULT_BODY_WEIGHT_KG,
)
from app.shared.geo import calculate_total_distance, segment_distance
from .models import LocationPoint, RunStats


def route_distance_km(route: Sequence[LocationPoint]) -> float:
    """Total Haversine distance of the route in km."""
    return calculate_total_distance(route)


def elapsed_seconds(now_ms: int, start_ms: int, paused_ms: int) -> int:
    """
    Active time of a session in whole seconds.

    Args:
        now_ms: Current clock value (epoch ms)
        start_ms: When the session started (epoch ms)
        paused_ms: Total time spent paused (ms)

    Returns:
        Elapsed seconds, truncated, never negative
    """
    active_ms = now_ms - start_ms - paused_ms
    if active_ms <= 0:
        return 0
    return int(active_ms // 1000)


def average_pace(duration_s: float, distance_km: float) -> float:
    """Average pace in min/km, 0 when no distance was covered."""
    if distance_km <= 0:
        return 0.0
    return (duration_s / 60) / distance_km


def current_pace(
    route: Sequence[LocationPoint],
    window_minutes: float = CURRENT_PACE_WINDOW_MINUTES,
    window_km: float = CURRENT_PACE_WINDOW_KM,
) -> float:
    """
    Pace over the trailing part of the route, in min/km.

    Walks backward from the latest point, adding one segment at a time
    while the segment start is less than window_minutes before the last
    point and less than window_km has been collected. The time check is
    evaluated first.

    Returns:
        Pace in min/km, 0 when the window holds no distance
    """
    if len(route) < 2:
        return 0.0

    window_ms = window_minutes * 60 * 1000
    last = route[-1]
    recent_km = 0.0
    i = len(route) - 1

    while (
        i > 0
        and (last.timestamp - route[i - 1].timestamp) < window_ms
        and recent_km < window_km
    ):
        recent_km += segment_distance(route[i - 1], route[i])
        i -= 1

    if recent_km <= 0:
        return 0.0

    recent_minutes = (last.timestamp - route[i].timestamp) / 1000 / 60
    return recent_minutes / recent_km


def estimate_calories(
    distance_km: float,
    body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG,
) -> int:
    """
    Rough calorie estimate: 0.8 kcal per kg per km.

    Rounds half up.
    """
    return int(math.floor(CALORIES_PER_KG_PER_KM * body_weight_kg * distance_km + 0.5))


def compute_stats(
    route: Sequence[LocationPoint],
    now_ms: int,
    start_ms: int,
    paused_ms: int = 0,
    *,
    body_weight_kg: float = DEFAULT_BODY_WEIGHT_KG,
    window_minutes: float = CURRENT_PACE_WINDOW_MINUTES,
    window_km: float = CURRENT_PACE_WINDOW_KM,
) -> RunStats:
    """
    Derive RunStats from the route and the session clock.

    Args:
        route: Recorded points in arrival order
        now_ms: Current clock value (epoch ms)
        start_ms: Session start (epoch ms)
        paused_ms: Total paused time to exclude (ms)
        body_weight_kg: Weight for the calorie estimate
        window_minutes: Current pace time window
        window_km: Current pace distance window

    Returns:
        RunStats snapshot
    """
    distance = route_distance_km(route)
    duration = elapsed_seconds(now_ms, start_ms, paused_ms)

    return RunStats(
        distance_km=distance,
        duration_s=duration,
        current_pace_min_km=current_pace(route, window_minutes, window_km),
        average_pace_min_km=average_pace(duration, distance),
        calories=estimate_calories(distance, body_weight_kg),
    )
