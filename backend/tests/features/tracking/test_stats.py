"""
Tests for live run statistics.

All functions here are pure, so tests build routes with explicit
timestamps and never touch timers.
"""

import math

import pytest

from app.features.tracking.models import LocationPoint, RunStats
from app.features.tracking.stats import (
    average_pace,
    compute_stats,
    current_pace,
    elapsed_seconds,
    estimate_calories,
    route_distance_km,
)
from app.shared.geo import haversine, segment_distance

MINUTE_MS = 60_000


def _point(lat, lon, minutes):
    return LocationPoint(latitude=lat, longitude=lon, timestamp=int(minutes * MINUTE_MS))


# =============================================================================
# Distance
# =============================================================================

class TestRouteDistance:
    """Tests for route_distance_km."""

    def test_empty_and_single_point(self):
        assert route_distance_km([]) == 0.0
        assert route_distance_km([_point(37.0, -122.0, 0)]) == 0.0

    def test_never_decreases_when_points_are_appended(self):
        """Distance is non-negative and monotonic in the number of points."""
        coords = [
            (37.7749, -122.4194),
            (37.7752, -122.4190),
            (37.7752, -122.4190),  # duplicate fix
            (37.7760, -122.4201),
            (37.7749, -122.4194),  # back to start
            (37.7800, -122.4100),
        ]
        route = []
        previous = 0.0
        for i, (lat, lon) in enumerate(coords):
            route.append(_point(lat, lon, i))
            distance = route_distance_km(route)
            assert distance >= 0
            assert distance >= previous
            previous = distance


# =============================================================================
# Duration and pace
# =============================================================================

class TestElapsedSeconds:
    """Tests for elapsed_seconds."""

    def test_truncates_to_whole_seconds(self):
        assert elapsed_seconds(now_ms=1999, start_ms=0, paused_ms=0) == 1

    def test_excludes_paused_time(self):
        assert elapsed_seconds(now_ms=20_000, start_ms=0, paused_ms=5_000) == 15

    def test_never_negative(self):
        assert elapsed_seconds(now_ms=0, start_ms=1_000, paused_ms=0) == 0


class TestAveragePace:
    """Tests for average_pace."""

    def test_minutes_per_km(self):
        """30 minutes over 5 km is 6 min/km."""
        assert average_pace(1800, 5.0) == pytest.approx(6.0)

    def test_zero_distance_is_zero(self):
        assert average_pace(600, 0.0) == 0.0


class TestCurrentPace:
    """Tests for the trailing-window current pace."""

    def test_fewer_than_two_points(self):
        assert current_pace([]) == 0.0
        assert current_pace([_point(37.0, -122.0, 0)]) == 0.0

    def test_whole_route_inside_window(self):
        """Short, recent route: every segment is in the window."""
        route = [_point(37.0 + i * 0.001, -122.0, i) for i in range(4)]
        expected_km = route_distance_km(route)

        assert current_pace(route) == pytest.approx(3 / expected_km)

    def test_time_window_limits_segments(self):
        """Segments starting 5+ minutes before the last point are left out."""
        route = [
            _point(37.000, -122.0, 0),
            _point(37.001, -122.0, 4),
            _point(37.002, -122.0, 6),
            _point(37.003, -122.0, 7),
        ]
        window_km = segment_distance(route[1], route[2]) + segment_distance(route[2], route[3])

        # Window spans route[1] (4 min) to route[3] (7 min)
        assert current_pace(route) == pytest.approx(3 / window_km)

    def test_distance_window_limits_segments(self):
        """Stops adding segments once 1 km has been collected."""
        step = 0.0054  # ~600 m of latitude
        route = [_point(37.0 + i * step, -122.0, i) for i in range(4)]
        seg = haversine(37.0, -122.0, 37.0 + step, -122.0)
        assert seg > 0.5

        # Two segments reach past 1 km, third one is not added
        window_km = segment_distance(route[2], route[3]) + segment_distance(route[1], route[2])
        assert current_pace(route) == pytest.approx(2 / window_km)

    def test_stationary_window_is_zero(self):
        """No distance in the window reports 0 instead of infinity."""
        route = [_point(37.0, -122.0, 0), _point(37.0, -122.0, 1)]
        assert current_pace(route) == 0.0

    def test_custom_window(self):
        route = [
            _point(37.000, -122.0, 0),
            _point(37.001, -122.0, 1),
            _point(37.002, -122.0, 2),
        ]
        last_seg = segment_distance(route[1], route[2])
        assert current_pace(route, window_minutes=1.5) == pytest.approx(1 / last_seg)


# =============================================================================
# Calories
# =============================================================================

class TestEstimateCalories:
    """Tests for estimate_calories."""

    def test_default_body_weight(self):
        """0.8 * 70 * 1.11 ≈ 62."""
        assert estimate_calories(1.11) == 62

    def test_zero_distance(self):
        assert estimate_calories(0.0) == 0

    def test_custom_body_weight(self):
        assert estimate_calories(10.0, body_weight_kg=80) == 640

    def test_returns_int(self):
        assert isinstance(estimate_calories(3.3), int)


# =============================================================================
# compute_stats
# =============================================================================

class TestComputeStats:
    """Tests for compute_stats."""

    @pytest.mark.parametrize("route", [
        [],
        [_point(37.0, -122.0, 0)],
    ])
    def test_short_route_is_all_zero(self, route):
        """0 or 1 points: no NaN, no infinity, zero distance and pace."""
        stats = compute_stats(route, now_ms=30_000, start_ms=0)

        assert stats.distance_km == 0
        assert stats.average_pace_min_km == 0
        assert stats.current_pace_min_km == 0
        assert stats.calories == 0
        assert stats.duration_s == 30
        for value in (stats.distance_km, stats.average_pace_min_km, stats.current_pace_min_km):
            assert math.isfinite(value)

    def test_two_point_run(self):
        route = [
            LocationPoint(37.7749, -122.4194, 0),
            LocationPoint(37.7849, -122.4194, 60_000),
        ]
        stats = compute_stats(route, now_ms=60_000, start_ms=0)
        distance = haversine(37.7749, -122.4194, 37.7849, -122.4194)

        assert isinstance(stats, RunStats)
        assert stats.distance_km == pytest.approx(distance)
        assert stats.duration_s == 60
        assert stats.average_pace_min_km == pytest.approx(1 / distance)
        assert stats.current_pace_min_km == pytest.approx(1 / distance)
        assert stats.calories == 62

    def test_is_idempotent(self):
        """Same inputs, same stats; nothing is accumulated between calls."""
        route = [_point(37.0 + i * 0.001, -122.0, i) for i in range(5)]
        first = compute_stats(route, now_ms=300_000, start_ms=0, paused_ms=10_000)
        second = compute_stats(route, now_ms=300_000, start_ms=0, paused_ms=10_000)
        assert first == second
