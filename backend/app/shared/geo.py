"""
Geographic utility functions.

This is the SINGLE SOURCE OF TRUTH for geographic calculations.
DO NOT duplicate these functions elsewhere.
"""
import math
from typing import Iterable, Protocol

# Earth radius in kilometers
EARTH_RADIUS_KM = 6371.0


class HasCoordinates(Protocol):
    """Anything carrying latitude/longitude in degrees."""
    latitude: float
    longitude: float


def haversine(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate great-circle distance between two points.

    Args:
        lat1, lon1: First point coordinates (degrees)
        lat2, lon2: Second point coordinates (degrees)

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) *
        math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def segment_distance(start: HasCoordinates, end: HasCoordinates) -> float:
    """Distance in km between two recorded points."""
    return haversine(start.latitude, start.longitude, end.latitude, end.longitude)


def calculate_total_distance(points: Iterable[HasCoordinates]) -> float:
    """
    Calculate total distance for a route.

    Every consecutive pair counts; no smoothing or outlier rejection,
    so GPS jitter adds to the total.

    Args:
        points: Ordered points with latitude/longitude

    Returns:
        Total distance in kilometers (0 for fewer than 2 points)
    """
    total = 0.0
    previous = None

    for point in points:
        if previous is not None:
            total += segment_distance(previous, point)
        previous = point

    return total
