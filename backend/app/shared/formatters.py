"""
Formatting utilities for display.

Used by API responses and GPX export.
"""

import math


def format_duration(seconds: int) -> str:
    """
    Format seconds as 'HH:MM:SS'.

    Args:
        seconds: Elapsed time in whole seconds

    Returns:
        Formatted string (e.g., '01:05:09')
    """
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_duration_short(seconds: int) -> str:
    """Format seconds as '1h 5m' or '5m' for totals."""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_pace(pace_min_km: float | None) -> str:
    """
    Format pace as 'M:SS'.

    Args:
        pace_min_km: Pace in minutes per km

    Returns:
        Formatted string (e.g., '6:30'), '--' when there is no pace yet
    """
    if pace_min_km is None or not math.isfinite(pace_min_km) or pace_min_km <= 0:
        return "--"

    minutes = int(pace_min_km)
    seconds = int((pace_min_km - minutes) * 60)

    return f"{minutes}:{seconds:02d}"


def format_distance(km: float) -> str:
    """
    Format distance.

    Args:
        km: Distance in kilometers

    Returns:
        Formatted string (e.g., '850m' or '12.50km')
    """
    if km < 1:
        return f"{km * 1000:.0f}m"
    return f"{km:.2f}km"
