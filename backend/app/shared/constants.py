"""
Unified constants for run tracking.

This module provides a single source of truth for enums and
default values shared by tracking, persistence and the API.
"""

from enum import Enum


class EffortLevel(str, Enum):
    """How hard the run felt, chosen by the runner after stopping."""
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    MAX = "max"


class RunSource(str, Enum):
    """Where a stored run came from."""
    TRACKED = "tracked"   # Recorded live with GPS
    MANUAL = "manual"     # Entered by hand


# Mood rating bounds (inclusive)
MOOD_MIN = 1
MOOD_MAX = 5

# Calorie estimate: kcal per kg of body weight per km
CALORIES_PER_KG_PER_KM = 0.8
DEFAULT_BODY_WEIGHT_KG = 70.0

# Current pace trailing window
CURRENT_PACE_WINDOW_MINUTES = 5.0
CURRENT_PACE_WINDOW_KM = 1.0

# Location sampling targets
LOCATION_TIME_INTERVAL_MS = 1000
LOCATION_DISTANCE_INTERVAL_M = 5.0
