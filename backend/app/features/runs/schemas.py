"""
Run and tracking schemas.

Pydantic schemas for API request/response serialization.
"""

from datetime import datetime, timedelta
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.shared.constants import EffortLevel, MOOD_MAX, MOOD_MIN
from app.shared.formatters import format_distance, format_duration, format_pace

# Manual entries older than this are rejected
MANUAL_RUN_MAX_AGE_DAYS = 90


class RoutePoint(BaseModel):
    """Single recorded GPS point."""
    latitude: float
    longitude: float
    timestamp: int  # epoch ms


class RunMetadataIn(BaseModel):
    """Post-run input collected after stopping."""
    effort_level: EffortLevel
    mood: int = Field(..., ge=MOOD_MIN, le=MOOD_MAX)


class RunResponse(BaseModel):
    """Stored run."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    distance_km: float
    duration_s: int
    average_pace_min_km: Optional[float] = None
    calories: Optional[int] = None
    effort_level: Optional[EffortLevel] = None
    mood_rating: Optional[int] = None
    notes: Optional[str] = None
    source: str
    started_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    route_data: Optional[List[RoutePoint]] = None


class RunTotalsResponse(BaseModel):
    """Lifetime totals for a user."""
    total_runs: int
    total_distance_km: float
    total_duration_s: int
    total_duration_display: str


class ManualRunCreate(BaseModel):
    """Run entered by hand instead of tracked."""
    user_id: str
    start_time: datetime
    end_time: datetime
    distance_km: float = Field(..., ge=0.1, le=500)
    calories: Optional[int] = Field(default=None, ge=50, le=2000)
    effort_level: EffortLevel = EffortLevel.MODERATE
    mood: int = Field(default=3, ge=MOOD_MIN, le=MOOD_MAX)
    notes: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_times(self):
        if (self.start_time.tzinfo is None) != (self.end_time.tzinfo is None):
            raise ValueError(
                "start_time and end_time must both carry a UTC offset or both omit it"
            )
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")

        now = datetime.now(self.start_time.tzinfo)
        if self.start_time > now:
            raise ValueError("start_time cannot be in the future")
        if self.start_time < now - timedelta(days=MANUAL_RUN_MAX_AGE_DAYS):
            raise ValueError(
                f"start_time cannot be more than {MANUAL_RUN_MAX_AGE_DAYS} days ago"
            )
        return self

    @property
    def duration_s(self) -> int:
        return int((self.end_time - self.start_time).total_seconds())


# =============================================================================
# Live tracking
# =============================================================================

class PermissionIn(BaseModel):
    """Result of the device's location permission prompt."""
    granted: bool


class LocationSampleIn(BaseModel):
    """GPS fix posted by the client while tracking."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    timestamp: Optional[int] = None  # epoch ms; stamped on receipt if missing


class RunStatsResponse(BaseModel):
    """Live stats with display strings."""
    distance_km: float
    duration_s: int
    current_pace_min_km: float
    average_pace_min_km: float
    calories: int
    distance_display: str
    duration_display: str
    current_pace_display: str
    average_pace_display: str

    @classmethod
    def from_stats(cls, stats) -> "RunStatsResponse":
        return cls(
            distance_km=stats.distance_km,
            duration_s=stats.duration_s,
            current_pace_min_km=stats.current_pace_min_km,
            average_pace_min_km=stats.average_pace_min_km,
            calories=stats.calories,
            distance_display=format_distance(stats.distance_km),
            duration_display=format_duration(stats.duration_s),
            current_pace_display=format_pace(stats.current_pace_min_km),
            average_pace_display=format_pace(stats.average_pace_min_km),
        )


class TrackingStateResponse(BaseModel):
    """State of a user's tracking session."""
    state: str
    is_running: bool
    is_paused: bool
    has_permission: bool
    points: int
    stats: RunStatsResponse


class RunSummaryResponse(BaseModel):
    """Final snapshot returned on stop."""
    distance_km: float
    duration_s: int
    average_pace_min_km: float
    calories: int
    route: List[RoutePoint]


class SaveRunResponse(BaseModel):
    """Result of the save step. run is empty when nothing was saved."""
    saved: bool
    run: Optional[RunResponse] = None
