"""
Run model.

Stores finished runs, either tracked live with GPS or entered by hand.
"""

from datetime import datetime
from sqlalchemy import Column, String, DateTime, Float, Integer, Text, JSON
import uuid

from app.models.base import Base
from app.shared.constants import RunSource


class Run(Base):
    """
    A finished run.

    Created once when the runner saves; never updated by the tracker.
    route_data holds the recorded points as
    [{"latitude", "longitude", "timestamp"}, ...].
    """

    __tablename__ = "runs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)

    # Stats
    distance_km = Column(Float, nullable=False)
    duration_s = Column(Integer, nullable=False)
    average_pace_min_km = Column(Float, nullable=True)
    calories = Column(Integer, nullable=True)

    # Route
    route_data = Column(JSON, nullable=True)

    # Post-run input
    effort_level = Column(String(20), nullable=True)
    mood_rating = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)

    source = Column(String(20), nullable=False, default=RunSource.TRACKED.value)

    # Timestamps
    started_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    def __repr__(self):
        return f"<Run {self.id} user={self.user_id} {self.distance_km:.2f}km>"

    @property
    def point_count(self) -> int:
        return len(self.route_data or [])
