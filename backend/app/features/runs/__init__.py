"""
Stored runs.

Usage:
    from app.features.runs import Run, RunRepository, SqlRunStore

Components:
- Run: SQLAlchemy model
- RunRepository: Data access and totals
- SqlRunStore: Persistence collaborator for RunTracker
- RunService: Manual entry and GPX export
"""

from .models import Run
from .schemas import (
    ManualRunCreate,
    RunMetadataIn,
    RunResponse,
    RunTotalsResponse,
)
from .repository import RunRepository, RunTotals
from .store import SqlRunStore
from .service import RunService

__all__ = [
    # Models
    "Run",
    # Schemas
    "ManualRunCreate",
    "RunMetadataIn",
    "RunResponse",
    "RunTotalsResponse",
    # Repository
    "RunRepository",
    "RunTotals",
    # Store / service
    "SqlRunStore",
    "RunService",
]
