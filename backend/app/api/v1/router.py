"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from app.api.v1.routes import runs, tracking

api_router = APIRouter()

api_router.include_router(tracking.router, prefix="/tracking", tags=["Tracking"])
api_router.include_router(runs.router, prefix="/runs", tags=["Runs"])
