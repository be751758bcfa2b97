"""
Live Tracking Routes

Drive a user's RunTracker from the mobile client: permission,
start/pause/resume/stop, GPS samples and the post-run save step.
"""

from fastapi import APIRouter, Depends, HTTPException

from app.db.session import AsyncSessionLocal
from app.features.runs import RunResponse, RunMetadataIn, SqlRunStore
from app.features.runs.schemas import (
    LocationSampleIn,
    PermissionIn,
    RoutePoint,
    RunStatsResponse,
    RunSummaryResponse,
    SaveRunResponse,
    TrackingStateResponse,
)
from app.features.tracking import (
    LocationSample,
    PermissionDenied,
    PersistenceError,
    RunMetadata,
    SubscriptionError,
    TrackingSession,
    TrackingSessionManager,
    TrackingState,
)

router = APIRouter()


# Global session registry, closed on application shutdown
session_manager = TrackingSessionManager(
    store_factory=lambda user_id: SqlRunStore(AsyncSessionLocal, user_id)
)


def get_session_manager() -> TrackingSessionManager:
    """Dependency for the tracking session registry."""
    return session_manager


def _require_session(manager: TrackingSessionManager, user_id: str) -> TrackingSession:
    session = manager.get(user_id)
    if session is None:
        raise HTTPException(status_code=404, detail="No tracking session for user")
    return session


def _state_response(session: TrackingSession) -> TrackingStateResponse:
    tracker = session.tracker
    return TrackingStateResponse(
        state=tracker.state.value,
        is_running=tracker.is_running,
        is_paused=tracker.is_paused,
        has_permission=tracker.has_permission,
        points=len(tracker.route),
        stats=RunStatsResponse.from_stats(tracker.snapshot()),
    )


@router.get("/{user_id}", response_model=TrackingStateResponse)
async def get_tracking_state(
    user_id: str,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """Current session state with freshly computed stats."""
    return _state_response(_require_session(manager, user_id))


@router.post("/{user_id}/permission", response_model=TrackingStateResponse)
async def set_permission(
    user_id: str,
    request: PermissionIn,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """Record the outcome of the device's location permission prompt."""
    session = manager.get_or_create(user_id)
    session.provider.permission_granted = request.granted
    await session.tracker.request_permission()
    return _state_response(session)


@router.post("/{user_id}/start", response_model=TrackingStateResponse)
async def start_run(
    user_id: str,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """Start a run. Ignored if one is already active."""
    session = manager.get_or_create(user_id)
    try:
        await session.tracker.start()
    except PermissionDenied as e:
        raise HTTPException(status_code=403, detail=str(e))
    except SubscriptionError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _state_response(session)


@router.post("/{user_id}/samples", response_model=TrackingStateResponse)
async def push_sample(
    user_id: str,
    sample: LocationSampleIn,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """Feed one GPS fix. Dropped unless the run is active and not paused."""
    session = _require_session(manager, user_id)
    session.provider.push(
        LocationSample(
            latitude=sample.latitude,
            longitude=sample.longitude,
            timestamp=sample.timestamp,
        )
    )
    return _state_response(session)


@router.post("/{user_id}/pause", response_model=TrackingStateResponse)
async def pause_run(
    user_id: str,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    session = _require_session(manager, user_id)
    await session.tracker.pause()
    return _state_response(session)


@router.post("/{user_id}/resume", response_model=TrackingStateResponse)
async def resume_run(
    user_id: str,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    session = _require_session(manager, user_id)
    try:
        await session.tracker.resume()
    except SubscriptionError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return _state_response(session)


@router.post("/{user_id}/stop", response_model=RunSummaryResponse)
async def stop_run(
    user_id: str,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """Stop the run and return the final snapshot. Nothing is saved yet."""
    session = _require_session(manager, user_id)
    summary = await session.tracker.stop()
    if summary is None:
        raise HTTPException(status_code=409, detail="No active run to stop")

    return RunSummaryResponse(
        distance_km=summary.distance_km,
        duration_s=summary.duration_s,
        average_pace_min_km=summary.average_pace_min_km,
        calories=summary.calories,
        route=[RoutePoint(**point.to_dict()) for point in summary.route],
    )


@router.post("/{user_id}/save", response_model=SaveRunResponse)
async def save_run(
    user_id: str,
    request: RunMetadataIn,
    manager: TrackingSessionManager = Depends(get_session_manager)
):
    """
    Save the stopped run with effort level and mood.

    Returns saved=false when there is no distance to save. A finished
    session is dropped from the registry once its save step is done, so
    a repeated save also returns saved=false.
    """
    session = manager.get(user_id)
    if session is None:
        return SaveRunResponse(saved=False)

    try:
        record = await session.tracker.save(
            RunMetadata(effort_level=request.effort_level, mood=request.mood)
        )
    except PersistenceError as e:
        raise HTTPException(status_code=503, detail=str(e))

    if session.tracker.state is TrackingState.STOPPED:
        await manager.discard(user_id)

    if record is None:
        return SaveRunResponse(saved=False)
    return SaveRunResponse(saved=True, run=RunResponse.model_validate(record))
