"""
Run Routes

Endpoints for listing, entering and exporting stored runs.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_async_db
from app.features.runs import (
    ManualRunCreate,
    RunResponse,
    RunService,
    RunTotalsResponse,
)
from app.shared.formatters import format_duration_short

router = APIRouter()


async def _get_run_or_404(service: RunService, run_id: str):
    run = await service.get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run


@router.get("", response_model=list[RunResponse])
async def list_runs(
    user_id: str = Query(...),
    db: AsyncSession = Depends(get_async_db)
):
    """List user's runs, newest first."""
    return await RunService(db).list_for_user(user_id)


@router.get("/summary", response_model=RunTotalsResponse)
async def get_totals(
    user_id: str = Query(...),
    db: AsyncSession = Depends(get_async_db)
):
    """Total runs, distance and duration for a user."""
    totals = await RunService(db).totals(user_id)
    return RunTotalsResponse(
        total_runs=totals.total_runs,
        total_distance_km=totals.total_distance_km,
        total_duration_s=totals.total_duration_s,
        total_duration_display=format_duration_short(totals.total_duration_s),
    )


@router.post("/manual", response_model=RunResponse, status_code=201)
async def create_manual_run(
    request: ManualRunCreate,
    db: AsyncSession = Depends(get_async_db)
):
    """Store a run entered by hand."""
    return await RunService(db).create_manual(request)


@router.get("/{run_id}", response_model=RunResponse)
async def get_run(
    run_id: str,
    db: AsyncSession = Depends(get_async_db)
):
    """Get run by ID."""
    return await _get_run_or_404(RunService(db), run_id)


@router.get("/{run_id}/gpx")
async def export_run_gpx(
    run_id: str,
    db: AsyncSession = Depends(get_async_db)
):
    """Download the recorded route as a GPX file."""
    run = await _get_run_or_404(RunService(db), run_id)

    try:
        content = RunService.to_gpx(run)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=content,
        media_type="application/gpx+xml",
        headers={"Content-Disposition": f'attachment; filename="run-{run.id}.gpx"'},
    )


@router.delete("/{run_id}", status_code=204)
async def delete_run(
    run_id: str,
    db: AsyncSession = Depends(get_async_db)
):
    service = RunService(db)
    run = await _get_run_or_404(service, run_id)
    await service.delete(run)
    return Response(status_code=204)
