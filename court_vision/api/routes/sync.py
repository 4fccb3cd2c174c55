"""Sync API routes for data synchronization status and manual runs.

Provides endpoints for:
- Sync status dashboard (row counts, freshness, last runs)
- Run history per job
- Manual job triggers

Base path: /api/sync
"""
from typing import AsyncIterator, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok
from court_vision.core.database import get_db
from court_vision.core.logging import get_logger
from court_vision.core.scheduler import get_scheduler
from court_vision.services.sync.orchestrator import SyncOrchestrator, UnknownSyncJob

logger = get_logger(__name__)

router = APIRouter(prefix="/api/sync", tags=["sync"])


async def get_orchestrator(db: Session = Depends(get_db)) -> AsyncIterator[SyncOrchestrator]:
    """Dependency to get a sync orchestrator; provider clients are closed afterwards."""
    orchestrator = SyncOrchestrator(db)
    try:
        yield orchestrator
    finally:
        await orchestrator.close()


@router.get("/status")
async def get_sync_status(
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """
    Get overall sync status.

    Returns row counts per entity with how many were synced today and this
    week, tagging totals, the last logged run of each job and whether the
    scheduler is running.
    """
    status = orchestrator.get_sync_status()
    scheduler = get_scheduler()
    status["scheduler"] = {
        "running": bool(scheduler and scheduler.running),
        "jobs": [
            {"id": job.id, "name": job.name, "next_run": str(job.next_run_time)}
            for job in scheduler.scheduler.get_jobs()
        ] if scheduler and scheduler.running else [],
    }
    return ok(status)


@router.get("/logs/{job}")
async def get_sync_logs(
    job: str,
    limit: int = Query(20, ge=1, le=200),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """Most recent logged runs of a job, newest first."""
    try:
        runs = orchestrator.get_run_history(job, limit=limit)
    except UnknownSyncJob as e:
        raise HTTPException(status_code=404, detail=str(e))
    return ok(runs, count=len(runs))


@router.post("/{job}")
async def trigger_sync(
    job: str,
    dates: Optional[str] = Query(None, description="ESPN dates: YYYYMMDD or YYYYMMDD-YYYYMMDD"),
    week: bool = Query(False, description="games: sync the current week"),
    force: bool = Query(False, description="player-stats: run even in the offseason"),
    max_pages: Optional[int] = Query(None, ge=1, description="players / balldontlie: page cap"),
    season: Optional[str] = Query(None, description="team-stats / balldontlie season year"),
    season_type: int = Query(2, ge=1, le=3),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator)
) -> Dict:
    """
    Run a sync job now and wait for it.

    ``job`` is one of teams, players, games, player-stats, team-stats,
    balldontlie or all. The run is appended to the job's run log.
    """
    kwargs = {"dates": dates, "week": week, "force": force, "max_pages": max_pages,
              "season_type": season_type}
    if season:
        kwargs["season"] = int(season) if job == "balldontlie" and season.isdigit() else season

    logger.info(f"Manual sync triggered: {job}")
    try:
        outcome = await orchestrator.run(job, write_log=True, **kwargs)
    except UnknownSyncJob as e:
        raise HTTPException(status_code=404, detail=str(e))

    if not outcome["success"] and job != "all":
        raise HTTPException(status_code=502, detail=outcome["error"])
    return ok(outcome)
