"""
Scheduled sync jobs.

Runs the provider sync jobs on cron triggers inside the API process when
SCHEDULER_ENABLED is set, or standalone via scripts/run_scheduler.py.

Scheduler: APScheduler AsyncIOScheduler
"""
import logging
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from court_vision.core.config import settings
from court_vision.core.database import SessionLocal
from court_vision.services.sync.orchestrator import SyncOrchestrator

logger = logging.getLogger(__name__)

# job id -> (cron fields, orchestrator job name, human name)
SYNC_SCHEDULE = {
    "teams_sync": ({"day_of_week": "mon", "hour": 4, "minute": 0}, "teams", "Weekly team sync"),
    "players_sync": ({"hour": 5, "minute": 0}, "players", "Daily athlete sync"),
    "games_sync": ({"minute": "*/30"}, "games", "Scoreboard sync"),
    "player_stats_sync": ({"minute": 10}, "player-stats", "Hourly player stats sync"),
    "team_stats_sync": ({"hour": 6, "minute": 30}, "team-stats", "Daily team statistics sync"),
    "balldontlie_sync": ({"day_of_week": "mon", "hour": 7, "minute": 0}, "balldontlie",
                         "Weekly BallDontLie link"),
}


async def run_sync_job(job: str) -> None:
    """Run one orchestrator job with its own session and provider clients."""
    db = SessionLocal()
    orchestrator = SyncOrchestrator(db)
    try:
        outcome = await orchestrator.run(job, write_log=True)
        if outcome["success"]:
            result = outcome["result"]
            logger.info(
                f"✅ {job}: {result['created']} created, {result['updated']} updated, "
                f"{result['skipped']} skipped, {result['errors']} errors ({outcome['duration_ms']}ms)"
            )
        else:
            logger.error(f"❌ {job} failed: {outcome['error']}")
    except Exception as e:
        logger.exception(f"❌ {job} crashed: {e}")
        orchestrator.run_log.append(job, "failed", error=str(e))
    finally:
        await orchestrator.close()
        db.close()


class AutomationScheduler:
    """Owns the AsyncIOScheduler and registers every sync job."""

    def __init__(self, timezone: Optional[str] = None):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self.running = False
        self.timezone = timezone or settings.SCHEDULER_TIMEZONE

    async def start(self):
        if self.running:
            logger.warning("Scheduler already running")
            return

        logger.info("Starting sync scheduler...")
        self.scheduler = AsyncIOScheduler(
            timezone=self.timezone,
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 300,
            },
        )
        self._schedule_sync_jobs()
        self.scheduler.start()
        self.running = True

        logger.info("✅ Scheduler started with %d jobs", len(self.scheduler.get_jobs()))
        self._log_scheduled_jobs()

    async def stop(self):
        if not self.running:
            return
        logger.info("Stopping scheduler...")
        self.scheduler.shutdown(wait=False)
        self.running = False
        logger.info("✅ Scheduler stopped")

    def _schedule_sync_jobs(self):
        if self.scheduler is None:
            return

        for job_id, (cron, job, name) in SYNC_SCHEDULE.items():
            self.scheduler.add_job(
                run_sync_job,
                trigger=CronTrigger(timezone=self.timezone, **cron),
                args=[job],
                id=job_id,
                name=name,
                replace_existing=True,
            )
            logger.info(f"📅 Scheduled: {name} ({job_id})")

    def _log_scheduled_jobs(self):
        if self.scheduler is None:
            return
        for job in self.scheduler.get_jobs():
            logger.info(f"  - {job.name}: next run at {job.next_run_time}")


_scheduler: Optional[AutomationScheduler] = None


async def start_scheduler() -> AutomationScheduler:
    global _scheduler
    if _scheduler is None:
        _scheduler = AutomationScheduler()
    await _scheduler.start()
    return _scheduler


async def stop_scheduler() -> None:
    if _scheduler is not None:
        await _scheduler.stop()


def get_scheduler() -> Optional[AutomationScheduler]:
    return _scheduler
