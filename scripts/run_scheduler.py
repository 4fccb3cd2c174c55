#!/usr/bin/env python3
"""
Standalone runner for the Court Vision sync scheduler.

Runs the cron-scheduled sync jobs outside the API process. It can be run
via systemd, supervisor, or directly.

Usage:
    python scripts/run_scheduler.py               # Run in foreground
    python scripts/run_scheduler.py --list-jobs   # Show the schedule and exit
    python scripts/run_scheduler.py --trigger games   # Run one job now and exit
"""
import asyncio
import argparse
import signal
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from court_vision.core.config import settings
from court_vision.core.database import init_db
from court_vision.core.logging import configure_logging, get_logger
from court_vision.core.scheduler import AutomationScheduler, SYNC_SCHEDULE, run_sync_job
from court_vision.services.sync import SYNC_JOBS

logger = get_logger(__name__)


class SchedulerRunner:
    """Runner for the sync scheduler."""

    def __init__(self):
        self.scheduler: Optional[AutomationScheduler] = None
        self.shutdown = False

    async def start(self):
        """Start the scheduler and run until shutdown."""
        logger.info("🚀 Starting scheduler runner...")

        self.scheduler = AutomationScheduler()
        await self.scheduler.start()

        logger.info("✅ Scheduler is now running")
        logger.info("Press Ctrl+C to stop")

        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, self._set_shutdown)

        while not self.shutdown:
            await asyncio.sleep(1)

        await self.scheduler.stop()
        logger.info("✅ Scheduler runner stopped")

    def _set_shutdown(self):
        logger.info("⏹️  Shutdown signal received")
        self.shutdown = True


def list_jobs() -> None:
    print(f"Timezone: {settings.SCHEDULER_TIMEZONE}")
    print()
    for job_id, (cron, job, name) in SYNC_SCHEDULE.items():
        schedule = ", ".join(f"{field}={value}" for field, value in cron.items())
        print(f"   • {name} [{job_id}] -> {job}")
        print(f"     Cron: {schedule}")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run the Court Vision sync scheduler"
    )
    parser.add_argument(
        "--list-jobs",
        action="store_true",
        help="List all scheduled jobs and exit"
    )
    parser.add_argument(
        "--trigger",
        choices=SYNC_JOBS,
        metavar="JOB",
        help=f"Run one job immediately and exit ({', '.join(SYNC_JOBS)})"
    )
    args = parser.parse_args()

    configure_logging(level=settings.LOG_LEVEL, json_output=settings.LOG_JSON)

    if args.list_jobs:
        list_jobs()
        return 0

    init_db()

    if args.trigger:
        asyncio.run(run_sync_job(args.trigger))
        return 0

    runner = SchedulerRunner()
    try:
        asyncio.run(runner.start())
    except KeyboardInterrupt:
        logger.info("🛑 Received interrupt, shutting down...")
        return 0
    except Exception as e:
        logger.error(f"❌ Scheduler error: {e}", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
