"""
Command-line plumbing shared by the scripts/sync_*.py entry points.

Usage:
    parser = build_parser("Sync NBA teams from ESPN")
    sys.exit(run_cli("teams", parser.parse_args()))
"""
import argparse
import asyncio
from typing import Any, Dict

from court_vision.core.config import settings
from court_vision.core.database import SessionLocal, init_db
from court_vision.core.logging import configure_logging, get_logger
from court_vision.services.sync.orchestrator import SyncOrchestrator

logger = get_logger(__name__)


def build_parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--log",
        action="store_true",
        help=f"Append a JSON-lines run record under {settings.SYNC_LOG_DIR}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging"
    )
    return parser


async def run_job(job: str, write_log: bool = False, **kwargs) -> Dict[str, Any]:
    """Run one orchestrator job with its own session; the session is always closed."""
    db = SessionLocal()
    orchestrator = SyncOrchestrator(db)
    try:
        return await orchestrator.run(job, write_log=write_log, **kwargs)
    finally:
        await orchestrator.close()
        db.close()


def print_summary(outcome: Dict[str, Any]) -> None:
    outcomes = outcome.get("results") or [outcome]
    print()
    print("=" * 60)
    for item in outcomes:
        if not item["success"]:
            print(f"❌ {item['job']}: {item['error']}")
            continue
        result = item["result"]
        if result.get("offseason"):
            print(f"⏸️  {item['job']}: offseason, nothing to do")
            continue
        print(
            f"✅ {item['job']}: {result['created']} created, {result['updated']} updated, "
            f"{result['skipped']} skipped, {result['errors']} errors ({item['duration_ms']}ms)"
        )
    print("=" * 60)


def run_cli(job: str, args: argparse.Namespace, **kwargs) -> int:
    """
    Run ``job`` for a script and print its summary.

    Returns:
        Process exit code: 0 when the job succeeded, 1 otherwise
    """
    configure_logging(level="DEBUG" if args.verbose else settings.LOG_LEVEL, json_output=False)
    init_db()

    print(f"🔄 Running {job} sync...")
    try:
        outcome = asyncio.run(run_job(job, write_log=args.log, **kwargs))
    except Exception as e:
        logger.exception(f"{job} sync crashed: {e}")
        print(f"❌ {job} sync crashed: {e}")
        return 1

    print_summary(outcome)
    return 0 if outcome["success"] else 1
