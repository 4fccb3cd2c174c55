"""
Line-delimited JSON run log for sync jobs.

One file per job per day: ``<log_dir>/<job>-sync-YYYY-MM-DD.log``, one
JSON object per run.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from court_vision.core.config import settings
from court_vision.core.logging import get_logger
from court_vision.utils.timezone import utcnow

logger = get_logger(__name__)


class SyncRunLog:
    """Append and read back sync run records."""

    def __init__(self, log_dir: Optional[str] = None):
        self.log_dir = Path(log_dir or settings.SYNC_LOG_DIR)

    def path_for(self, job: str, day: Optional[str] = None) -> Path:
        day = day or utcnow().strftime("%Y-%m-%d")
        return self.log_dir / f"{job}-sync-{day}.log"

    def append(self, job: str, status: str, result: Optional[Dict[str, Any]] = None,
               error: Optional[str] = None, offseason: bool = False) -> Path:
        """Append one run record and return the file it went to."""
        entry = {
            "timestamp": utcnow().isoformat() + "Z",
            "job": job,
            "status": status,
            "offseason": offseason,
            "result": result,
            "error": error,
        }
        path = self.path_for(job)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(entry, default=str) + "\n")
        return path

    def recent(self, job: str, limit: int = 20) -> List[Dict[str, Any]]:
        """Most recent run records for a job, newest first, across daily files."""
        if not self.log_dir.exists():
            return []

        entries: List[Dict[str, Any]] = []
        for path in sorted(self.log_dir.glob(f"{job}-sync-*.log"), reverse=True):
            with path.open(encoding="utf-8") as handle:
                lines = handle.read().splitlines()
            for line in reversed(lines):
                if not line.strip():
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.warning(f"Skipping malformed run log line in {path.name}")
                    continue
                if len(entries) >= limit:
                    return entries
        return entries
