"""
Shared plumbing for provider sync jobs.

Every job follows the same shape: fetch a provider page, transform each
record, upsert it by external id in its own transaction, pause for a fixed
delay, repeat. A failing record is rolled back, logged and counted; it
never aborts the batch.
"""
import asyncio
import time
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.core import metrics

logger = get_logger(__name__)

# Keep at most this many per-record detail lines on a result
MAX_DETAILS = 50


@dataclass
class SyncResult:
    """Counts for one sync job run."""
    job: str
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    duration_ms: int = 0
    offseason: bool = False
    details: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.created + self.updated + self.skipped + self.errors

    @property
    def success(self) -> bool:
        return self.errors == 0

    def note(self, **detail) -> None:
        if len(self.details) < MAX_DETAILS:
            self.details.append(detail)

    def merge(self, other: "SyncResult") -> None:
        self.created += other.created
        self.updated += other.updated
        self.skipped += other.skipped
        self.errors += other.errors
        for detail in other.details:
            self.note(**detail)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total"] = self.total
        data["success"] = self.success
        return data


class BaseSyncService:
    """
    Base class for sync jobs.

    Subclasses set ``job_name`` and call ``_pause()`` between provider
    requests and ``_record_failure()`` from their per-record ``except``.
    """

    job_name = "sync"

    def __init__(self, db: Session, delay: float = 0.1):
        """
        Args:
            db: Database session (owned by the caller)
            delay: Fixed pause in seconds between provider requests
        """
        self.db = db
        self.delay = delay

    async def _pause(self) -> None:
        if self.delay > 0:
            await asyncio.sleep(self.delay)

    def _new_result(self) -> SyncResult:
        return SyncResult(job=self.job_name)

    def _record_failure(self, result: SyncResult, key: Any, error: Exception) -> None:
        """Roll back the failed record and count it."""
        self.db.rollback()
        result.errors += 1
        result.note(id=str(key), action="error", error=str(error))
        logger.error(f"{self.job_name}: failed to sync {key}: {error}")

    def _record_skip(self, result: SyncResult, key: Any, reason: str) -> None:
        result.skipped += 1
        result.note(id=str(key), action="skipped", reason=reason)
        logger.warning(f"{self.job_name}: skipped {key}: {reason}")

    def _record_upsert(self, result: SyncResult, key: Any, created: bool) -> None:
        self.db.commit()
        if created:
            result.created += 1
        else:
            result.updated += 1

    def _finish(self, result: SyncResult, started: float) -> SyncResult:
        result.duration_ms = int((time.perf_counter() - started) * 1000)
        metrics.record_sync_result(result.job, result.created, result.updated,
                                   result.skipped, result.errors)
        metrics.sync_job_duration_seconds.labels(job=result.job).observe(result.duration_ms / 1000)
        logger.info(
            f"{result.job}: {result.created} created, {result.updated} updated, "
            f"{result.skipped} skipped, {result.errors} errors ({result.duration_ms}ms)"
        )
        return result


def optional_str(value: Optional[Any]) -> Optional[str]:
    """Provider values as trimmed strings, with blanks treated as missing."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None
