"""
Prometheus metrics for the Court Vision API.

HTTP request metrics come from prometheus-fastapi-instrumentator; the
counters here cover the sync jobs, provider calls and AI analysis.
"""
from prometheus_client import Counter, Gauge, Histogram

# Sync jobs
sync_records_total = Counter(
    "sync_records_total",
    "Records processed by sync jobs",
    ["job", "outcome"]  # outcome: created, updated, skipped, error
)

sync_job_duration_seconds = Histogram(
    "sync_job_duration_seconds",
    "Wall-clock duration of sync jobs",
    ["job"]
)

sync_job_runs_total = Counter(
    "sync_job_runs_total",
    "Sync job runs",
    ["job", "status"]  # status: success, failed, skipped_offseason
)

# External providers
provider_requests_failure_total = Counter(
    "provider_requests_failure_total",
    "Failed requests to external data providers",
    ["provider", "error_type"]
)

# AI analysis
game_analysis_total = Counter(
    "game_analysis_total",
    "Game analysis results by source",
    ["source"]  # source: ai, cache, fallback
)

# Tagging
plays_created_total = Counter(
    "plays_created_total",
    "Plays created through the tagging API"
)

# Scheduler
scheduler_running = Gauge(
    "scheduler_running",
    "Whether the sync scheduler is running (1=running, 0=stopped)"
)

scheduler_jobs_total = Gauge(
    "scheduler_jobs_total",
    "Number of scheduled sync jobs"
)


def record_sync_result(job: str, created: int, updated: int, skipped: int, errors: int) -> None:
    """Fold a finished sync run's counts into the record counter."""
    for outcome, value in (("created", created), ("updated", updated),
                           ("skipped", skipped), ("error", errors)):
        if value:
            sync_records_total.labels(job=job, outcome=outcome).inc(value)


def update_scheduler_metrics() -> None:
    """Refresh the scheduler gauges from the running scheduler, if any."""
    from court_vision.core.scheduler import get_scheduler

    scheduler = get_scheduler()
    if scheduler and scheduler.running and scheduler.scheduler:
        scheduler_running.set(1)
        scheduler_jobs_total.set(len(scheduler.scheduler.get_jobs()))
    else:
        scheduler_running.set(0)
        scheduler_jobs_total.set(0)
