"""
Provider sync layer.

Key components:
- Per-entity sync services (teams, players, games, stats, BallDontLie)
- SyncOrchestrator: runs named jobs for scripts, the scheduler and the API
- SyncRunLog: daily JSON-lines run records
"""

from court_vision.services.sync.base import SyncResult
from court_vision.services.sync.orchestrator import SyncOrchestrator, SYNC_JOBS, UnknownSyncJob
from court_vision.services.sync.run_log import SyncRunLog

__all__ = ["SyncResult", "SyncOrchestrator", "SYNC_JOBS", "UnknownSyncJob", "SyncRunLog"]
