"""Sync orchestrator for the ESPN and BallDontLie jobs.

Entry point for the CLI scripts, the scheduler and the sync API routes.
Owns the provider clients for a run, times it, records metrics and
optionally appends a JSON-lines run record.

Recommended schedule:
- teams: weekly
- players: daily
- games: every 30 minutes during the season
- player-stats: hourly (skips itself in the offseason)
- team-stats: daily
- balldontlie: weekly
"""
import time
from datetime import timedelta
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.core.config import settings
from court_vision.core.logging import get_logger, sync_job_context
from court_vision.core import metrics
from court_vision.models import Team, Game, Play, PlayTag, Tag, PlayerGameStat, TeamStatistic
from court_vision.repositories import PlayerRepository
from court_vision.repositories.base import BaseRepository
from court_vision.services.providers import ESPNApiService, BallDontLieService, ProviderError
from court_vision.services.sync.base import SyncResult
from court_vision.services.sync.team_sync import TeamSyncService
from court_vision.services.sync.player_sync import PlayerSyncService
from court_vision.services.sync.game_sync import GameSyncService
from court_vision.services.sync.player_stats_sync import PlayerStatsSyncService
from court_vision.services.sync.team_stats_sync import TeamStatsSyncService
from court_vision.services.sync.balldontlie_sync import BallDontLieSyncService
from court_vision.services.sync.run_log import SyncRunLog
from court_vision.utils.timezone import utcnow, day_bounds

logger = get_logger(__name__)

SYNC_JOBS = ("teams", "players", "games", "player-stats", "team-stats", "balldontlie")

# Order for "all": teams first so games and stats can resolve their references
ALL_JOBS_ORDER = ("teams", "players", "games", "player-stats", "team-stats")


class UnknownSyncJob(ValueError):
    pass


class SyncOrchestrator:
    """
    Runs named sync jobs against one database session.

    Usage:
        orchestrator = SyncOrchestrator(db)
        result = await orchestrator.run("teams", write_log=True)
    """

    def __init__(
        self,
        db: Session,
        espn: Optional[ESPNApiService] = None,
        balldontlie: Optional[BallDontLieService] = None,
        run_log: Optional[SyncRunLog] = None,
        espn_delay: Optional[float] = None,
        balldontlie_delay: Optional[float] = None,
    ):
        self.db = db
        self._espn = espn
        self._balldontlie = balldontlie
        self.run_log = run_log or SyncRunLog()
        self.espn_delay = settings.ESPN_REQUEST_DELAY if espn_delay is None else espn_delay
        self.balldontlie_delay = (settings.BALLDONTLIE_REQUEST_DELAY
                                  if balldontlie_delay is None else balldontlie_delay)

    @property
    def espn(self) -> ESPNApiService:
        """Lazily created ESPN client."""
        if self._espn is None:
            self._espn = ESPNApiService()
        return self._espn

    @property
    def balldontlie(self) -> BallDontLieService:
        if self._balldontlie is None:
            self._balldontlie = BallDontLieService()
        return self._balldontlie

    async def close(self) -> None:
        if self._espn is not None:
            await self._espn.close()
        if self._balldontlie is not None:
            await self._balldontlie.close()

    # ========================================================================
    # Jobs
    # ========================================================================

    async def sync_teams(self, **_) -> SyncResult:
        return await TeamSyncService(self.db, self.espn, self.espn_delay).sync_teams()

    async def sync_players(self, max_pages: Optional[int] = None, **_) -> SyncResult:
        return await PlayerSyncService(self.db, self.espn, self.espn_delay).sync_players(max_pages=max_pages)

    async def sync_games(self, dates: Optional[str] = None, week: bool = False, **_) -> SyncResult:
        service = GameSyncService(self.db, self.espn, self.espn_delay)
        if week:
            return await service.sync_week()
        return await service.sync_games(dates)

    async def sync_player_stats(self, dates: Optional[str] = None, force: bool = False, **_) -> SyncResult:
        return await PlayerStatsSyncService(self.db, self.espn, self.espn_delay).sync_player_stats(
            dates=dates, force=force
        )

    async def sync_team_stats(self, season: Optional[str] = None, season_type: int = 2, **_) -> SyncResult:
        return await TeamStatsSyncService(self.db, self.espn, self.espn_delay).sync_team_stats(
            season=season, season_type=season_type
        )

    async def sync_balldontlie(self, max_pages: Optional[int] = None,
                               season: Optional[int] = None, **_) -> SyncResult:
        service = BallDontLieSyncService(self.db, self.balldontlie, self.balldontlie_delay)
        result = await service.link_players(max_pages=max_pages)
        averages = await service.sync_season_averages(season=season)
        result.merge(averages)
        return result

    def _job_runner(self, job: str) -> Callable[..., Any]:
        runners = {
            "teams": self.sync_teams,
            "players": self.sync_players,
            "games": self.sync_games,
            "player-stats": self.sync_player_stats,
            "team-stats": self.sync_team_stats,
            "balldontlie": self.sync_balldontlie,
        }
        if job not in runners:
            raise UnknownSyncJob(f"Unknown sync job '{job}'. Choose from: {', '.join(SYNC_JOBS + ('all',))}")
        return runners[job]

    async def run(self, job: str, write_log: bool = False, **kwargs) -> Dict[str, Any]:
        """
        Run one named job (or "all") and summarize it.

        Provider-level failures (e.g. the listing endpoint is down) are
        reported as ``success: False`` rather than raised; database errors
        propagate to the caller.

        Returns:
            {"job", "success", "result" | "results", "error", "duration_ms"}
        """
        if job == "all":
            return await self.run_all(write_log=write_log, **kwargs)

        runner = self._job_runner(job)
        started = time.perf_counter()
        with sync_job_context(job):
            logger.info(f"Starting {job} sync")
            try:
                result = await runner(**kwargs)
            except ProviderError as e:
                self.db.rollback()
                duration_ms = int((time.perf_counter() - started) * 1000)
                logger.error(f"{job} sync failed: {e}")
                metrics.sync_job_runs_total.labels(job=job, status="failed").inc()
                if write_log:
                    self.run_log.append(job, "failed", error=str(e))
                return {"job": job, "success": False, "result": None,
                        "error": str(e), "duration_ms": duration_ms}

        if not result.offseason:
            metrics.sync_job_runs_total.labels(job=job, status="success").inc()
        summary = result.to_dict()
        if write_log:
            self.run_log.append(job, "success", result=summary, offseason=result.offseason)
        return {"job": job, "success": True, "result": summary,
                "error": None, "duration_ms": result.duration_ms}

    async def run_all(self, write_log: bool = False, **kwargs) -> Dict[str, Any]:
        """Run the ESPN jobs in dependency order; one failure does not stop the rest."""
        started = time.perf_counter()
        results: List[Dict[str, Any]] = []
        for job in ALL_JOBS_ORDER:
            results.append(await self.run(job, write_log=write_log, **kwargs))
        return {
            "job": "all",
            "success": all(r["success"] for r in results),
            "results": results,
            "error": None,
            "duration_ms": int((time.perf_counter() - started) * 1000),
        }

    # ========================================================================
    # Status
    # ========================================================================

    def get_sync_status(self) -> Dict[str, Any]:
        """Row counts per entity plus how many were synced today and this week."""
        today_start, _ = day_bounds()
        week_start = today_start - timedelta(days=7)

        repositories = {
            "teams": BaseRepository(Team, self.db),
            "players": PlayerRepository(self.db),
            "games": BaseRepository(Game, self.db),
            "player_game_stats": BaseRepository(PlayerGameStat, self.db),
            "team_statistics": BaseRepository(TeamStatistic, self.db),
        }
        synced = {}
        for name, repo in repositories.items():
            synced[name] = {
                "total": repo.count(),
                "synced_today": repo.count_since("last_synced", today_start),
                "synced_this_week": repo.count_since("last_synced", week_start),
            }

        tagging = {
            "plays": BaseRepository(Play, self.db).count(),
            "play_tags": BaseRepository(PlayTag, self.db).count(),
            "tags": BaseRepository(Tag, self.db).count(),
        }

        return {
            "checked_at": utcnow().isoformat(),
            "entities": synced,
            "tagging": tagging,
            "last_runs": {job: (self.run_log.recent(job, limit=1) or [None])[0] for job in SYNC_JOBS},
        }

    def get_run_history(self, job: str, limit: int = 20) -> List[Dict[str, Any]]:
        if job not in SYNC_JOBS:
            raise UnknownSyncJob(f"Unknown sync job '{job}'")
        return self.run_log.recent(job, limit=limit)
