"""
Per-game player stat sync from ESPN scoreboard leaders.

During the offseason (calendar heuristic) the job returns immediately
unless forced, since scoreboards carry no games.
"""
import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.core import metrics
from court_vision.models import PlayerGameStat
from court_vision.repositories import GameRepository, PlayerRepository
from court_vision.repositories.base import BaseRepository
from court_vision.services.providers import ESPNApiService
from court_vision.services.sync.base import BaseSyncService, SyncResult
from court_vision.utils.timezone import utcnow, is_offseason

logger = get_logger(__name__)

# ESPN leader category -> PlayerGameStat column
LEADER_STAT_COLUMNS = {
    "points": "points",
    "rebounds": "rebounds",
    "assists": "assists",
    "steals": "steals",
    "blocks": "blocks",
    "turnovers": "turnovers",
    "fouls": "fouls",
    "threesMade": "three_pointers_made",
    "threesAtt": "three_pointers_attempted",
    "fieldGoalsMade": "field_goals_made",
    "fieldGoalsAtt": "field_goals_attempted",
    "freeThrowsMade": "free_throws_made",
    "freeThrowsAtt": "free_throws_attempted",
    "plusMinus": "plus_minus",
    "minutes": "minutes",
}


def extract_leader_stats(event: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Collapse an event's competitor leader lists into one stat line per athlete.

    Returns:
        [{"player_id", "team_external_id", <column>: int, ...}, ...]
    """
    lines: Dict[str, Dict[str, Any]] = {}
    competitions = event.get("competitions") or []
    if not competitions:
        return []

    for competitor in competitions[0].get("competitors") or []:
        team_id = str((competitor.get("team") or {}).get("id", "")) or None
        for category in competitor.get("leaders") or []:
            column = LEADER_STAT_COLUMNS.get(category.get("name"))
            if column is None:
                continue
            for leader in category.get("leaders") or []:
                athlete_id = (leader.get("athlete") or {}).get("id")
                if not athlete_id:
                    continue
                line = lines.setdefault(str(athlete_id), {
                    "player_id": str(athlete_id),
                    "team_external_id": team_id,
                })
                line[column] = ESPNApiService.parse_int(leader.get("value"))

    return list(lines.values())


class PlayerStatsSyncService(BaseSyncService):
    """Upsert per-game player stat lines."""

    job_name = "player-stats"

    def __init__(self, db: Session, espn: Optional[ESPNApiService] = None, delay: float = 0.1):
        super().__init__(db, delay)
        self.espn = espn or ESPNApiService()
        self.games = GameRepository(db)
        self.players = PlayerRepository(db)
        self.stats = BaseRepository(PlayerGameStat, db)

    async def sync_player_stats(self, dates: Optional[str] = None, force: bool = False,
                                now: Optional[datetime] = None) -> SyncResult:
        """
        Sync stat lines for one scoreboard.

        Args:
            dates: Scoreboard date(s); today when None
            force: Run even during the offseason
            now: Reference time for the offseason check

        Raises:
            ProviderError: if the scoreboard cannot be fetched
        """
        started = time.perf_counter()
        result = self._new_result()

        if not force and is_offseason(now):
            logger.info("NBA offseason; skipping player stats sync")
            result.offseason = True
            metrics.sync_job_runs_total.labels(job=self.job_name, status="skipped_offseason").inc()
            return self._finish(result, started)

        events = await self.espn.get_scoreboard(dates)
        for event in events:
            event_id = str(event.get("id", ""))
            game = self.games.find_by_external_id(event_id)
            if game is None:
                self._record_skip(result, event_id, "game not in database")
                continue

            for line in extract_leader_stats(event):
                key = f"{event_id}:{line['player_id']}"
                try:
                    if self.players.find_by_external_id(line["player_id"]) is None:
                        self._record_skip(result, key, "player not in database")
                        continue
                    values = {k: v for k, v in line.items() if k != "player_id"}
                    values["last_synced"] = utcnow()
                    _, created = self.stats.upsert(
                        {"game_id": game.id, "player_id": line["player_id"]}, values
                    )
                    self._record_upsert(result, key, created)
                except Exception as e:
                    self._record_failure(result, key, e)
            await self._pause()

        return self._finish(result, started)
