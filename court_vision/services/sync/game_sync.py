"""
Game sync from the ESPN scoreboard.

Games are upserted by ESPN event id. An event is skipped when it has no
competition, lacks a home/away competitor, or references a team that has
not been synced yet.
"""
import time
from datetime import date as DateType
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.repositories import GameRepository, TeamRepository
from court_vision.services.providers import ESPNApiService
from court_vision.services.sync.base import BaseSyncService, SyncResult, optional_str
from court_vision.utils.timezone import utcnow, espn_date_range, week_bounds

logger = get_logger(__name__)


class SkipRecord(Exception):
    """The provider record cannot be mapped onto local data."""


def split_competitors(competition: Dict[str, Any]) -> Tuple[Optional[Dict], Optional[Dict]]:
    """(home, away) competitor dicts of an ESPN competition."""
    home = away = None
    for competitor in competition.get("competitors") or []:
        if competitor.get("homeAway") == "home":
            home = competitor
        elif competitor.get("homeAway") == "away":
            away = competitor
    return home, away


def transform_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map an ESPN scoreboard event to Game columns.

    Raises:
        SkipRecord: when the event has no usable competition data
    """
    competitions = event.get("competitions") or []
    if not competitions:
        raise SkipRecord("no competition data")
    competition = competitions[0]

    home, away = split_competitors(competition)
    if not home or not away or not (home.get("team") or {}).get("id") or not (away.get("team") or {}).get("id"):
        raise SkipRecord("missing team data")

    status = ((event.get("status") or competition.get("status") or {}).get("type") or {}).get("name")
    season = (event.get("season") or {}).get("year")
    game_date = ESPNApiService.parse_espn_date(event.get("date") or competition.get("date"))
    if game_date is None:
        raise SkipRecord("missing date")

    return {
        "date": game_date,
        "home_team_id": str(home["team"]["id"]),
        "away_team_id": str(away["team"]["id"]),
        "home_score": ESPNApiService.parse_int(home.get("score")),
        "away_score": ESPNApiService.parse_int(away.get("score")),
        "status": ESPNApiService.parse_game_status(status),
        "season": optional_str(season),
        "venue": optional_str((competition.get("venue") or {}).get("fullName")),
    }


class GameSyncService(BaseSyncService):
    """Upsert games from ESPN scoreboards."""

    job_name = "games"

    def __init__(self, db: Session, espn: Optional[ESPNApiService] = None, delay: float = 0.1):
        super().__init__(db, delay)
        self.espn = espn or ESPNApiService()
        self.games = GameRepository(db)
        self.teams = TeamRepository(db)

    async def sync_games(self, dates: Optional[str] = None) -> SyncResult:
        """
        Sync one scoreboard.

        Args:
            dates: YYYYMMDD or YYYYMMDD-YYYYMMDD; today's scoreboard when None

        Raises:
            ProviderError: if the scoreboard cannot be fetched
        """
        started = time.perf_counter()
        result = self._new_result()

        events = await self.espn.get_scoreboard(dates)
        logger.info(f"Scoreboard {dates or 'today'}: {len(events)} events")
        known_teams = self.teams.external_id_set()

        for event in events:
            key = event.get("id", "?")
            try:
                values = transform_event(event)
                missing = [t for t in (values["home_team_id"], values["away_team_id"]) if t not in known_teams]
                if missing:
                    raise SkipRecord(f"team(s) {', '.join(missing)} not in database")

                values["last_synced"] = utcnow()
                _, created = self.games.upsert({"external_id": str(key)}, values)
                self._record_upsert(result, key, created)
                result.note(id=str(key), action="created" if created else "updated")
            except SkipRecord as e:
                self._record_skip(result, key, str(e))
            except Exception as e:
                self._record_failure(result, key, e)

        return self._finish(result, started)

    async def sync_week(self, on_date: Optional[DateType] = None) -> SyncResult:
        """Sync the Monday-Sunday week containing ``on_date``."""
        monday, sunday = week_bounds(on_date)
        return await self.sync_games(espn_date_range(monday, sunday))
