"""
Team season statistics sync from the ESPN Site API.

Each ``results.stats.categories[].stats[]`` row becomes one TeamStatistic,
keyed by (team, season, season type, category, stat name).
"""
import time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.models import TeamStatistic
from court_vision.repositories import TeamRepository
from court_vision.repositories.base import BaseRepository
from court_vision.services.providers import ESPNApiService
from court_vision.services.sync.base import BaseSyncService, SyncResult, optional_str
from court_vision.utils.timezone import utcnow, current_season_year

logger = get_logger(__name__)


def transform_stat(stat: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "display_name": optional_str(stat.get("displayName")),
        "abbreviation": optional_str(stat.get("abbreviation")),
        "value": ESPNApiService.parse_float(stat.get("value")),
        "display_value": optional_str(stat.get("displayValue")),
        "per_game_value": ESPNApiService.parse_float(stat.get("perGameValue")),
    }


class TeamStatsSyncService(BaseSyncService):
    """Upsert season statistics for every synced team."""

    job_name = "team-stats"

    def __init__(self, db: Session, espn: Optional[ESPNApiService] = None, delay: float = 0.1):
        super().__init__(db, delay)
        self.espn = espn or ESPNApiService()
        self.teams = TeamRepository(db)
        self.stats = BaseRepository(TeamStatistic, db)

    async def sync_team_stats(self, season: Optional[str] = None, season_type: int = 2) -> SyncResult:
        """
        Sync statistics for all active teams.

        Args:
            season: ESPN season year; current season when None
            season_type: 1 preseason, 2 regular season, 3 postseason
        """
        started = time.perf_counter()
        result = self._new_result()
        season = season or str(current_season_year())

        for team in self.teams.find_active():
            try:
                categories = await self.espn.get_team_statistics(team.external_id, season, season_type)
            except Exception as e:
                self._record_failure(result, team.abbreviation, e)
                await self._pause()
                continue

            for category in categories:
                category_name = category.get("name") or "general"
                for stat in category.get("stats") or []:
                    stat_name = stat.get("name")
                    if not stat_name:
                        continue
                    key = f"{team.abbreviation}:{category_name}:{stat_name}"
                    try:
                        values = transform_stat(stat)
                        values["last_synced"] = utcnow()
                        _, created = self.stats.upsert({
                            "team_id": team.id,
                            "season": season,
                            "season_type": season_type,
                            "category": category_name,
                            "stat_name": stat_name,
                        }, values)
                        self._record_upsert(result, key, created)
                    except Exception as e:
                        self._record_failure(result, key, e)
            logger.debug(f"Team stats synced for {team.abbreviation}")
            await self._pause()

        return self._finish(result, started)
