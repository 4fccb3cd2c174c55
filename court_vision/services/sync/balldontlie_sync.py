"""
BallDontLie player linking and season averages.

BallDontLie does not know ESPN ids, so players are matched by name within
the mapped team. Only players on current-conference teams (East/West) are
considered; historical franchises are ignored.
"""
import time
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.models import Player
from court_vision.repositories import PlayerRepository, TeamRepository
from court_vision.services.providers import BallDontLieService
from court_vision.services.sync.base import BaseSyncService, SyncResult
from court_vision.utils.timezone import utcnow, current_season_year

logger = get_logger(__name__)

CURRENT_CONFERENCES = {"East", "West"}

# BallDontLie abbreviation -> ESPN abbreviation where they differ
BDL_TO_ESPN_ABBREVIATIONS = {
    "GSW": "GS",
    "NOP": "NO",
    "NYK": "NY",
    "SAS": "SA",
    "UTA": "UTAH",
    "WAS": "WSH",
}

SEASON_AVERAGES_BATCH = 25


class BallDontLieSyncService(BaseSyncService):
    """Link local players to BallDontLie ids and store their season averages."""

    job_name = "balldontlie"

    def __init__(self, db: Session, client: Optional[BallDontLieService] = None, delay: float = 1.0):
        super().__init__(db, delay)
        self.client = client or BallDontLieService()
        self.players = PlayerRepository(db)
        self.teams = TeamRepository(db)

    def _espn_team_id(self, bdl_team: Dict) -> Optional[str]:
        abbreviation = (bdl_team.get("abbreviation") or "").upper()
        team = self.teams.find_by_abbreviation(BDL_TO_ESPN_ABBREVIATIONS.get(abbreviation, abbreviation))
        if team is None and abbreviation:
            team = self.teams.find_by_abbreviation(abbreviation)
        return team.external_id if team else None

    async def link_players(self, max_pages: Optional[int] = None) -> SyncResult:
        """
        Walk BallDontLie player pages and set ``balldontlie_id`` on matches.

        Raises:
            ProviderError: if a player page cannot be fetched
        """
        started = time.perf_counter()
        result = self._new_result()

        async for page in self.client.iter_player_pages(max_pages=max_pages):
            for bdl_player in page:
                key = bdl_player.get("id")
                try:
                    team = bdl_player.get("team") or {}
                    if team.get("conference") not in CURRENT_CONFERENCES:
                        continue
                    team_external_id = self._espn_team_id(team)
                    if team_external_id is None:
                        self._record_skip(result, key, f"team {team.get('abbreviation')} not in database")
                        continue

                    player = self.players.find_by_name(
                        bdl_player.get("first_name") or "",
                        bdl_player.get("last_name") or "",
                        team_external_id,
                    )
                    if player is None:
                        self._record_skip(result, key, "no matching ESPN player")
                        continue

                    created = player.balldontlie_id is None
                    self.players.update_instance(player, {
                        "balldontlie_id": key,
                        "last_synced": utcnow(),
                    })
                    self._record_upsert(result, key, created)
                except Exception as e:
                    self._record_failure(result, key, e)
            await self._pause()

        return self._finish(result, started)

    async def sync_season_averages(self, season: Optional[int] = None) -> SyncResult:
        """
        Fetch season averages for every linked player, in batches.

        Players with an averages row get ``has_statistics`` set.
        """
        started = time.perf_counter()
        result = self._new_result()
        result.job = "balldontlie-averages"
        season = season or current_season_year() - 1  # BallDontLie keys seasons by start year

        linked: List[Player] = self.players.where(Player.balldontlie_id.isnot(None))
        by_bdl_id = {p.balldontlie_id: p for p in linked}
        ids = list(by_bdl_id)

        for start in range(0, len(ids), SEASON_AVERAGES_BATCH):
            batch = ids[start:start + SEASON_AVERAGES_BATCH]
            try:
                rows = await self.client.get_season_averages(season, batch)
            except Exception as e:
                self._record_failure(result, f"batch@{start}", e)
                await self._pause()
                continue

            for row in rows:
                player = by_bdl_id.get(row.get("player_id"))
                if player is None:
                    continue
                try:
                    created = player.season_averages is None
                    averages = dict(row)
                    averages.pop("player_id", None)
                    self.players.update_instance(player, {
                        "season_averages": averages,
                        "has_statistics": True,
                    })
                    self._record_upsert(result, player.external_id, created)
                except Exception as e:
                    self._record_failure(result, player.external_id, e)
            await self._pause()

        return self._finish(result, started)
