"""
Team sync from the ESPN Core API.

Lists team ``$ref`` links, follows each one and upserts the team by its
ESPN id.
"""
import time
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.repositories import TeamRepository
from court_vision.services.providers import ESPNApiService
from court_vision.services.sync.base import BaseSyncService, SyncResult, optional_str
from court_vision.utils.timezone import utcnow

logger = get_logger(__name__)


def _nested_name(value: Any) -> Optional[str]:
    if isinstance(value, dict):
        return optional_str(value.get("name"))
    return optional_str(value)


def transform_team(data: Dict[str, Any]) -> Dict[str, Any]:
    """Map an ESPN Core API team document to Team columns."""
    logos = data.get("logos") or []
    return {
        "abbreviation": data.get("abbreviation") or "",
        "name": data.get("displayName") or data.get("name") or "",
        "display_name": optional_str(data.get("displayName")),
        "short_display_name": optional_str(data.get("shortDisplayName")),
        "nickname": optional_str(data.get("nickname")),
        "city": optional_str(data.get("location")),
        "conference": _nested_name(data.get("conference")),
        "division": _nested_name(data.get("division")),
        "primary_color": optional_str(data.get("color")),
        "alternate_color": optional_str(data.get("alternateColor")),
        "logo_url": logos[0].get("href") if len(logos) > 0 else None,
        "logo_dark_url": logos[1].get("href") if len(logos) > 1 else None,
        "uid": optional_str(data.get("uid")),
        "slug": optional_str(data.get("slug")),
        "is_active": data.get("isActive", data.get("active", True)) is not False,
        "is_all_star": bool(data.get("isAllStar", data.get("isAllStarTeam", False))),
    }


class TeamSyncService(BaseSyncService):
    """Upsert every NBA team from ESPN."""

    job_name = "teams"

    def __init__(self, db: Session, espn: Optional[ESPNApiService] = None, delay: float = 0.1):
        super().__init__(db, delay)
        self.espn = espn or ESPNApiService()
        self.teams = TeamRepository(db)

    async def sync_teams(self) -> SyncResult:
        """
        Sync all teams.

        Raises:
            ProviderError: if the team listing itself cannot be fetched
        """
        started = time.perf_counter()
        result = self._new_result()

        refs = await self.espn.get_team_refs()
        logger.info(f"Found {len(refs)} team references")

        for ref in refs:
            key = ESPNApiService.ref_id(ref) or ref
            try:
                data = await self.espn.get_team(ref)
                external_id = optional_str(data.get("id")) or key
                values = transform_team(data)
                values["last_synced"] = utcnow()
                team, created = self.teams.upsert({"external_id": external_id}, values)
                self._record_upsert(result, external_id, created)
                logger.debug(f"Synced team {team.name} ({team.abbreviation})")
            except Exception as e:
                self._record_failure(result, key, e)
            await self._pause()

        return self._finish(result, started)
