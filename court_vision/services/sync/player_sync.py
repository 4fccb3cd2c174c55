"""
Athlete sync from the ESPN Core API.

Pages through ``/athletes`` (``pageIndex``/``pageSize``), follows every
athlete ``$ref``, probes the statistics endpoint and upserts the player by
ESPN athlete id. Athletes are stored even when their team is not synced;
``team_external_id`` is a weak reference.
"""
import time
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.repositories import PlayerRepository
from court_vision.services.providers import ESPNApiService, ProviderError
from court_vision.services.sync.base import BaseSyncService, SyncResult, optional_str
from court_vision.utils.timezone import utcnow

logger = get_logger(__name__)


def _team_external_id(team: Any) -> Optional[str]:
    if not isinstance(team, dict):
        return None
    if team.get("id"):
        return str(team["id"])
    return ESPNApiService.ref_id(team.get("$ref", ""))


def _college_name(college: Any) -> Optional[str]:
    if isinstance(college, str):
        return optional_str(college)
    if isinstance(college, dict):
        return optional_str(college.get("name")) or optional_str(college.get("shortName"))
    return None


def _experience_years(experience: Any) -> Optional[int]:
    if isinstance(experience, dict):
        years = experience.get("years")
        return years if isinstance(years, int) else None
    if isinstance(experience, int):
        return experience
    return None


def _status_name(status: Any) -> Optional[str]:
    if isinstance(status, dict):
        return optional_str(status.get("name") or status.get("type"))
    return optional_str(status)


def transform_athlete(data: Dict[str, Any], has_statistics: bool = False) -> Dict[str, Any]:
    """Map an ESPN Core API athlete document to Player columns."""
    draft = data.get("draft") or {}
    headshot = data.get("headshot")
    position = data.get("position") or {}
    birth_date: Optional[datetime] = ESPNApiService.parse_espn_date(data.get("dateOfBirth"))

    return {
        "uid": optional_str(data.get("uid")),
        "name": data.get("displayName") or data.get("fullName") or "",
        "first_name": optional_str(data.get("firstName")),
        "last_name": optional_str(data.get("lastName")),
        "full_name": optional_str(data.get("fullName")),
        "short_name": optional_str(data.get("shortName")),
        "position": optional_str(position.get("abbreviation")) if isinstance(position, dict) else None,
        "team_external_id": _team_external_id(data.get("team")),
        "jersey_number": optional_str(data.get("jersey")),
        "height": optional_str(data.get("displayHeight")),
        "weight": optional_str(data.get("displayWeight") or data.get("weight")),
        "birth_date": birth_date,
        "age": ESPNApiService.parse_int(data.get("age")),
        "college": _college_name(data.get("college")),
        "experience": _experience_years(data.get("experience")),
        "draft_year": ESPNApiService.parse_int(draft.get("year")),
        "draft_round": ESPNApiService.parse_int(draft.get("round")),
        "draft_pick": ESPNApiService.parse_int(draft.get("selection")),
        "active": bool(data.get("active", False)),
        "status": _status_name(data.get("status")),
        "headshot_url": headshot.get("href") if isinstance(headshot, dict) else optional_str(headshot),
        "has_statistics": has_statistics,
    }


class PlayerSyncService(BaseSyncService):
    """Upsert every NBA athlete from ESPN."""

    job_name = "players"

    def __init__(self, db: Session, espn: Optional[ESPNApiService] = None,
                 delay: float = 0.1, check_statistics: bool = True):
        super().__init__(db, delay)
        self.espn = espn or ESPNApiService()
        self.players = PlayerRepository(db)
        self.check_statistics = check_statistics

    async def sync_players(self, max_pages: Optional[int] = None,
                           start_page: int = 1) -> SyncResult:
        """
        Sync athletes page by page.

        Args:
            max_pages: Stop after this many pages (all pages when None)
            start_page: 1-based page index to start from

        Raises:
            ProviderError: if the first listing page cannot be fetched
        """
        started = time.perf_counter()
        result = self._new_result()

        page_index = start_page
        pages_done = 0
        while True:
            try:
                page = await self.espn.get_athletes_page(page_index)
            except ProviderError:
                if pages_done == 0:
                    raise
                logger.error(f"Failed to fetch athlete page {page_index}; stopping")
                result.errors += 1
                break

            logger.info(
                f"Athlete page {page_index}/{page['pageCount']}: {len(page['refs'])} athletes"
            )
            for ref in page["refs"]:
                await self._sync_athlete(ref, result)
                await self._pause()

            pages_done += 1
            if page_index >= page["pageCount"] or not page["refs"]:
                break
            if max_pages and pages_done >= max_pages:
                break
            page_index += 1

        return self._finish(result, started)

    async def _sync_athlete(self, ref: str, result: SyncResult) -> None:
        key = ESPNApiService.ref_id(ref) or ref
        try:
            data = await self.espn.get_athlete(ref)
            external_id = optional_str(data.get("id")) or key

            has_statistics = False
            if self.check_statistics:
                has_statistics = await self.espn.has_athlete_statistics(external_id)

            values = transform_athlete(data, has_statistics)
            values["last_synced"] = utcnow()
            _, created = self.players.upsert({"external_id": external_id}, values)
            self._record_upsert(result, external_id, created)
        except Exception as e:
            self._record_failure(result, key, e)
