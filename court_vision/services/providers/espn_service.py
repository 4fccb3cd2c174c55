"""
ESPN API client for NBA data.

Two ESPN surfaces are used:
- Site API (https://site.api.espn.com/apis/site/v2/sports/basketball/nba):
  scoreboards, team statistics and game summaries (box scores)
- Core API (https://sports.core.api.espn.com/v2/sports/basketball/leagues/nba):
  paginated team and athlete listings whose items are ``$ref`` links

Both are unofficial and unauthenticated. Every request goes through
``_fetch``, which raises ProviderError on any network, HTTP or JSON
failure; callers decide whether that aborts a record or the whole job.
There is no retry, callers re-run the (idempotent) sync instead.
"""
import re
from datetime import datetime, timezone
from typing import List, Dict, Optional, Any

import httpx

from court_vision.core.config import settings
from court_vision.core.logging import get_logger
from court_vision.core import metrics
from court_vision.models import GameStatus
from court_vision.services.providers.errors import ProviderError

logger = get_logger(__name__)

ESPN_STATUS_MAP = {
    "STATUS_SCHEDULED": GameStatus.SCHEDULED,
    "STATUS_IN_PROGRESS": GameStatus.LIVE,
    "STATUS_LIVE": GameStatus.LIVE,
    "STATUS_HALFTIME": GameStatus.LIVE,
    "STATUS_END_PERIOD": GameStatus.LIVE,
    "STATUS_FINAL": GameStatus.FINISHED,
    "STATUS_POSTPONED": GameStatus.POSTPONED,
    "STATUS_CANCELED": GameStatus.CANCELLED,
    "STATUS_CANCELLED": GameStatus.CANCELLED,
}

_REF_ID_PATTERN = re.compile(r"/(\d+)(?:\?|$)")


class ESPNApiService:
    """
    ESPN API client.

    Usage:
        service = ESPNApiService()
        try:
            refs = await service.get_team_refs()
            scoreboard = await service.get_scoreboard("20260115")
        finally:
            await service.close()
    """

    provider = "espn"

    def __init__(
        self,
        site_url: Optional[str] = None,
        core_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.site_url = (site_url or settings.ESPN_SITE_API_URL).rstrip("/")
        self.core_url = (core_url or settings.ESPN_CORE_API_URL).rstrip("/")
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(settings.ESPN_TIMEOUT),
                limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
                headers={
                    "User-Agent": f"{settings.APP_NAME}/{settings.APP_VERSION}",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict:
        """
        GET a JSON document.

        Raises:
            ProviderError: on transport failure, non-2xx status or invalid JSON
        """
        client = await self._get_client()
        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            metrics.provider_requests_failure_total.labels(provider=self.provider, error_type="http").inc()
            raise ProviderError(self.provider, url, f"HTTP {e.response.status_code}",
                                status_code=e.response.status_code) from e
        except httpx.HTTPError as e:
            metrics.provider_requests_failure_total.labels(provider=self.provider, error_type="network").inc()
            raise ProviderError(self.provider, url, str(e) or type(e).__name__) from e
        except ValueError as e:
            metrics.provider_requests_failure_total.labels(provider=self.provider, error_type="parse").inc()
            raise ProviderError(self.provider, url, f"invalid JSON: {e}") from e

    async def fetch_ref(self, ref: str) -> Dict:
        """Follow a Core API ``$ref`` link."""
        return await self._fetch(ref)

    # ==================== CORE API: TEAMS ====================

    async def get_team_refs(self) -> List[str]:
        """``$ref`` URLs for every NBA team (single page, 30+ items)."""
        data = await self._fetch(f"{self.core_url}/teams", params={"limit": 100})
        return [item["$ref"] for item in data.get("items", []) if item.get("$ref")]

    async def get_team(self, ref: str) -> Dict:
        return await self.fetch_ref(ref)

    # ==================== CORE API: ATHLETES ====================

    async def get_athletes_page(self, page_index: int = 1, page_size: Optional[int] = None) -> Dict:
        """
        One page of athlete refs.

        Returns:
            {"count": int, "pageIndex": int, "pageCount": int, "refs": [str, ...]}
        """
        data = await self._fetch(
            f"{self.core_url}/athletes",
            params={"pageIndex": page_index, "pageSize": page_size or settings.ESPN_PAGE_SIZE},
        )
        return {
            "count": data.get("count", 0),
            "pageIndex": data.get("pageIndex", page_index),
            "pageCount": data.get("pageCount", 0),
            "refs": [item["$ref"] for item in data.get("items", []) if item.get("$ref")],
        }

    async def get_athlete(self, ref_or_id: str) -> Dict:
        if ref_or_id.startswith("http"):
            return await self.fetch_ref(ref_or_id)
        return await self._fetch(f"{self.core_url}/athletes/{ref_or_id}")

    async def has_athlete_statistics(self, athlete_id: str) -> bool:
        """
        Probe the athlete statistics endpoint.

        A 404 means "no statistics"; other failures propagate.
        """
        try:
            data = await self._fetch(f"{self.core_url}/athletes/{athlete_id}/statistics")
        except ProviderError as e:
            if e.status_code == 404:
                return False
            raise
        return bool(data.get("splits"))

    # ==================== SITE API ====================

    async def get_scoreboard(self, dates: Optional[str] = None) -> List[Dict]:
        """
        Scoreboard events.

        Args:
            dates: YYYYMMDD or YYYYMMDD-YYYYMMDD; today's board when None
        """
        params = {"limit": 500}
        if dates:
            params["dates"] = dates
        data = await self._fetch(f"{self.site_url}/scoreboard", params=params)
        return data.get("events", [])

    async def get_team_statistics(self, team_external_id: str, season: Optional[str] = None,
                                  season_type: int = 2) -> List[Dict]:
        """Statistic categories for one team: [{"name", "stats": [...]}, ...]."""
        params: Dict[str, Any] = {"seasontype": season_type}
        if season:
            params["season"] = season
        data = await self._fetch(f"{self.site_url}/teams/{team_external_id}/statistics", params=params)
        results = data.get("results") or {}
        stats = results.get("stats") or {}
        return stats.get("categories", [])

    async def get_game_summary(self, event_id: str) -> Dict:
        """Full game summary (header, boxscore, leaders)."""
        return await self._fetch(f"{self.site_url}/summary", params={"event": event_id})

    # ==================== PARSING HELPERS ====================

    @staticmethod
    def ref_id(ref: str) -> Optional[str]:
        """Trailing numeric id of a Core API ``$ref`` URL."""
        match = _REF_ID_PATTERN.search(ref or "")
        return match.group(1) if match else None

    @staticmethod
    def parse_game_status(status_name: Optional[str]) -> GameStatus:
        return ESPN_STATUS_MAP.get(status_name or "", GameStatus.SCHEDULED)

    @staticmethod
    def parse_espn_date(value: Optional[str]) -> Optional[datetime]:
        """
        Parse ESPN ISO timestamps ("2026-01-15T00:30Z") to naive UTC.
        """
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Unparseable ESPN date: {value}")
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        return parsed

    @staticmethod
    def parse_int(value: Any) -> Optional[int]:
        if value is None or value == "":
            return None
        try:
            return int(round(float(value)))
        except (TypeError, ValueError):
            return None

    @staticmethod
    def parse_float(value: Any) -> Optional[float]:
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None
