"""
BallDontLie API client.

Base URL: https://api.balldontlie.io/v1
Auth: ``Authorization: Bearer <key>``.
Pagination: cursor based; ``meta.next_cursor`` is absent on the last page.
"""
from typing import Dict, List, Optional, Any, AsyncIterator

import httpx

from court_vision.core.config import settings
from court_vision.core.logging import get_logger
from court_vision.core import metrics
from court_vision.services.providers.errors import ProviderError

logger = get_logger(__name__)


class BallDontLieService:
    """
    BallDontLie API client.

    Usage:
        service = BallDontLieService()
        async for page in service.iter_player_pages():
            ...
        await service.close()
    """

    provider = "balldontlie"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 client: Optional[httpx.AsyncClient] = None):
        self.api_key = api_key if api_key is not None else settings.BALLDONTLIE_API_KEY
        self.base_url = (base_url or settings.BALLDONTLIE_API_URL).rstrip("/")
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["Authorization"] = f"Bearer {self.api_key}"
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(30.0), headers=headers)
        return self._client

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _fetch(self, path: str, params: Optional[Any] = None) -> Dict:
        """
        GET a JSON document relative to the base URL.

        Raises:
            ProviderError: on transport failure, non-2xx status or invalid JSON
        """
        url = f"{self.base_url}{path}"
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

    async def get_players_page(self, cursor: Optional[int] = None,
                               per_page: Optional[int] = None) -> Dict:
        """
        One page of players.

        Returns:
            {"data": [...], "next_cursor": int | None}
        """
        params: Dict[str, Any] = {"per_page": per_page or settings.BALLDONTLIE_PAGE_SIZE}
        if cursor is not None:
            params["cursor"] = cursor
        data = await self._fetch("/players", params=params)
        meta = data.get("meta") or {}
        return {"data": data.get("data", []), "next_cursor": meta.get("next_cursor")}

    async def iter_player_pages(self, per_page: Optional[int] = None,
                                max_pages: Optional[int] = None) -> AsyncIterator[List[Dict]]:
        """Yield player pages until the cursor runs out (or ``max_pages``)."""
        cursor = None
        pages = 0
        while True:
            page = await self.get_players_page(cursor=cursor, per_page=per_page)
            pages += 1
            yield page["data"]
            cursor = page["next_cursor"]
            if cursor is None or (max_pages and pages >= max_pages):
                return

    async def get_season_averages(self, season: int, player_ids: List[int]) -> List[Dict]:
        """Season averages for the given BallDontLie player ids."""
        if not player_ids:
            return []
        params: List[tuple] = [("season", season)]
        params.extend(("player_ids[]", pid) for pid in player_ids)
        data = await self._fetch("/season_averages", params=params)
        return data.get("data", [])
