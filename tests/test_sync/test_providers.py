"""Tests for the ESPN and BallDontLie HTTP clients against a mocked transport."""
import httpx
import pytest

from court_vision.models import GameStatus
from court_vision.services.providers import BallDontLieService, ESPNApiService, ProviderError

SITE = "https://site.test/nba"
CORE = "https://core.test/nba"


def espn_with(handler) -> ESPNApiService:
    return ESPNApiService(site_url=SITE, core_url=CORE,
                          client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


class TestESPNApiService:

    @pytest.mark.asyncio
    async def test_scoreboard_passes_dates(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"events": [{"id": "401584700"}]})

        espn = espn_with(handler)
        try:
            events = await espn.get_scoreboard("20250115")
        finally:
            await espn.close()

        assert events == [{"id": "401584700"}]
        assert seen["params"]["dates"] == "20250115"

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self):
        espn = espn_with(lambda request: httpx.Response(503, text="unavailable"))
        try:
            with pytest.raises(ProviderError) as excinfo:
                await espn.get_game_summary("401584700")
        finally:
            await espn.close()

        assert excinfo.value.status_code == 503
        assert excinfo.value.provider == "espn"

    @pytest.mark.asyncio
    async def test_invalid_json_raises_provider_error(self):
        espn = espn_with(lambda request: httpx.Response(200, text="<html>"))
        try:
            with pytest.raises(ProviderError) as excinfo:
                await espn.get_scoreboard()
        finally:
            await espn.close()

        assert "invalid JSON" in str(excinfo.value)
        assert excinfo.value.status_code is None

    def test_parsing_helpers(self):
        assert ESPNApiService.ref_id(f"{CORE}/teams/13?lang=en&region=us") == "13"
        assert ESPNApiService.ref_id("nonsense") is None
        assert ESPNApiService.parse_game_status("STATUS_HALFTIME") == GameStatus.LIVE
        assert ESPNApiService.parse_game_status("STATUS_UNHEARD_OF") == GameStatus.SCHEDULED
        assert ESPNApiService.parse_int("31.6") == 32
        assert ESPNApiService.parse_int("--") is None
        assert ESPNApiService.parse_float("") is None


class TestBallDontLieService:

    @pytest.mark.asyncio
    async def test_cursor_pagination_stops_on_last_page(self):
        cursors = []

        def handler(request: httpx.Request) -> httpx.Response:
            cursor = request.url.params.get("cursor")
            cursors.append(cursor)
            if cursor is None:
                return httpx.Response(200, json={"data": [{"id": 1}], "meta": {"next_cursor": 2}})
            return httpx.Response(200, json={"data": [{"id": 2}], "meta": {}})

        client = BallDontLieService(api_key="k", base_url="https://bdl.test/v1",
                                    client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        pages = [page async for page in client.iter_player_pages()]
        await client.close()

        assert pages == [[{"id": 1}], [{"id": 2}]]
        assert cursors == [None, "2"]

    @pytest.mark.asyncio
    async def test_max_pages(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"data": [{"id": 1}], "meta": {"next_cursor": 9}})

        client = BallDontLieService(api_key="k", base_url="https://bdl.test/v1",
                                    client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
        pages = [page async for page in client.iter_player_pages(max_pages=3)]
        await client.close()

        assert len(pages) == 3

    @pytest.mark.asyncio
    async def test_season_averages_without_ids_skips_request(self):
        client = BallDontLieService(api_key="k", client=httpx.AsyncClient(
            transport=httpx.MockTransport(lambda request: httpx.Response(500))
        ))

        assert await client.get_season_averages(2024, []) == []
        await client.close()
