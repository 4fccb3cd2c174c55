"""Tests for GameAnalysisService: caching, cooldowns and the fallback template."""
import json
import sys
import time
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

sys.path.insert(0, str(Path(__file__).parent))
from test_box_score import make_summary
from court_vision.services.ai import GameAnalysisService, box_score_from_summary
from court_vision.services.ai import game_analysis_service


AI_REPLY = {
    "summary": "Los Angeles closed strong.",
    "keyInsights": ["Bench scoring", "Free throws"],
    "teamAnalysis": {
        "away": {"strengths": ["3PT"], "weaknesses": ["Turnovers"], "performance": "Solid"},
        "home": {"strengths": ["Paint"], "weaknesses": ["FT"], "performance": "Gritty"},
    },
    "matchupAnalysis": {"advantages": {"away": [], "home": []}, "keyFactors": ["Rebounds"]},
    "strategicInsights": {"offensiveStrategy": "o", "defensiveStrategy": "d", "adjustments": "a"},
    "gamePlan": {"forWinner": "w", "forLoser": "l", "keyTakeaways": ["t"]},
}


def make_client(content=None, side_effect=None):
    client = MagicMock()
    response = SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=side_effect)
    return client


def rate_limit_error():
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(429, request=request)
    return openai.RateLimitError("Rate limit reached", response=response, body=None)


@pytest.fixture
def box_score():
    return box_score_from_summary(make_summary())


class TestGameAnalysisService:

    @pytest.mark.asyncio
    async def test_structured_ai_response(self, box_score):
        client = make_client(json.dumps(AI_REPLY))

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "ai"
        assert analysis["aiAnalysis"]["summary"] == "Los Angeles closed strong."
        assert analysis["teamAnalysis"]["home"]["aiInsights"]["performance"] == "Gritty"
        assert analysis["teamAnalysis"]["away"]["points"] == 108
        assert analysis["gameInfo"]["winner"] == "Los Angeles Lakers"
        client.chat.completions.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_result_is_cached(self, box_score):
        client = make_client(json.dumps(AI_REPLY))
        service = GameAnalysisService(client=client)

        first = await service.generate_analysis(box_score)
        second = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert first is second
        assert client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_fallback_without_api_key(self, box_score):
        analysis = await GameAnalysisService(api_key="").generate_analysis(box_score)

        assert analysis["source"] == "fallback"
        assert analysis["aiAnalysis"]["summary"] == "Los Angeles Lakers won by 4 points in a competitive matchup."
        assert analysis["rawStats"]["away"]["assists"] == 27

    @pytest.mark.asyncio
    async def test_unparseable_reply_becomes_summary(self, box_score):
        client = make_client("Lakers won. Not JSON.")

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "ai"
        assert analysis["aiAnalysis"]["summary"] == "Lakers won. Not JSON."
        assert analysis["aiAnalysis"]["gamePlan"]["keyTakeaways"] == []

    @pytest.mark.asyncio
    async def test_rate_limit_starts_game_cooldown(self, box_score):
        client = make_client(side_effect=rate_limit_error())

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "fallback"
        assert box_score.game_id in game_analysis_service._state.cooldowns
        assert game_analysis_service._state.last_api_call is None

    @pytest.mark.asyncio
    async def test_game_in_cooldown_skips_the_api(self, box_score):
        game_analysis_service._state.cooldowns[box_score.game_id] = time.monotonic() + 300
        client = make_client(json.dumps(AI_REPLY))

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "fallback"
        client.chat.completions.create.assert_not_awaited()
        assert game_analysis_service._state.cache[box_score.game_id] is analysis

    @pytest.mark.asyncio
    async def test_expired_cooldown_calls_the_api(self, box_score):
        game_analysis_service._state.cooldowns[box_score.game_id] = time.monotonic() - 1
        client = make_client(json.dumps(AI_REPLY))

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "ai"
        client.chat.completions.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_global_cooldown_between_games(self):
        client = make_client(json.dumps(AI_REPLY))
        service = GameAnalysisService(client=client)

        first = await service.generate_analysis(box_score_from_summary(make_summary(), game_id="g1"))
        second = await service.generate_analysis(box_score_from_summary(make_summary(), game_id="g2"))

        assert first["source"] == "ai"
        assert second["source"] == "fallback"
        assert client.chat.completions.create.await_count == 1

    @pytest.mark.asyncio
    async def test_connection_error_falls_back(self, box_score):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        client = make_client(side_effect=openai.APIConnectionError(request=request))

        analysis = await GameAnalysisService(client=client).generate_analysis(box_score)

        assert analysis["source"] == "fallback"
        assert box_score.game_id not in game_analysis_service._state.cooldowns
