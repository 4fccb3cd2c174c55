"""
AI narrative analysis for finished games.

Uses the OpenAI chat completions API when a key is configured and falls
back to a deterministic template otherwise.

Call policy (process-wide, shared by every service instance):
- results are cached per game for the life of the process, fallbacks included
- after an HTTP 429 the game enters a per-game cooldown (5 minutes)
- real API calls are spaced by a global cooldown (30 seconds)
- any provider error yields the fallback template
"""
import json
import math
import time
from typing import Any, Dict, Optional

import openai
from openai import AsyncOpenAI

from court_vision.core.config import settings, OPENAI_PLACEHOLDER_KEY
from court_vision.core.logging import get_logger
from court_vision.core import metrics
from court_vision.services.ai.box_score import BoxScore

logger = get_logger(__name__)

SYSTEM_PROMPT = "You are an NBA analyst. Provide brief, insightful analysis in JSON format."

RESPONSE_SHAPE = (
    '{"summary": "2-3 sentence summary", "keyInsights": ["insight1", "insight2"], '
    '"teamAnalysis": {"away": {"strengths": ["s1"], "weaknesses": ["w1"], "performance": "analysis"}, '
    '"home": {"strengths": ["s1"], "weaknesses": ["w1"], "performance": "analysis"}}, '
    '"matchupAnalysis": {"advantages": {"away": ["a1"], "home": ["a1"]}, "keyFactors": ["f1", "f2"]}, '
    '"strategicInsights": {"offensiveStrategy": "analysis", "defensiveStrategy": "analysis", '
    '"adjustments": "analysis"}, '
    '"gamePlan": {"forWinner": "advice", "forLoser": "advice", "keyTakeaways": ["t1", "t2"]}}'
)


class _AnalysisState:
    """Process-wide cache and cooldown bookkeeping."""

    def __init__(self):
        self.cache: Dict[str, Dict[str, Any]] = {}
        self.cooldowns: Dict[str, float] = {}  # game id -> monotonic deadline
        self.last_api_call: Optional[float] = None

    def reset(self) -> None:
        self.cache.clear()
        self.cooldowns.clear()
        self.last_api_call = None


_state = _AnalysisState()


def reset_analysis_state() -> None:
    """Clear the cache and cooldowns (tests, admin tooling)."""
    _state.reset()


def build_prompt(box_score: BoxScore) -> str:
    away, home = box_score.away, box_score.home
    return (
        f"Analyze this NBA game: {away.team} ({away.points}) vs {home.team} ({home.points}). "
        f"Winner: {box_score.winner} by {box_score.margin} points.\n\n"
        f"Key stats - Away: {away.field_goal_percentage}% FG, {away.three_point_percentage}% 3P, "
        f"{away.assists} assists, {away.turnovers} turnovers. "
        f"Home: {home.field_goal_percentage}% FG, {home.three_point_percentage}% 3P, "
        f"{home.assists} assists, {home.turnovers} turnovers.\n\n"
        f"Provide analysis in JSON: {RESPONSE_SHAPE}"
    )


def _raw_stats(box_score: BoxScore) -> Dict[str, Any]:
    return {"away": box_score.away.stats_dict(), "home": box_score.home.stats_dict()}


def fallback_analysis(box_score: BoxScore) -> Dict[str, Any]:
    """Template analysis used whenever the model is unavailable."""
    away, home = box_score.away, box_score.home
    return {
        "source": "fallback",
        "gameInfo": box_score.game_info(),
        "teamAnalysis": {
            "away": {
                **away.stats_dict(),
                "aiInsights": {
                    "strengths": [
                        f"Strong shooting with {away.field_goal_percentage}% field goal percentage",
                        f"Good ball movement with {away.assists} assists",
                    ],
                    "weaknesses": [
                        f"Turnover issues with {away.turnovers} turnovers",
                        "Defensive rebounding could improve",
                    ],
                    "performance": "The away team showed solid offensive efficiency but needs to reduce turnovers.",
                },
            },
            "home": {
                **home.stats_dict(),
                "aiInsights": {
                    "strengths": [
                        f"Effective shooting with {home.field_goal_percentage}% field goal percentage",
                        f"Strong defensive presence with {home.blocks} blocks",
                    ],
                    "weaknesses": [
                        f"Limited assists with {home.assists} assists",
                        "Rebounding could be improved",
                    ],
                    "performance": "The home team played well defensively but could improve ball movement.",
                },
            },
        },
        "aiAnalysis": {
            "summary": f"{box_score.winner} won by {box_score.margin} points in a competitive matchup.",
            "keyInsights": [
                "Shooting efficiency was a key factor in the outcome",
                "Turnover differential played a significant role",
                "Rebounding and ball movement were crucial",
            ],
            "matchupAnalysis": {
                "advantages": {
                    "away": ["Better shooting percentage", "More assists"],
                    "home": ["Stronger defense", "Better shot blocking"],
                },
                "keyFactors": ["Field goal percentage", "Turnover differential", "Assist-to-turnover ratio"],
            },
            "strategicInsights": {
                "offensiveStrategy": "Both teams focused on efficient shooting and ball movement",
                "defensiveStrategy": "Defensive intensity and shot blocking were key",
                "adjustments": "Reducing turnovers and improving rebounding would benefit both teams",
            },
            "gamePlan": {
                "forWinner": "Continue the efficient shooting while improving ball security",
                "forLoser": "Focus on reducing turnovers and improving defensive rebounding",
                "keyTakeaways": ["Shooting efficiency wins games", "Ball security is crucial",
                                 "Defense creates opportunities"],
            },
        },
        "rawStats": _raw_stats(box_score),
    }


def structure_response(content: str, box_score: BoxScore) -> Dict[str, Any]:
    """
    Shape the model's reply into the analysis document.

    A reply that is not the expected JSON object is kept verbatim as the
    summary.
    """
    try:
        parsed = json.loads(content)
        team_analysis = parsed["teamAnalysis"]
        return {
            "source": "ai",
            "gameInfo": box_score.game_info(),
            "teamAnalysis": {
                "away": {**box_score.away.stats_dict(), "aiInsights": team_analysis.get("away")},
                "home": {**box_score.home.stats_dict(), "aiInsights": team_analysis.get("home")},
            },
            "aiAnalysis": {
                "summary": parsed.get("summary"),
                "keyInsights": parsed.get("keyInsights", []),
                "matchupAnalysis": parsed.get("matchupAnalysis"),
                "strategicInsights": parsed.get("strategicInsights"),
                "gamePlan": parsed.get("gamePlan"),
            },
            "rawStats": _raw_stats(box_score),
        }
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Unstructured AI response for game {box_score.game_id}: {e}")

    return {
        "source": "ai",
        "gameInfo": box_score.game_info(),
        "teamAnalysis": {"away": box_score.away.stats_dict(), "home": box_score.home.stats_dict()},
        "aiAnalysis": {
            "summary": content,
            "keyInsights": ["AI analysis generated but formatting needs improvement"],
            "matchupAnalysis": {"advantages": {"away": [], "home": []}, "keyFactors": []},
            "strategicInsights": {
                "offensiveStrategy": "Analysis available in summary",
                "defensiveStrategy": "Analysis available in summary",
                "adjustments": "Analysis available in summary",
            },
            "gamePlan": {
                "forWinner": "See summary for insights",
                "forLoser": "See summary for insights",
                "keyTakeaways": [],
            },
        },
        "rawStats": _raw_stats(box_score),
    }


class GameAnalysisService:
    """
    Generates and caches game analyses.

    Usage:
        service = GameAnalysisService()
        analysis = await service.generate_analysis(box_score)
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, api_key: Optional[str] = None):
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self._client = client

    @property
    def enabled(self) -> bool:
        if self._client is not None:
            return True
        return bool(self.api_key) and self.api_key != OPENAI_PLACEHOLDER_KEY

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    def _fallback(self, box_score: BoxScore, reason: str) -> Dict[str, Any]:
        logger.info(f"Using fallback analysis for game {box_score.game_id}: {reason}")
        analysis = fallback_analysis(box_score)
        _state.cache[box_score.game_id] = analysis
        metrics.game_analysis_total.labels(source="fallback").inc()
        return analysis

    async def generate_analysis(self, box_score: BoxScore) -> Dict[str, Any]:
        """Cached analysis for the game, generating it on first request."""
        game_id = box_score.game_id
        cached = _state.cache.get(game_id)
        if cached is not None:
            metrics.game_analysis_total.labels(source="cache").inc()
            return cached

        now = time.monotonic()
        cooldown_until = _state.cooldowns.get(game_id)
        if cooldown_until and now < cooldown_until:
            return self._fallback(box_score, f"rate-limit cooldown ({math.ceil(cooldown_until - now)}s remaining)")

        if not self.enabled:
            return self._fallback(box_score, "OpenAI API key not configured")

        if (_state.last_api_call is not None
                and now - _state.last_api_call < settings.AI_GLOBAL_COOLDOWN_SECONDS):
            return self._fallback(box_score, "global API cooldown active")

        logger.info(f"Requesting AI analysis for game {game_id}")
        try:
            response = await self._get_client().chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(box_score)},
                ],
                temperature=settings.OPENAI_TEMPERATURE,
                max_tokens=settings.OPENAI_MAX_TOKENS,
            )
        except openai.APIStatusError as e:
            if e.status_code == 429:
                _state.cooldowns[game_id] = time.monotonic() + settings.AI_RATE_LIMIT_COOLDOWN_SECONDS
                logger.warning(f"OpenAI rate limit for game {game_id}; cooling down "
                               f"{settings.AI_RATE_LIMIT_COOLDOWN_SECONDS}s")
            return self._fallback(box_score, f"OpenAI API error ({e.status_code})")
        except openai.APIError as e:
            return self._fallback(box_score, f"OpenAI request failed: {e}")

        _state.last_api_call = time.monotonic()
        content = response.choices[0].message.content or ""
        analysis = structure_response(content, box_score)
        _state.cache[game_id] = analysis
        metrics.game_analysis_total.labels(source="ai").inc()
        return analysis
