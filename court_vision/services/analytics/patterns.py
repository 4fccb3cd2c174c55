"""
Pattern analytics: player patterns, team tendencies, game context and
contextual tagging suggestions.

All aggregation happens in memory over PlayTag rows; zero rows produce
empty results rather than errors.
"""
import math
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.models import PlayTag
from court_vision.repositories import GameRepository, PlayRepository, PlayerRepository, TeamRepository
from court_vision.services.analytics.sequences import percentage, ranked
from court_vision.utils.timezone import utcnow

logger = get_logger(__name__)

SUGGESTION_WINDOW = 50
DEFENSIVE_RESPONSE_TAGS = {"Double Teamed", "Double Team Defense", "Block", "Steal"}
DEFENSIVE_LOOKBACK = timedelta(minutes=10)

CONFIDENCE_EXPLANATION = {
    "next_action_prediction": "Confidence in predicting the next action based on recent sequence patterns",
    "defensive_adjustment": "Likelihood that defense will adjust to repeated patterns",
    "player_tendency": "Strength of player's recent behavioral pattern",
    "quarter_pattern": "Effectiveness of specific actions in current game context",
}


def _quarter_key(quarter: Optional[int]) -> str:
    return str(quarter) if quarter is not None else "unknown"


def recent_play_entry(play_tag: PlayTag) -> Dict[str, Any]:
    play = play_tag.play
    return {
        "id": play.id,
        "tag": play_tag.tag.name,
        "quarter": play.quarter,
        "gameTime": play.game_time,
        "description": play.description,
        "createdAt": play_tag.created_at.isoformat() if play_tag.created_at else None,
    }


def summarize_play_tags(play_tags: List[PlayTag], top_n: int) -> Dict[str, Any]:
    """
    Frequency summary of PlayTags (most recent first).

    Returns:
        {"totalPlays", "tagCounts", "mostCommon", "quarterPatterns", "recentPlays"}
    """
    tag_counts: Counter = Counter()
    quarter_patterns: Dict[str, Counter] = {}
    for play_tag in play_tags:
        name = play_tag.tag.name
        tag_counts[name] += 1
        quarter_patterns.setdefault(_quarter_key(play_tag.play.quarter), Counter())[name] += 1

    total = len(play_tags)
    return {
        "totalPlays": total,
        "tagCounts": dict(tag_counts),
        "mostCommon": [
            {"tag": tag, "count": count, "percentage": percentage(count, total)}
            for tag, count in ranked(tag_counts, top_n)
        ],
        "quarterPatterns": {quarter: dict(counts) for quarter, counts in quarter_patterns.items()},
        "recentPlays": [recent_play_entry(pt) for pt in play_tags[:5]],
    }


class PatternService:
    """
    Player, team and game pattern summaries.

    Game and team arguments accept a local id or an ESPN id (teams also
    an abbreviation); unknown ids simply match no plays.
    """

    def __init__(self, db: Session):
        self.db = db
        self.plays = PlayRepository(db)
        self.games = GameRepository(db)
        self.teams = TeamRepository(db)

    def _resolve_game_id(self, game_id: Optional[str]) -> Optional[str]:
        if not game_id:
            return None
        game = self.games.find_by_identifier(game_id)
        return game.id if game else game_id

    def _resolve_team_id(self, team_id: str) -> str:
        team = self.teams.find_by_identifier(team_id)
        return team.id if team else team_id

    @staticmethod
    def _since(days: Optional[int]) -> Optional[datetime]:
        return utcnow() - timedelta(days=days) if days else None

    def player_patterns(self, player_id: str, game_id: Optional[str] = None,
                        days: Optional[int] = None, top_n: int = 3) -> Dict[str, Any]:
        play_tags = self.plays.play_tags(
            player_id=player_id, game_id=self._resolve_game_id(game_id), since=self._since(days)
        )
        summary = summarize_play_tags(play_tags, top_n)
        return {
            "playerId": player_id,
            "totalPlays": summary["totalPlays"],
            "mostCommonActions": summary["mostCommon"],
            "tagCounts": summary["tagCounts"],
            "quarterPatterns": summary["quarterPatterns"],
            "recentPlays": summary["recentPlays"],
        }

    def team_tendencies(self, team_id: str, game_id: Optional[str] = None,
                        days: Optional[int] = None, top_n: int = 5) -> Dict[str, Any]:
        play_tags = self.plays.play_tags(
            team_id=self._resolve_team_id(team_id),
            game_id=self._resolve_game_id(game_id),
            since=self._since(days),
        )
        summary = summarize_play_tags(play_tags, top_n)
        return {
            "teamId": team_id,
            "totalPlays": summary["totalPlays"],
            "mostCommonPlays": summary["mostCommon"],
            "tagCounts": summary["tagCounts"],
            "quarterPatterns": summary["quarterPatterns"],
            "recentPlays": summary["recentPlays"],
        }

    def game_context(self, game_id: str) -> Optional[Dict[str, Any]]:
        """Game header, ten most recent plays and the game's top five tags; None if no game."""
        game = self.games.find_by_identifier(game_id)
        if game is None:
            return None

        recent = self.plays.recent_for_game(game.id, limit=10)
        return {
            "game": {
                "id": game.id,
                "externalId": game.external_id,
                "date": game.date.isoformat() if game.date else None,
                "status": game.status.value if game.status else None,
                "homeTeam": _team_header(game.home_team),
                "awayTeam": _team_header(game.away_team),
                "homeScore": game.home_score,
                "awayScore": game.away_score,
            },
            "recentPlays": [
                {
                    "id": play.id,
                    "quarter": play.quarter,
                    "gameTime": play.game_time,
                    "description": play.description,
                    "tags": [
                        {
                            "name": pt.tag.name,
                            "player": pt.player.name if pt.player else None,
                            "team": pt.team.abbreviation if pt.team else None,
                        }
                        for pt in play.play_tags
                    ],
                }
                for play in recent
            ],
            "mostCommonInGame": [
                {"tag": name, "count": count} for name, count in self.plays.tag_counts_for_game(game.id)[:5]
            ],
            "totalPlays": self.plays.count_for_game(game.id),
        }


def _team_header(team) -> Optional[Dict[str, Any]]:
    if team is None:
        return None
    return {
        "id": team.id,
        "externalId": team.external_id,
        "abbreviation": team.abbreviation,
        "name": team.display_name or team.name,
        "logoUrl": team.logo_url,
    }


class SuggestionService:
    """
    Contextual tagging suggestions from the 50 most recent matching tags.

    Four heuristics, each optional:
    - next_action_prediction: what usually follows the last tagged action
    - defensive_adjustment: warning after three identical actions in a row
    - player_tendency: the player's go-to action in their last ten tags
    - quarter_pattern: the dominant action in the requested quarter
    """

    def __init__(self, db: Session):
        self.db = db
        self.plays = PlayRepository(db)
        self.games = GameRepository(db)
        self.players = PlayerRepository(db)

    def suggestions(
        self,
        game_id: Optional[str] = None,
        player_id: Optional[str] = None,
        team_id: Optional[str] = None,
        quarter: Optional[int] = None,
        game_time: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        if game_id:
            game = self.games.find_by_identifier(game_id)
            game_id = game.id if game else game_id

        recent = self.plays.play_tags(
            player_id=player_id, team_id=team_id, game_id=game_id, limit=SUGGESTION_WINDOW
        )
        now = now or utcnow()

        suggestions = [
            s for s in (
                self._next_action(recent, self._scope_phrase(player_id, team_id, game_id)),
                self._defensive_adjustment(recent, now),
                self._player_tendency(recent, player_id),
                self._quarter_pattern(recent, quarter, game_time),
            )
            if s is not None
        ]
        suggestions.sort(key=lambda s: -s["confidence"])

        return {
            "suggestions": suggestions[:5],
            "totalPlaysAnalyzed": len(recent),
            "confidenceExplanation": CONFIDENCE_EXPLANATION,
            "recentContext": [
                {
                    "tag": pt.tag.name,
                    "player": pt.player.name if pt.player else None,
                    "team": pt.team.abbreviation if pt.team else None,
                    "quarter": pt.play.quarter,
                    "gameTime": pt.play.game_time,
                    "timestamp": pt.created_at.isoformat() if pt.created_at else None,
                }
                for pt in recent[:5]
            ],
        }

    @staticmethod
    def _scope_phrase(player_id: Optional[str], team_id: Optional[str], game_id: Optional[str]) -> str:
        if player_id:
            return "this player typically follows"
        if team_id:
            return "this team typically follows"
        if game_id:
            return "plays in this game typically continue"
        return "recent plays typically continue"

    @staticmethod
    def _next_action(recent: List[PlayTag], scope: str) -> Optional[Dict[str, Any]]:
        if len(recent) < 2:
            return None

        chronological = [pt.tag.name for pt in reversed(recent)]
        last_action = chronological[-1]
        followers: Counter = Counter(
            chronological[i + 1]
            for i in range(len(chronological) - 1)
            if chronological[i] == last_action
        )
        total = sum(followers.values())
        if total < 2:
            return None

        action, count = ranked(followers, 1)[0]
        confidence = min(0.95, (count / total) * (1 + math.log10(total) * 0.1))
        return {
            "type": "next_action_prediction",
            "message": f'After "{last_action}", {scope} with "{action}"',
            "confidence": round(confidence, 3),
            "context": (f"Based on {total} recent sequences. {count} out of {total} times "
                        f"({round(count / total * 100)}% frequency)"),
            "action": action,
        }

    @staticmethod
    def _defensive_adjustment(recent: List[PlayTag], now: datetime) -> Optional[Dict[str, Any]]:
        if len(recent) < 3:
            return None
        last_three = [pt.tag.name for pt in recent[:3]]
        if len(set(last_three)) != 1:
            return None

        defensive = [pt for pt in recent if pt.tag.name in DEFENSIVE_RESPONSE_TAGS]
        if not defensive:
            return None

        recent_defensive = sum(1 for pt in defensive if pt.created_at and pt.created_at > now - DEFENSIVE_LOOKBACK)
        repeated = last_three[0]
        return {
            "type": "defensive_adjustment",
            "message": f'Defense may adjust to repeated "{repeated}" - consider mixing up the play',
            "confidence": round(min(0.9, 0.6 + recent_defensive * 0.1), 3),
            "context": (f'"{repeated}" used 3 times in a row. '
                        f"{recent_defensive} defensive plays in last 10 minutes."),
            "warning": True,
        }

    def _player_tendency(self, recent: List[PlayTag], player_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not player_id:
            return None
        player_tags = [pt for pt in recent if pt.player_id == player_id]
        if len(player_tags) < 3:
            return None

        last_ten = player_tags[:10]
        action, count = ranked(Counter(pt.tag.name for pt in last_ten), 1)[0]
        if count < 3:
            return None

        frequency = count / len(last_ten)
        recency = sum(1 for pt in last_ten[:3] if pt.tag.name == action) / 3
        player = self.players.find_by_external_id(player_id)
        name = player.name if player else "this player"
        trend = "Very recent trend." if recency > 0.5 else "Established pattern."
        return {
            "type": "player_tendency",
            "message": f"\"{action}\" is {name}'s go-to move recently",
            "confidence": round(min(0.85, frequency * 0.7 + recency * 0.3), 3),
            "context": (f"{count} out of {len(last_ten)} recent actions "
                        f"({round(frequency * 100)}% frequency). {trend}"),
            "action": action,
        }

    @staticmethod
    def _quarter_pattern(recent: List[PlayTag], quarter: Optional[int],
                         game_time: Optional[str]) -> Optional[Dict[str, Any]]:
        if not quarter or not game_time:
            return None
        quarter_tags = [pt for pt in recent if pt.play.quarter == quarter]
        if len(quarter_tags) < 2:
            return None

        action, count = ranked(Counter(pt.tag.name for pt in quarter_tags), 1)[0]
        if count < 2:
            return None
        return {
            "type": "quarter_pattern",
            "message": f'"{action}" is working well in Q{quarter}',
            "confidence": round(min(0.75, (count / len(quarter_tags)) * 0.8), 3),
            "context": f"{count} successful uses this quarter. Quarter-specific pattern.",
            "action": action,
        }
