"""
Box score model for game analysis, built from the ESPN game summary.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from court_vision.services.providers.espn_service import ESPNApiService

# ESPN boxscore stat name -> TeamBoxScore field
ESPN_TEAM_STAT_FIELDS = {
    "fieldGoalPct": "field_goal_percentage",
    "threePointFieldGoalPct": "three_point_percentage",
    "freeThrowPct": "free_throw_percentage",
    "totalRebounds": "rebounds",
    "offensiveRebounds": "offensive_rebounds",
    "defensiveRebounds": "defensive_rebounds",
    "assists": "assists",
    "steals": "steals",
    "blocks": "blocks",
    "turnovers": "turnovers",
    "totalTurnovers": "turnovers",
    "fouls": "personal_fouls",
}

_INTEGER_FIELDS = {
    "rebounds", "offensive_rebounds", "defensive_rebounds", "assists",
    "steals", "blocks", "turnovers", "personal_fouls",
}


@dataclass
class TeamBoxScore:
    team: str
    points: int = 0
    field_goal_percentage: Optional[float] = None
    three_point_percentage: Optional[float] = None
    free_throw_percentage: Optional[float] = None
    rebounds: Optional[int] = None
    offensive_rebounds: Optional[int] = None
    defensive_rebounds: Optional[int] = None
    assists: Optional[int] = None
    steals: Optional[int] = None
    blocks: Optional[int] = None
    turnovers: Optional[int] = None
    personal_fouls: Optional[int] = None

    def stats_dict(self) -> Dict[str, Any]:
        return {
            "points": self.points,
            "fieldGoalPercentage": self.field_goal_percentage,
            "threePointPercentage": self.three_point_percentage,
            "freeThrowPercentage": self.free_throw_percentage,
            "rebounds": self.rebounds,
            "offensiveRebounds": self.offensive_rebounds,
            "defensiveRebounds": self.defensive_rebounds,
            "assists": self.assists,
            "steals": self.steals,
            "blocks": self.blocks,
            "turnovers": self.turnovers,
            "personalFouls": self.personal_fouls,
        }


@dataclass
class BoxScore:
    """A finished game's final score and team totals."""
    game_id: str
    date: Optional[str]
    away: TeamBoxScore
    home: TeamBoxScore

    @property
    def winner(self) -> str:
        return self.away.team if self.away.points > self.home.points else self.home.team

    @property
    def margin(self) -> int:
        return abs(self.away.points - self.home.points)

    def game_info(self) -> Dict[str, Any]:
        return {
            "gameId": self.game_id,
            "date": self.date,
            "awayTeam": self.away.team,
            "homeTeam": self.home.team,
            "awayScore": self.away.points,
            "homeScore": self.home.points,
            "winner": self.winner,
            "margin": self.margin,
        }


def _team_from_summary(competitor: Dict, box_team: Optional[Dict]) -> TeamBoxScore:
    team = competitor.get("team") or {}
    result = TeamBoxScore(
        team=team.get("displayName") or team.get("abbreviation") or "Unknown",
        points=ESPNApiService.parse_int(competitor.get("score")) or 0,
    )
    for stat in (box_team or {}).get("statistics", []):
        field_name = ESPN_TEAM_STAT_FIELDS.get(stat.get("name"))
        if not field_name:
            continue
        value = stat.get("displayValue")
        if field_name in _INTEGER_FIELDS:
            setattr(result, field_name, ESPNApiService.parse_int(value))
        else:
            setattr(result, field_name, ESPNApiService.parse_float(value))
    return result


def box_score_from_summary(summary: Dict, game_id: Optional[str] = None) -> Optional[BoxScore]:
    """
    Build a BoxScore from an ESPN ``/summary`` payload.

    Returns None when the payload has no home/away competitors.
    """
    header = summary.get("header") or {}
    competitions: List[Dict] = header.get("competitions") or []
    if not competitions:
        return None
    competition = competitions[0]

    competitors = {c.get("homeAway"): c for c in competition.get("competitors", [])}
    if "home" not in competitors or "away" not in competitors:
        return None

    box_teams = {t.get("homeAway"): t for t in (summary.get("boxscore") or {}).get("teams", [])}
    return BoxScore(
        game_id=str(game_id or header.get("id") or competition.get("id")),
        date=competition.get("date"),
        away=_team_from_summary(competitors["away"], box_teams.get("away")),
        home=_team_from_summary(competitors["home"], box_teams.get("home")),
    )
