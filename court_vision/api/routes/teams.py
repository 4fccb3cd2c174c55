"""
Team API routes.

Base path: /api/teams
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok, player_to_dict, team_statistic_to_dict, team_to_dict
from court_vision.core.database import get_db
from court_vision.repositories import PlayerRepository, TeamRepository

router = APIRouter(prefix="/api/teams", tags=["teams"])


def _get_team_or_404(repo: TeamRepository, team_id: str):
    team = repo.find_by_identifier(team_id)
    if not team:
        raise HTTPException(status_code=404, detail=f"Team {team_id} not found")
    return team


@router.get("")
async def list_teams(
    conference: Optional[str] = Query(None, description="East or West"),
    db: Session = Depends(get_db)
):
    """Active franchises (All-Star teams excluded), ordered by name."""
    teams = TeamRepository(db).find_active(conference=conference)
    return ok([team_to_dict(t) for t in teams], count=len(teams))


@router.get("/{team_id}")
async def get_team(team_id: str, db: Session = Depends(get_db)):
    """Get a team by local id, ESPN id or abbreviation, with its roster."""
    team = _get_team_or_404(TeamRepository(db), team_id)
    data = team_to_dict(team)
    data["roster"] = [player_to_dict(p) for p in PlayerRepository(db).find_by_team(team.external_id)]
    return ok(data)


@router.get("/{team_id}/statistics")
async def get_team_statistics(
    team_id: str,
    season: Optional[str] = Query(None),
    season_type: Optional[int] = Query(None, ge=1, le=3, description="1 pre, 2 regular, 3 post"),
    db: Session = Depends(get_db)
):
    """Season statistics grouped by category."""
    repo = TeamRepository(db)
    team = _get_team_or_404(repo, team_id)

    by_category = {}
    for stat in repo.statistics(team, season=season, season_type=season_type):
        by_category.setdefault(stat.category, []).append(team_statistic_to_dict(stat))

    return ok({"team": team_to_dict(team), "statistics": by_category})
