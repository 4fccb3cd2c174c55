"""
Player API routes.

Base path: /api/players
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok, pagination, player_to_dict
from court_vision.core.database import get_db
from court_vision.repositories import PlayerRepository

router = APIRouter(prefix="/api/players", tags=["players"])


@router.get("")
async def list_players(
    search: Optional[str] = Query(None, min_length=2, description="Name fragment"),
    team: Optional[str] = Query(None, description="ESPN team id"),
    position: Optional[str] = Query(None, description="Position abbreviation, e.g. PG"),
    active: Optional[bool] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    db: Session = Depends(get_db)
):
    """List players ordered by name."""
    players, total = PlayerRepository(db).search(
        search=search,
        team_external_id=team,
        position=position,
        active=active,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return ok([player_to_dict(p) for p in players], pagination=pagination(page, limit, total))


@router.get("/{external_id}")
async def get_player(external_id: str, db: Session = Depends(get_db)):
    """Get a player by ESPN athlete id, with their team."""
    player = PlayerRepository(db).find_by_external_id(external_id)
    if not player:
        raise HTTPException(status_code=404, detail=f"Player {external_id} not found")
    return ok(player_to_dict(player, include_team=True))
