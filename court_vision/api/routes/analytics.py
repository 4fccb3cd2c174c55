"""
Analytics API routes.

All endpoints are read-only aggregations over tagged plays. Unknown
players or teams yield empty results rather than errors.

Base path: /api/analytics
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok
from court_vision.core.database import get_db
from court_vision.services.analytics import (
    DecisionQualityService, NextTagService, PatternService, ScoutingService, SuggestionService,
)

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/game-context/{game_id}")
async def game_context(game_id: str, db: Session = Depends(get_db)):
    """Game header, ten most recent plays and the top tags so far."""
    context = PatternService(db).game_context(game_id)
    if context is None:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    return ok(context)


@router.get("/suggestions")
async def suggestions(
    game_id: Optional[str] = Query(None),
    player_id: Optional[str] = Query(None),
    team_id: Optional[str] = Query(None),
    quarter: Optional[int] = Query(None, ge=1, le=10),
    game_time: Optional[str] = Query(None, description="Game clock, e.g. 7:42"),
    db: Session = Depends(get_db)
):
    """Up to five tagging suggestions, highest confidence first."""
    return ok(SuggestionService(db).suggestions(
        game_id=game_id,
        player_id=player_id,
        team_id=team_id,
        quarter=quarter,
        game_time=game_time,
    ))


@router.get("/player-patterns/{player_id}")
async def player_patterns(
    player_id: str,
    game_id: Optional[str] = Query(None),
    days: Optional[int] = Query(None, ge=1, le=365, description="Look-back window"),
    db: Session = Depends(get_db)
):
    return ok(PatternService(db).player_patterns(player_id, game_id=game_id, days=days))


@router.get("/team-tendencies/{team_id}")
async def team_tendencies(
    team_id: str,
    game_id: Optional[str] = Query(None),
    days: Optional[int] = Query(None, ge=1, le=365, description="Look-back window"),
    db: Session = Depends(get_db)
):
    return ok(PatternService(db).team_tendencies(team_id, game_id=game_id, days=days))


@router.get("/decision-quality/{player_id}")
async def decision_quality(
    player_id: str,
    game_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    """Grade the player's tagged sequences A-D."""
    return ok(DecisionQualityService(db).decision_quality(player_id, game_id=game_id))


@router.get("/defensive-scouting/{player_id}")
async def defensive_scouting(
    player_id: str,
    game_id: Optional[str] = Query(None),
    db: Session = Depends(get_db)
):
    return ok(ScoutingService(db).defensive_scouting(player_id, game_id=game_id))


@router.get("/next-tag-suggestions")
async def next_tag_suggestions(
    tag: Optional[str] = Query(None, description="Tag name just applied"),
    limit: int = Query(3, ge=1, le=10),
    db: Session = Depends(get_db)
):
    """Most likely follow-up tags, from history or the tag's static suggestions."""
    if not tag or not tag.strip():
        raise HTTPException(status_code=400, detail="Query parameter 'tag' is required")
    return ok(NextTagService(db).next_tag_suggestions(tag.strip(), limit=limit))
