"""
Tagged play routes.

Base path: /api/plays
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import ok, pagination, play_to_dict
from court_vision.core.database import get_db
from court_vision.repositories import GameRepository, PlayRepository
from court_vision.services.tagging import PlayCreate, PlayService, PlayValidationError

router = APIRouter(prefix="/api/plays", tags=["plays"])


@router.get("")
async def list_plays(
    game_id: Optional[str] = Query(None, description="Local game id or ESPN event id"),
    player_id: Optional[str] = Query(None, description="ESPN athlete id"),
    tag_id: Optional[str] = Query(None),
    team_id: Optional[str] = Query(None),
    include: Optional[Literal["game"]] = Query(None, description="'game' embeds the game"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """
    List plays, newest first.

    Player, tag and team filters match plays with at least one tag carrying
    that value.
    """
    if game_id:
        game = GameRepository(db).find_by_identifier(game_id)
        game_id = game.id if game else game_id

    include_game = include == "game"
    plays, total = PlayRepository(db).search(
        game_id=game_id,
        player_id=player_id,
        tag_id=tag_id,
        team_id=team_id,
        include_game=include_game,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return ok([play_to_dict(p, include_game=include_game) for p in plays],
              pagination=pagination(page, limit, total))


@router.get("/{play_id}")
async def get_play(play_id: str, db: Session = Depends(get_db)):
    play = PlayRepository(db).find_with_tags(play_id)
    if not play:
        raise HTTPException(status_code=404, detail=f"Play {play_id} not found")
    return ok(play_to_dict(play, include_game=True))


@router.post("", status_code=201)
async def create_play(payload: PlayCreate, db: Session = Depends(get_db)):
    """
    Record a play with its ordered tags.

    The play and every tag are written together or not at all.
    """
    try:
        play = PlayService(db).create_play(payload)
    except PlayValidationError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return ok(play_to_dict(play, include_game=True))
