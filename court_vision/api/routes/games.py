"""
Game API routes.

Games are written by the ESPN scoreboard sync only; these endpoints are
read-only apart from the cached AI analysis.

Base path: /api/games
"""
from datetime import date
from typing import AsyncIterator, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from court_vision.api.serializers import game_to_dict, ok, pagination, play_to_dict
from court_vision.core.database import get_db
from court_vision.core.logging import get_logger
from court_vision.models import GameStatus
from court_vision.repositories import GameRepository, PlayRepository
from court_vision.services.ai import GameAnalysisService, box_score_from_summary
from court_vision.services.providers import ESPNApiService, ProviderError

logger = get_logger(__name__)

router = APIRouter(prefix="/api/games", tags=["games"])


async def get_espn_service() -> AsyncIterator[ESPNApiService]:
    """Per-request ESPN client, closed after the response."""
    service = ESPNApiService()
    try:
        yield service
    finally:
        await service.close()


def get_analysis_service() -> GameAnalysisService:
    return GameAnalysisService()


@router.get("")
async def list_games(
    status: Optional[GameStatus] = Query(None, description="SCHEDULED, LIVE, FINISHED, ..."),
    season: Optional[str] = Query(None, description="Season year, e.g. 2025"),
    team: Optional[str] = Query(None, description="ESPN team id or abbreviation"),
    game_date: Optional[date] = Query(None, alias="date", description="YYYY-MM-DD"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """List games, newest first."""
    games, total = GameRepository(db).search(
        status=status,
        season=season,
        team=team,
        on_date=game_date,
        limit=limit,
        offset=(page - 1) * limit,
    )
    return ok([game_to_dict(g) for g in games], pagination=pagination(page, limit, total))


@router.get("/live")
async def live_games(db: Session = Depends(get_db)):
    games = GameRepository(db).find_live()
    return ok([game_to_dict(g) for g in games], count=len(games))


@router.get("/today")
async def todays_games(db: Session = Depends(get_db)):
    """Games scheduled on the current UTC day."""
    games = GameRepository(db).find_on_date()
    return ok([game_to_dict(g) for g in games], count=len(games))


@router.get("/{game_id}")
async def get_game(
    game_id: str,
    include: Literal["teams", "full"] = Query("teams", description="'full' adds plays and play count"),
    db: Session = Depends(get_db)
):
    """
    Get one game by local id or ESPN event id.

    ``include=full`` adds the ten most recent plays with their tags.
    """
    game = GameRepository(db).find_by_identifier(game_id)
    if not game:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")

    data = game_to_dict(game)
    if include == "full":
        plays = PlayRepository(db)
        data["recentPlays"] = [play_to_dict(p) for p in plays.recent_for_game(game.id)]
        data["totalPlays"] = plays.count_for_game(game.id)
    return ok(data)


@router.get("/{game_id}/analysis")
async def get_game_analysis(
    game_id: str,
    db: Session = Depends(get_db),
    espn: ESPNApiService = Depends(get_espn_service),
    analysis_service: GameAnalysisService = Depends(get_analysis_service),
):
    """
    AI narrative analysis of a finished game.

    Falls back to a template analysis when OpenAI is not configured or
    unavailable; repeated requests return the cached result.
    """
    game = GameRepository(db).find_by_identifier(game_id)
    if not game:
        raise HTTPException(status_code=404, detail=f"Game {game_id} not found")
    if game.status != GameStatus.FINISHED:
        raise HTTPException(
            status_code=409,
            detail=f"Game {game_id} is {game.status.value}; analysis is only available for finished games",
        )

    try:
        summary = await espn.get_game_summary(game.external_id)
    except ProviderError as e:
        logger.error(f"Box score fetch failed for game {game.external_id}: {e}")
        raise HTTPException(status_code=502, detail="Unable to fetch box score from ESPN")

    box_score = box_score_from_summary(summary, game_id=game.id)
    if box_score is None:
        raise HTTPException(status_code=502, detail=f"ESPN summary for game {game.external_id} has no box score")

    analysis = await analysis_service.generate_analysis(box_score)
    return ok(analysis)
