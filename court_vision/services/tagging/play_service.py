"""
Play creation.

A play and all of its tags are written in one transaction: either every
PlayTag row lands with the play or nothing does.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.core import metrics
from court_vision.models import Play, PlayTag, User
from court_vision.repositories import (
    GameRepository, PlayRepository, PlayerRepository, TagRepository, TeamRepository,
)
from court_vision.repositories.base import BaseRepository
from court_vision.services.tagging.quick_actions import is_advised_transition

logger = get_logger(__name__)


class _CamelModel(BaseModel):
    # Accept both snake_case and the camelCase the tagging UI sends
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlayTagContext(_CamelModel):
    """Where a tag sits inside the tagged sequence."""
    action: str = Field(min_length=1)
    sequence: int = Field(ge=1)
    total_actions: int = Field(ge=1)
    coverage_type: Optional[str] = None
    possession_type: Optional[str] = None

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class PlayTagInput(_CamelModel):
    tag_id: str
    player_id: Optional[str] = None
    team_id: Optional[str] = None
    context: PlayTagContext
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)


class PlayCreate(_CamelModel):
    game_id: str
    quarter: Optional[int] = Field(default=None, ge=1, le=10)
    game_time: Optional[str] = None
    description: Optional[str] = None
    created_by_id: Optional[str] = None
    tags: List[PlayTagInput] = Field(default_factory=list)


class PlayValidationError(ValueError):
    """Request refers to rows that do not exist."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PlayService:
    """
    Validates and persists tagged plays.

    Usage:
        play = PlayService(db).create_play(PlayCreate(game_id=..., tags=[...]))
    """

    def __init__(self, db: Session):
        self.db = db
        self.games = GameRepository(db)
        self.tags = TagRepository(db)
        self.players = PlayerRepository(db)
        self.teams = TeamRepository(db)
        self.plays = PlayRepository(db)
        self.users = BaseRepository(User, db)

    def _validate(self, payload: PlayCreate):
        game = self.games.find_by_identifier(payload.game_id)
        if game is None:
            raise PlayValidationError(f"Game {payload.game_id} not found", status_code=404)

        tags = self.tags.find_many(t.tag_id for t in payload.tags)
        missing_tags = sorted({t.tag_id for t in payload.tags} - set(tags))
        if missing_tags:
            raise PlayValidationError(f"Unknown tag ids: {', '.join(missing_tags)}")

        if payload.created_by_id and not self.users.exists(payload.created_by_id):
            raise PlayValidationError(f"User {payload.created_by_id} not found")

        for tag_input in payload.tags:
            if tag_input.player_id and not self.players.exists(tag_input.player_id):
                raise PlayValidationError(f"Player {tag_input.player_id} not found")
            if tag_input.team_id and not self.teams.exists(tag_input.team_id):
                raise PlayValidationError(f"Team {tag_input.team_id} not found")

        return game, tags

    def _log_unadvised_transitions(self, payload: PlayCreate, tags) -> None:
        ordered = sorted(payload.tags, key=lambda t: t.context.sequence)
        names = [tags[t.tag_id].name for t in ordered]
        for previous, action in zip(names, names[1:]):
            if not is_advised_transition(previous, action):
                logger.debug(f"Unadvised transition '{previous}' -> '{action}' recorded")

    def create_play(self, payload: PlayCreate) -> Play:
        """
        Create a play and its tags atomically.

        Raises:
            PlayValidationError: unknown game (404) or unknown tag, user,
                player or team (400); nothing is written
            SQLAlchemyError: on database failure, after rollback
        """
        game, tags = self._validate(payload)
        self._log_unadvised_transitions(payload, tags)

        try:
            play = self.plays.create(
                game_id=game.id,
                quarter=payload.quarter,
                game_time=payload.game_time,
                description=payload.description,
                created_by_id=payload.created_by_id,
            )
            for tag_input in payload.tags:
                play.play_tags.append(PlayTag(
                    tag_id=tag_input.tag_id,
                    player_id=tag_input.player_id,
                    team_id=tag_input.team_id,
                    context=tag_input.context.to_json(),
                    confidence=tag_input.confidence,
                ))
            self.plays.save()
        except SQLAlchemyError:
            self.plays.rollback()
            logger.exception(f"Failed to create play for game {game.id}")
            raise

        metrics.plays_created_total.inc()
        logger.info(f"Created play {play.id} with {len(payload.tags)} tags for game {game.external_id}")
        return self.plays.find_with_tags(play.id)
