"""
Repository layer for data access.

Usage:
    from court_vision.repositories import TeamRepository, GameRepository
    from court_vision.core.database import SessionLocal

    db = SessionLocal()
    team = TeamRepository(db).find_by_external_id("2")
    db.close()
"""

from court_vision.repositories.base import BaseRepository
from court_vision.repositories.team_repository import TeamRepository
from court_vision.repositories.player_repository import PlayerRepository
from court_vision.repositories.game_repository import GameRepository
from court_vision.repositories.tag_repository import TagRepository
from court_vision.repositories.play_repository import PlayRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "PlayerRepository",
    "GameRepository",
    "TagRepository",
    "PlayRepository",
]
