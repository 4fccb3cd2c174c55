"""
Database models.

Usage:
    from court_vision.models import Team, Player, Game, Play, PlayTag, Tag
"""

from court_vision.models.models import (
    Base,
    GameStatus,
    UserRole,
    Team,
    Player,
    Game,
    Tag,
    User,
    Play,
    PlayTag,
    PlayerGameStat,
    TeamStatistic,
)

__all__ = [
    "Base",
    "GameStatus",
    "UserRole",
    "Team",
    "Player",
    "Game",
    "Tag",
    "User",
    "Play",
    "PlayTag",
    "PlayerGameStat",
    "TeamStatistic",
]
