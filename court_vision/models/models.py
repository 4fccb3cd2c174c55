"""
Database models for the Court Vision API.

Teams, players and games mirror provider records and are written only by
sync jobs. Plays and play tags are written only by tagging requests.
"""
import enum
import uuid

from sqlalchemy import (
    Column, String, Float, Integer, DateTime, ForeignKey, Boolean, Text, Index,
    UniqueConstraint, JSON, Enum,
)
from sqlalchemy.orm import relationship, declarative_base

from court_vision.utils.timezone import utcnow

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class GameStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    FINISHED = "FINISHED"
    POSTPONED = "POSTPONED"
    CANCELLED = "CANCELLED"


class UserRole(str, enum.Enum):
    USER = "USER"
    ANALYST = "ANALYST"
    ADMIN = "ADMIN"


class Team(Base):
    """NBA team keyed by its ESPN id."""
    __tablename__ = "teams"

    id = Column(String(36), primary_key=True, default=new_id)
    external_id = Column(String(20), unique=True, nullable=False, index=True)  # ESPN team id
    uid = Column(String(100), nullable=True)
    slug = Column(String(100), nullable=True)
    abbreviation = Column(String(10), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    display_name = Column(String(150), nullable=True)
    short_display_name = Column(String(100), nullable=True)
    nickname = Column(String(100), nullable=True)
    city = Column(String(100), nullable=True)
    conference = Column(String(50), nullable=True, index=True)
    division = Column(String(50), nullable=True)
    primary_color = Column(String(10), nullable=True)
    alternate_color = Column(String(10), nullable=True)
    logo_url = Column(String(500), nullable=True)
    logo_dark_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_all_star = Column(Boolean, nullable=False, default=False)
    last_synced = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    home_games = relationship("Game", foreign_keys="Game.home_team_id", back_populates="home_team")
    away_games = relationship("Game", foreign_keys="Game.away_team_id", back_populates="away_team")
    statistics = relationship("TeamStatistic", back_populates="team", cascade="all, delete-orphan")


class Player(Base):
    """
    NBA player keyed by ESPN athlete id.

    ``team_external_id`` is a weak back-reference to ``Team.external_id``;
    athletes can reference teams the store has not synced yet.
    """
    __tablename__ = "players"

    external_id = Column(String(20), primary_key=True)  # ESPN athlete id
    uid = Column(String(100), nullable=True)
    name = Column(String(150), nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    full_name = Column(String(150), nullable=True)
    short_name = Column(String(100), nullable=True)
    position = Column(String(10), nullable=True, index=True)
    team_external_id = Column(String(20), nullable=True, index=True)
    jersey_number = Column(String(5), nullable=True)
    height = Column(String(20), nullable=True)  # display height, e.g. 6' 8"
    weight = Column(String(20), nullable=True)
    birth_date = Column(DateTime, nullable=True)
    age = Column(Integer, nullable=True)
    college = Column(String(150), nullable=True)
    experience = Column(Integer, nullable=True)
    draft_year = Column(Integer, nullable=True)
    draft_round = Column(Integer, nullable=True)
    draft_pick = Column(Integer, nullable=True)
    active = Column(Boolean, nullable=False, default=True, index=True)
    status = Column(String(50), nullable=True)
    headshot_url = Column(String(500), nullable=True)
    balldontlie_id = Column(Integer, unique=True, nullable=True)
    season_averages = Column(JSON, nullable=True)
    has_statistics = Column(Boolean, nullable=False, default=False)
    last_synced = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    team = relationship(
        "Team",
        primaryjoin="foreign(Player.team_external_id) == Team.external_id",
        viewonly=True,
        lazy="joined",
    )
    game_stats = relationship("PlayerGameStat", back_populates="player", cascade="all, delete-orphan")


class Game(Base):
    """NBA game keyed by ESPN event id."""
    __tablename__ = "games"

    id = Column(String(36), primary_key=True, default=new_id)
    external_id = Column(String(20), unique=True, nullable=False, index=True)  # ESPN event id
    date = Column(DateTime, nullable=False, index=True)
    home_team_id = Column(String(20), ForeignKey("teams.external_id"), nullable=False, index=True)
    away_team_id = Column(String(20), ForeignKey("teams.external_id"), nullable=False, index=True)
    home_score = Column(Integer, nullable=True)
    away_score = Column(Integer, nullable=True)
    status = Column(Enum(GameStatus, native_enum=False, length=20), nullable=False,
                    default=GameStatus.SCHEDULED, index=True)
    season = Column(String(10), nullable=True, index=True)
    venue = Column(String(200), nullable=True)
    last_synced = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    home_team = relationship("Team", foreign_keys=[home_team_id], back_populates="home_games")
    away_team = relationship("Team", foreign_keys=[away_team_id], back_populates="away_games")
    plays = relationship("Play", back_populates="game", order_by="Play.created_at")
    player_stats = relationship("PlayerGameStat", back_populates="game", cascade="all, delete-orphan")


class Tag(Base):
    """
    Taxonomy entry attachable to a play.

    ``triggers`` and ``suggestions`` are hint data for the tagging UI and
    next-tag fallback, never enforced.
    """
    __tablename__ = "tags"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), unique=True, nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    subcategory = Column(String(50), nullable=True, index=True)
    description = Column(Text, nullable=True)
    icon = Column(String(20), nullable=True)
    color = Column(String(20), nullable=True)
    triggers = Column(JSON, nullable=True)
    suggestions = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    play_tags = relationship("PlayTag", back_populates="tag")


class User(Base):
    """Account used as play attribution."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(100), nullable=True)
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False, default=UserRole.USER)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    plays = relationship("Play", back_populates="created_by")


class Play(Base):
    """One recorded game event."""
    __tablename__ = "plays"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    quarter = Column(Integer, nullable=True)
    game_time = Column(String(10), nullable=True)  # game clock, e.g. "7:42"
    description = Column(Text, nullable=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    game = relationship("Game", back_populates="plays")
    created_by = relationship("User", back_populates="plays")
    play_tags = relationship("PlayTag", back_populates="play", cascade="all, delete-orphan",
                             order_by="PlayTag.created_at")


class PlayTag(Base):
    """Association of a tag (plus optional player, team and context) to a play."""
    __tablename__ = "play_tags"

    id = Column(String(36), primary_key=True, default=new_id)
    play_id = Column(String(36), ForeignKey("plays.id"), nullable=False, index=True)
    tag_id = Column(String(36), ForeignKey("tags.id"), nullable=False, index=True)
    player_id = Column(String(20), ForeignKey("players.external_id"), nullable=True, index=True)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=True, index=True)
    context = Column(JSON, nullable=True)
    confidence = Column(Float, nullable=False, default=1.0)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    play = relationship("Play", back_populates="play_tags")
    tag = relationship("Tag", back_populates="play_tags")
    player = relationship("Player")
    team = relationship("Team")

    __table_args__ = (
        Index("ix_play_tags_player_created", "player_id", "created_at"),
        Index("ix_play_tags_team_created", "team_id", "created_at"),
    )


class PlayerGameStat(Base):
    """Per-game box score line for a player."""
    __tablename__ = "player_game_stats"

    id = Column(String(36), primary_key=True, default=new_id)
    game_id = Column(String(36), ForeignKey("games.id"), nullable=False, index=True)
    player_id = Column(String(20), ForeignKey("players.external_id"), nullable=False, index=True)
    team_external_id = Column(String(20), nullable=True)
    minutes = Column(Integer, nullable=True)
    points = Column(Integer, nullable=True)
    rebounds = Column(Integer, nullable=True)
    assists = Column(Integer, nullable=True)
    steals = Column(Integer, nullable=True)
    blocks = Column(Integer, nullable=True)
    turnovers = Column(Integer, nullable=True)
    fouls = Column(Integer, nullable=True)
    field_goals_made = Column(Integer, nullable=True)
    field_goals_attempted = Column(Integer, nullable=True)
    three_pointers_made = Column(Integer, nullable=True)
    three_pointers_attempted = Column(Integer, nullable=True)
    free_throws_made = Column(Integer, nullable=True)
    free_throws_attempted = Column(Integer, nullable=True)
    plus_minus = Column(Integer, nullable=True)
    last_synced = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    game = relationship("Game", back_populates="player_stats")
    player = relationship("Player", back_populates="game_stats")

    __table_args__ = (
        UniqueConstraint("game_id", "player_id", name="uq_player_game_stats_game_player"),
    )


class TeamStatistic(Base):
    """One season statistic row for a team (category + stat name)."""
    __tablename__ = "team_statistics"

    id = Column(String(36), primary_key=True, default=new_id)
    team_id = Column(String(36), ForeignKey("teams.id"), nullable=False, index=True)
    season = Column(String(10), nullable=False)
    season_type = Column(Integer, nullable=False, default=2)  # ESPN: 1 pre, 2 regular, 3 post
    category = Column(String(50), nullable=False)
    stat_name = Column(String(100), nullable=False)
    display_name = Column(String(150), nullable=True)
    abbreviation = Column(String(20), nullable=True)
    value = Column(Float, nullable=True)
    display_value = Column(String(50), nullable=True)
    per_game_value = Column(Float, nullable=True)
    last_synced = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    team = relationship("Team", back_populates="statistics")

    __table_args__ = (
        UniqueConstraint("team_id", "season", "season_type", "category", "stat_name",
                         name="uq_team_statistics_key"),
    )
