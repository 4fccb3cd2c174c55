"""Shared pytest fixtures for Court Vision tests."""
import os
import sys
from pathlib import Path
from datetime import datetime, timedelta
from typing import Dict, Generator, List, Optional

# Settings are read at import time; point them at an in-memory database
# before anything from court_vision is imported.
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["LOG_JSON"] = "false"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from court_vision.models import Base, Game, GameStatus, Play, PlayTag, Player, Tag, Team, User
from court_vision.services.ai import reset_analysis_state
from court_vision.services.tagging import seed_tags

BASE_TIME = datetime(2025, 1, 15, 20, 0, 0)


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestSessionLocal = sessionmaker(bind=engine, autoflush=False)
    session = TestSessionLocal()

    yield session

    session.close()
    engine.dispose()


@pytest.fixture(autouse=True)
def _reset_analysis_cache():
    """The AI analysis cache and cooldowns are process-wide."""
    reset_analysis_state()
    yield
    reset_analysis_state()


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def sample_teams(db_session: Session) -> Dict[str, Team]:
    teams = {
        "BOS": Team(external_id="2", abbreviation="BOS", name="Boston Celtics",
                    display_name="Boston Celtics", city="Boston", conference="East"),
        "LAL": Team(external_id="13", abbreviation="LAL", name="Los Angeles Lakers",
                    display_name="Los Angeles Lakers", city="Los Angeles", conference="West"),
        "GS": Team(external_id="9", abbreviation="GS", name="Golden State Warriors",
                   display_name="Golden State Warriors", city="Golden State", conference="West"),
    }
    db_session.add_all(teams.values())
    db_session.commit()
    return teams


@pytest.fixture
def sample_game(db_session: Session, sample_teams) -> Game:
    """A finished BOS @ LAL game."""
    game = Game(
        external_id="401584700",
        date=BASE_TIME,
        home_team_id="13",
        away_team_id="2",
        home_score=112,
        away_score=108,
        status=GameStatus.FINISHED,
        season="2025",
        venue="Crypto.com Arena",
    )
    db_session.add(game)
    db_session.commit()
    return game


@pytest.fixture
def scheduled_game(db_session: Session, sample_teams) -> Game:
    game = Game(
        external_id="401584701",
        date=BASE_TIME + timedelta(days=1),
        home_team_id="2",
        away_team_id="9",
        status=GameStatus.SCHEDULED,
        season="2025",
    )
    db_session.add(game)
    db_session.commit()
    return game


@pytest.fixture
def sample_players(db_session: Session, sample_teams) -> Dict[str, Player]:
    players = {
        "tatum": Player(external_id="4065648", name="Jayson Tatum", first_name="Jayson",
                        last_name="Tatum", position="SF", team_external_id="2", active=True),
        "brown": Player(external_id="3917376", name="Jaylen Brown", first_name="Jaylen",
                        last_name="Brown", position="SG", team_external_id="2", active=True),
        "james": Player(external_id="1966", name="LeBron James", first_name="LeBron",
                        last_name="James", position="SF", team_external_id="13", active=True),
    }
    db_session.add_all(players.values())
    db_session.commit()
    return players


@pytest.fixture
def sample_tags(db_session: Session) -> Dict[str, Tag]:
    """The default taxonomy, by name."""
    seed_tags(db_session)
    return {tag.name: tag for tag in db_session.query(Tag).all()}


@pytest.fixture
def sample_user(db_session: Session) -> User:
    user = User(email="analyst@example.com", username="analyst")
    db_session.add(user)
    db_session.commit()
    return user


def create_tagged_play(
    db: Session,
    game: Game,
    tags: Dict[str, Tag],
    actions: List[str],
    player_id: Optional[str] = None,
    team_id: Optional[str] = None,
    quarter: Optional[int] = 1,
    created_at: Optional[datetime] = None,
    game_time: str = "10:00",
) -> Play:
    """
    Insert a play whose tags follow ``actions`` in order.

    Each tag gets ``context.sequence`` 1..n and a creation time one second
    after the previous one.
    """
    created_at = created_at or BASE_TIME
    play = Play(game_id=game.id, quarter=quarter, game_time=game_time, created_at=created_at)
    for index, action in enumerate(actions, start=1):
        play.play_tags.append(PlayTag(
            tag_id=tags[action].id,
            player_id=player_id,
            team_id=team_id,
            context={"action": action, "sequence": index, "totalActions": len(actions)},
            created_at=created_at + timedelta(seconds=index - 1),
        ))
    db.add(play)
    db.commit()
    return play


# =============================================================================
# FASTAPI TEST CLIENT FIXTURE
# =============================================================================

@pytest.fixture(scope="function")
def test_client(db_session):
    """
    FastAPI TestClient bound to the per-test database.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/games")
            assert response.status_code == 200
    """
    from fastapi.testclient import TestClient
    from court_vision.main import app
    from court_vision.core.database import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    # No context manager: the lifespan would run init_db and the scheduler
    client = TestClient(app)
    yield client

    app.dependency_overrides.clear()
