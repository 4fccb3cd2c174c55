"""Tests for default tag seeding."""
from sqlalchemy.orm import Session

from court_vision.models import Tag
from court_vision.services.tagging import DEFAULT_TAGS, seed_tags, static_suggestions
from court_vision.services.tagging.quick_actions import QUICK_ACTION_NAMES


def test_seed_creates_every_default_tag(db_session: Session):
    counts = seed_tags(db_session)

    assert counts["created"] == len(DEFAULT_TAGS)
    assert db_session.query(Tag).count() == len(DEFAULT_TAGS)

    isolation = db_session.query(Tag).filter_by(name="Isolation").one()
    assert isolation.category == "OFFENSIVE_ACTION"
    assert isolation.triggers["one_on_one"] is True
    assert isolation.suggestions == ["Drive to Basket", "Pull Up Shot", "Step Back", "Fade Away"]


def test_seed_is_idempotent(db_session: Session):
    seed_tags(db_session)
    ids_before = {t.name: t.id for t in db_session.query(Tag).all()}

    counts = seed_tags(db_session)

    assert counts == {"created": 0, "updated": 0, "unchanged": len(DEFAULT_TAGS)}
    assert {t.name: t.id for t in db_session.query(Tag).all()} == ids_before


def test_seed_restores_edited_tag(db_session: Session):
    seed_tags(db_session)
    tag = db_session.query(Tag).filter_by(name="Block").one()
    tag.color = "#000000"
    db_session.commit()

    counts = seed_tags(db_session)

    assert counts["updated"] == 1
    db_session.refresh(tag)
    assert tag.color == "#FF8C42"


def test_every_quick_action_is_a_tag():
    names = {t.name for t in DEFAULT_TAGS}
    assert QUICK_ACTION_NAMES <= names


def test_static_suggestions():
    assert static_suggestions("Calling for Screen") == [
        "Pick and Roll", "Pick and Pop", "Screen Mismatch", "Screen Rejection",
    ]
    assert static_suggestions("Moonwalk") == []
