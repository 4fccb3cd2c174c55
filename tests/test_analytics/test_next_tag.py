"""Tests for next-tag suggestions."""
import sys
from datetime import timedelta
from pathlib import Path

from sqlalchemy.orm import Session

# Import helpers from conftest
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import BASE_TIME, create_tagged_play
from court_vision.services.analytics import NextTagService


class TestNextTagSuggestions:

    def test_history_based(self, db_session: Session, sample_game, sample_tags):
        for minute, actions in enumerate([
            ["Isolation", "Step Back"],
            ["Isolation", "Step Back"],
            ["Isolation", "Drive to Basket"],
            ["Post Up", "Step Back"],
        ]):
            create_tagged_play(db_session, sample_game, sample_tags, actions,
                               created_at=BASE_TIME + timedelta(minutes=minute))

        result = NextTagService(db_session).next_tag_suggestions("Isolation")

        assert result["source"] == "history"
        assert result["totalTransitions"] == 3
        assert result["suggestions"] == [
            {"name": "Step Back", "count": 2, "confidence": 0.667},
            {"name": "Drive to Basket", "count": 1, "confidence": 0.333},
        ]

    def test_tag_name_ignores_case(self, db_session: Session, sample_game, sample_tags):
        for minute in range(2):
            create_tagged_play(db_session, sample_game, sample_tags, ["Isolation", "Step Back"],
                               created_at=BASE_TIME + timedelta(minutes=minute))

        result = NextTagService(db_session).next_tag_suggestions("isolation")

        assert result["tag"] == "Isolation"
        assert result["source"] == "history"
        assert result["suggestions"] == [{"name": "Step Back", "count": 2, "confidence": 1.0}]

    def test_limit(self, db_session: Session, sample_game, sample_tags):
        for minute, follow_up in enumerate(["Step Back", "Fade Away", "Pull Up Shot", "Drive to Basket"]):
            create_tagged_play(db_session, sample_game, sample_tags, ["Isolation", follow_up],
                               created_at=BASE_TIME + timedelta(minutes=minute))

        result = NextTagService(db_session).next_tag_suggestions("Isolation", limit=3)

        assert len(result["suggestions"]) == 3

    def test_static_fallback_matches_tag_suggestions(self, db_session: Session, sample_tags):
        result = NextTagService(db_session).next_tag_suggestions("Isolation")

        assert result["source"] == "static"
        assert result["totalTransitions"] == 0
        assert [s["name"] for s in result["suggestions"]] == sample_tags["Isolation"].suggestions
        assert all(s["confidence"] is None for s in result["suggestions"])

    def test_taxonomy_fallback_without_seeded_tags(self, db_session: Session):
        result = NextTagService(db_session).next_tag_suggestions("Calling for Screen")

        assert [s["name"] for s in result["suggestions"]] == [
            "Pick and Roll", "Pick and Pop", "Screen Mismatch", "Screen Rejection",
        ]

    def test_unknown_tag_has_no_suggestions(self, db_session: Session, sample_tags):
        result = NextTagService(db_session).next_tag_suggestions("Moonwalk")

        assert result["source"] == "static"
        assert result["suggestions"] == []
