"""Tests for player patterns, team tendencies, game context and suggestions."""
import sys
from datetime import timedelta
from pathlib import Path

from sqlalchemy.orm import Session

# Import helpers from conftest
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import BASE_TIME, create_tagged_play
from court_vision.services.analytics import PatternService, SuggestionService


def _single_tag_plays(db, game, tags, actions, **kwargs):
    """One play per action, one minute apart, oldest first."""
    for minute, action in enumerate(actions):
        create_tagged_play(db, game, tags, [action],
                           created_at=BASE_TIME + timedelta(minutes=minute), **kwargs)


class TestPlayerPatterns:

    def test_frequency_and_percentage(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _single_tag_plays(db_session, sample_game, sample_tags,
                          ["Isolation", "Isolation", "Post Up"], player_id=tatum)

        result = PatternService(db_session).player_patterns(tatum)

        assert result["totalPlays"] == 3
        assert result["mostCommonActions"] == [
            {"tag": "Isolation", "count": 2, "percentage": 66.7},
            {"tag": "Post Up", "count": 1, "percentage": 33.3},
        ]
        assert result["tagCounts"] == {"Isolation": 2, "Post Up": 1}

    def test_ties_keep_most_recent_first(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _single_tag_plays(db_session, sample_game, sample_tags, ["Post Up", "Isolation"], player_id=tatum)

        result = PatternService(db_session).player_patterns(tatum)

        assert [entry["tag"] for entry in result["mostCommonActions"]] == ["Isolation", "Post Up"]

    def test_top_n_and_recent_plays(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _single_tag_plays(db_session, sample_game, sample_tags,
                          ["Isolation", "Post Up", "Transition", "Steal", "Block", "3-Pointer"],
                          player_id=tatum)

        result = PatternService(db_session).player_patterns(tatum)

        assert len(result["mostCommonActions"]) == 3
        assert len(result["recentPlays"]) == 5
        assert result["recentPlays"][0]["tag"] == "3-Pointer"

    def test_quarter_breakdown(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        create_tagged_play(db_session, sample_game, sample_tags, ["Isolation"], player_id=tatum, quarter=1)
        create_tagged_play(db_session, sample_game, sample_tags, ["Isolation"], player_id=tatum, quarter=4,
                           created_at=BASE_TIME + timedelta(minutes=1))
        create_tagged_play(db_session, sample_game, sample_tags, ["Post Up"], player_id=tatum, quarter=None,
                           created_at=BASE_TIME + timedelta(minutes=2))

        result = PatternService(db_session).player_patterns(tatum)

        assert result["quarterPatterns"] == {
            "1": {"Isolation": 1},
            "4": {"Isolation": 1},
            "unknown": {"Post Up": 1},
        }

    def test_unknown_player_is_empty(self, db_session: Session):
        result = PatternService(db_session).player_patterns("nobody")

        assert result["totalPlays"] == 0
        assert result["mostCommonActions"] == []
        assert result["recentPlays"] == []


class TestTeamTendencies:

    def test_team_by_abbreviation(self, db_session: Session, sample_game, sample_tags, sample_teams):
        bos = sample_teams["BOS"].id
        _single_tag_plays(db_session, sample_game, sample_tags,
                          ["Pick and Roll", "Pick and Roll", "Transition"], team_id=bos)

        result = PatternService(db_session).team_tendencies("BOS")

        assert result["totalPlays"] == 3
        assert result["mostCommonPlays"][0] == {"tag": "Pick and Roll", "count": 2, "percentage": 66.7}


class TestGameContext:

    def test_unknown_game_returns_none(self, db_session: Session):
        assert PatternService(db_session).game_context("missing") is None

    def test_context_by_external_id(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        for minute in range(12):
            create_tagged_play(db_session, sample_game, sample_tags, ["Isolation", "Step Back"],
                               player_id=tatum, created_at=BASE_TIME + timedelta(minutes=minute))

        context = PatternService(db_session).game_context(sample_game.external_id)

        assert context["game"]["id"] == sample_game.id
        assert context["game"]["homeTeam"]["abbreviation"] == "LAL"
        assert context["totalPlays"] == 12
        assert len(context["recentPlays"]) == 10
        assert [t["name"] for t in context["recentPlays"][0]["tags"]] == ["Isolation", "Step Back"]
        assert context["recentPlays"][0]["tags"][0]["player"] == "Jayson Tatum"
        assert {"tag": "Isolation", "count": 12} in context["mostCommonInGame"]


class TestSuggestions:

    def test_no_data_yields_no_suggestions(self, db_session: Session):
        result = SuggestionService(db_session).suggestions(player_id="nobody")

        assert result["suggestions"] == []
        assert result["totalPlaysAnalyzed"] == 0

    def test_heuristics_sorted_by_confidence(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _single_tag_plays(db_session, sample_game, sample_tags,
                          ["Isolation", "Step Back", "Isolation", "Step Back", "Isolation"],
                          player_id=tatum)

        result = SuggestionService(db_session).suggestions(
            game_id=sample_game.id, player_id=tatum, quarter=1, game_time="5:00"
        )

        types = [s["type"] for s in result["suggestions"]]
        assert types == ["next_action_prediction", "player_tendency", "quarter_pattern"]

        next_action, tendency, quarter = result["suggestions"]
        assert next_action["action"] == "Step Back"
        assert next_action["message"] == 'After "Isolation", this player typically follows with "Step Back"'
        assert next_action["confidence"] == 0.95
        assert tendency["action"] == "Isolation"
        assert tendency["confidence"] == 0.62
        assert "Jayson Tatum" in tendency["message"]
        assert quarter["confidence"] == 0.48
        assert result["totalPlaysAnalyzed"] == 5
        assert len(result["recentContext"]) == 5

    def test_next_action_message_names_the_game_scope(self, db_session: Session, sample_game, sample_tags,
                                                     sample_players):
        _single_tag_plays(db_session, sample_game, sample_tags,
                          ["Isolation", "Step Back", "Isolation", "Step Back", "Isolation"],
                          player_id=sample_players["tatum"].external_id)

        result = SuggestionService(db_session).suggestions(game_id=sample_game.id)

        next_action = result["suggestions"][0]
        assert next_action["type"] == "next_action_prediction"
        assert next_action["message"] == 'After "Isolation", plays in this game typically continue with "Step Back"'

    def test_defensive_adjustment_warning(self, db_session: Session, sample_game, sample_tags):
        _single_tag_plays(db_session, sample_game, sample_tags, ["Steal", "Steal", "Steal"])

        result = SuggestionService(db_session).suggestions(
            game_id=sample_game.id, now=BASE_TIME + timedelta(minutes=5)
        )

        warning = next(s for s in result["suggestions"] if s["type"] == "defensive_adjustment")
        assert warning["warning"] is True
        assert warning["confidence"] == 0.9
