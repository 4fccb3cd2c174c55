"""Tests for sequence grading."""
import sys
from datetime import timedelta
from pathlib import Path

from sqlalchemy.orm import Session

# Import helpers from conftest
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import BASE_TIME, create_tagged_play
from court_vision.services.analytics import DecisionQualityService
from court_vision.services.analytics.decision_quality import (
    DECISION_QUALITY,
    Quality,
    SEQUENCE_QUALITY,
    UNDEFINED_REASON,
    classify,
    grade_for,
)


def _plays(db, game, tags, sequences, player_id):
    for minute, actions in enumerate(sequences):
        create_tagged_play(db, game, tags, actions, player_id=player_id,
                           created_at=BASE_TIME + timedelta(minutes=minute))


class TestClassify:

    def test_short_sequence_is_ungraded(self):
        assert classify(["Isolation"]) is None
        assert classify([]) is None

    def test_pair_lookup(self):
        assert classify(["Double Teamed", "Pass Out"]) == (
            Quality.EXCELLENT, "Makes the right play, finds open teammate", True,
        )

    def test_full_sequence_wins_over_opening_pair(self):
        quality, reason, defined = classify(["Calling for Screen", "Screen Rejection", "Turnover"])
        assert quality == Quality.RISKY
        assert reason == "Wastes screen and turns it over"
        assert defined

    def test_unlisted_long_sequence_falls_back_to_opening_pair(self):
        quality, _, defined = classify(["Isolation", "Step Back", "Made Shot"])
        assert quality == Quality.GOOD
        assert defined

    def test_unlisted_pair_is_neutral(self):
        assert classify(["Steal", "Isolation"]) == (Quality.NEUTRAL, UNDEFINED_REASON, False)

    def test_shot_results_shared_by_jumpers(self):
        for shot in ("Pull Up Shot", "Step Back", "Fade Away"):
            assert DECISION_QUALITY[shot]["Made Shot"][0] == Quality.EXCELLENT

    def test_multi_step_table_only_holds_long_sequences(self):
        assert all(len(key.split(" → ")) >= 3 for key in SEQUENCE_QUALITY)


class TestGrades:

    def test_thresholds(self):
        assert grade_for(4.0) == "A"
        assert grade_for(3.5) == "A"
        assert grade_for(3.49) == "B"
        assert grade_for(3.0) == "B"
        assert grade_for(2.5) == "C"
        assert grade_for(2.49) == "D"
        assert grade_for(1.0) == "D"


class TestDecisionQualityService:

    def test_no_data_is_not_graded(self, db_session: Session):
        result = DecisionQualityService(db_session).decision_quality("nobody")

        overall = result["decisionAnalysis"]["overallQuality"]
        assert overall == {"averageScore": 0, "totalDecisions": 0, "grade": "N/A"}
        assert result["decisionAnalysis"]["totalSequences"] == 0
        assert result["recentSequences"] == []

    def test_grades_and_buckets(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [
            ["Double Teamed", "Pass Out"],                                # excellent, 4
            ["Isolation", "Pass Out"],                                    # questionable, 2
            ["Calling for Screen", "Pick and Roll", "Drive to Basket"],   # excellent, 4
            ["Block"],                                                    # ungraded
        ], tatum)

        result = DecisionQualityService(db_session).decision_quality(tatum)
        analysis = result["decisionAnalysis"]

        assert analysis["totalSequences"] == 4
        assert analysis["overallQuality"] == {"averageScore": 3.1, "totalDecisions": 4, "grade": "B"}
        assert analysis["defensiveResponses"]["Pass Out"]["quality"] == "excellent"
        assert analysis["offensiveDecisions"]["Pass Out"]["quality"] == "questionable"
        assert analysis["complexSequences"][
            "Calling for Screen → Pick and Roll → Drive to Basket"
        ]["count"] == 1
        assert analysis["poorDecisions"]["Pass Out"]["context"] == "Isolation"
        assert len(result["recentSequences"]) == 4
        assert result["recentSequences"][0] == {"actions": ["Block"], "quality": "neutral"}

    def test_poor_decisions_weigh_on_the_grade(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [
            ["Isolation", "Pass Out"],
            ["Double Teamed", "Pass Out"],
        ], tatum)

        overall = DecisionQualityService(db_session).decision_quality(tatum)["decisionAnalysis"][
            "overallQuality"]

        # (2 + 4 + 2 * 0.8) / 3
        assert overall == {"averageScore": 2.53, "totalDecisions": 3, "grade": "C"}

    def test_complex_sequences_score_above_four(self, db_session: Session, sample_game,
                                                sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags,
               [["Calling for Screen", "Pick and Roll", "Drive to Basket"]], tatum)

        overall = DecisionQualityService(db_session).decision_quality(tatum)["decisionAnalysis"][
            "overallQuality"]

        assert overall == {"averageScore": 4.8, "totalDecisions": 1, "grade": "A"}

    def test_undefined_pair_lands_in_offensive_decisions(self, db_session: Session, sample_game,
                                                         sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [["Steal", "Isolation"]], tatum)

        analysis = DecisionQualityService(db_session).decision_quality(tatum)["decisionAnalysis"]

        assert analysis["offensiveDecisions"]["Isolation"] == {
            "count": 1, "quality": "neutral", "reason": UNDEFINED_REASON,
        }
        assert analysis["overallQuality"]["grade"] == "C"

    def test_game_filter_accepts_external_id(self, db_session: Session, sample_game, scheduled_game,
                                             sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [["Double Teamed", "Pass Out"]], tatum)
        _plays(db_session, scheduled_game, sample_tags, [["Double Teamed", "Turnover"]], tatum)

        result = DecisionQualityService(db_session).decision_quality(tatum, game_id=sample_game.external_id)

        assert result["decisionAnalysis"]["totalSequences"] == 1
        assert result["decisionAnalysis"]["overallQuality"]["grade"] == "A"
