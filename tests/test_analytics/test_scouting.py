"""Tests for defensive scouting reports."""
import sys
from datetime import timedelta
from pathlib import Path

from sqlalchemy.orm import Session

# Import helpers from conftest
sys.path.insert(0, str(Path(__file__).parent.parent))
from conftest import BASE_TIME, create_tagged_play
from court_vision.services.analytics import ScoutingService


def _plays(db, game, tags, sequences, player_id):
    for minute, actions in enumerate(sequences):
        create_tagged_play(db, game, tags, actions, player_id=player_id,
                           created_at=BASE_TIME + timedelta(minutes=minute))


def _names(entries):
    return [entry["strategy"] for entry in entries]


class TestDefensiveScouting:

    def test_empty_report(self, db_session: Session):
        report = ScoutingService(db_session).defensive_scouting("nobody")

        assert report["totalPlays"] == 0
        assert report["keyInsights"] == {
            "mostFrequentSequence": "None",
            "screenDependency": 0.0,
            "isolationFrequency": 0,
            "pressureResponse": None,
        }
        assert all(v == [] for v in report["defensiveStrategies"].values())

    def test_screen_heavy_player(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [
            ["Calling for Screen", "Screen Mismatch", "Drive to Basket"],
            ["Calling for Screen", "Screen Mismatch", "Drive to Basket"],
            ["Calling for Screen", "Screen Mismatch", "Drive to Basket"],
            ["Double Teamed", "Pass Out"],
        ], tatum)

        report = ScoutingService(db_session).defensive_scouting(tatum)
        strategies = report["defensiveStrategies"]

        assert report["totalPlays"] == 4
        assert report["offensivePatterns"]["screenUsage"] == {"Screen Mismatch": 3}
        assert report["offensivePatterns"]["pressureResponses"] == {"Pass Out": 1}
        assert report["keyInsights"]["mostFrequentSequence"] == (
            "Calling for Screen → Screen Mismatch → Drive to Basket"
        )
        assert report["keyInsights"]["screenDependency"] == 75.0
        assert report["keyInsights"]["pressureResponse"] == ["Pass Out", 1]

        assert _names(strategies["screenDefense"]) == ["Switch Screens Early"]
        assert _names(strategies["pressureDefense"]) == ["Prevent Pass Out"]
        assert _names(strategies["gamePlan"]) == ["Disrupt Screen Actions"]
        assert strategies["primaryDefensiveFocus"] == ["Screen Defense", "Pressure Defense"]

    def test_isolation_and_step_backs(self, db_session: Session, sample_game, sample_tags, sample_players):
        tatum = sample_players["tatum"].external_id
        _plays(db_session, sample_game, sample_tags, [["Isolation", "Step Back"]] * 4, tatum)

        report = ScoutingService(db_session).defensive_scouting(tatum)
        strategies = report["defensiveStrategies"]

        assert report["offensivePatterns"]["isolationTendencies"] == {"Step Back": 4}
        assert report["offensivePatterns"]["shotSelection"] == {"Step Back": 4}
        assert report["keyInsights"]["isolationFrequency"] == 4
        assert _names(strategies["isolationDefense"]) == ["Force Step Back"]
        assert _names(strategies["shotContest"]) == ["Stay Attached on Step-Backs"]
        assert _names(strategies["gamePlan"]) == ["Force Isolation Decisions"]
        assert strategies["primaryDefensiveFocus"] == ["Isolation Defense"]
