"""Tests for building box scores from ESPN summaries."""
from court_vision.services.ai import box_score_from_summary


def make_summary(away_score="108", home_score="112"):
    return {
        "header": {
            "id": "401584700",
            "competitions": [{
                "date": "2025-01-15T20:00Z",
                "competitors": [
                    {"homeAway": "home", "score": home_score,
                     "team": {"displayName": "Los Angeles Lakers", "abbreviation": "LAL"}},
                    {"homeAway": "away", "score": away_score,
                     "team": {"displayName": "Boston Celtics", "abbreviation": "BOS"}},
                ],
            }],
        },
        "boxscore": {
            "teams": [
                {"homeAway": "away", "statistics": [
                    {"name": "fieldGoalPct", "displayValue": "47.3"},
                    {"name": "threePointFieldGoalPct", "displayValue": "38.9"},
                    {"name": "assists", "displayValue": "27"},
                    {"name": "turnovers", "displayValue": "12"},
                    {"name": "fieldGoalsMade-fieldGoalsAttempted", "displayValue": "43-91"},
                ]},
                {"homeAway": "home", "statistics": [
                    {"name": "fieldGoalPct", "displayValue": "50.6"},
                    {"name": "blocks", "displayValue": "7"},
                    {"name": "totalRebounds", "displayValue": "48"},
                ]},
            ],
        },
    }


class TestBoxScoreFromSummary:

    def test_scores_and_team_stats(self):
        box = box_score_from_summary(make_summary())

        assert box.game_id == "401584700"
        assert box.away.team == "Boston Celtics"
        assert box.away.points == 108
        assert box.away.field_goal_percentage == 47.3
        assert box.away.assists == 27
        assert box.away.turnovers == 12
        assert box.home.blocks == 7
        assert box.home.rebounds == 48
        assert box.home.steals is None

    def test_winner_and_margin(self):
        box = box_score_from_summary(make_summary(away_score="120", home_score="111"))

        info = box.game_info()
        assert info["winner"] == "Boston Celtics"
        assert info["margin"] == 9
        assert info["date"] == "2025-01-15T20:00Z"

    def test_explicit_game_id_wins(self):
        assert box_score_from_summary(make_summary(), game_id="local-1").game_id == "local-1"

    def test_missing_competitors(self):
        assert box_score_from_summary({}) is None
        assert box_score_from_summary({"header": {"competitions": [{"competitors": []}]}}) is None

    def test_missing_boxscore_keeps_scores(self):
        summary = make_summary()
        del summary["boxscore"]

        box = box_score_from_summary(summary)
        assert box.home.points == 112
        assert box.home.field_goal_percentage is None
