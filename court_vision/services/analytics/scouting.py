"""
Defensive scouting report for a player.

Counts the player's most frequent action sequences and what they do after
a screen call, an isolation and a double team, then derives counter
strategies from fixed rules.
"""
from collections import Counter
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from court_vision.repositories import GameRepository, PlayRepository
from court_vision.services.analytics.sequences import SEQUENCE_SEPARATOR, next_after, ranked, tag_sequences

SHOT_ACTIONS = ("Pull Up Shot", "Step Back", "Fade Away", "Layup/Dunk")
SCREEN_DEPENDENCY_THRESHOLD = 50.0
ISOLATION_THRESHOLD = 3
SHOT_CONTEST_THRESHOLD = 2


def _strategy(strategy: str, reasoning: str, execution: str, priority: str) -> Dict[str, str]:
    return {"strategy": strategy, "reasoning": reasoning, "execution": execution, "priority": priority}


def _append_once(bucket: List[Dict[str, str]], entry: Dict[str, str]) -> None:
    if all(existing["strategy"] != entry["strategy"] for existing in bucket):
        bucket.append(entry)


class ScoutingService:
    """Builds defensive scouting reports from tagged sequences."""

    def __init__(self, db: Session):
        self.db = db
        self.plays = PlayRepository(db)
        self.games = GameRepository(db)

    def defensive_scouting(self, player_id: str, game_id: Optional[str] = None) -> Dict[str, Any]:
        if game_id:
            game = self.games.find_by_identifier(game_id)
            game_id = game.id if game else game_id

        sequences = tag_sequences(self.plays.play_tags(player_id=player_id, game_id=game_id))

        frequent: Counter = Counter()
        screen_usage: Counter = Counter()
        isolation: Counter = Counter()
        pressure: Counter = Counter()
        shots: Counter = Counter()
        for actions in sequences:
            frequent[SEQUENCE_SEPARATOR.join(actions)] += 1
            for action, counter in (("Calling for Screen", screen_usage),
                                    ("Isolation", isolation),
                                    ("Double Teamed", pressure)):
                follow_up = next_after(actions, action)
                if follow_up:
                    counter[follow_up] += 1
            for shot in SHOT_ACTIONS:
                if shot in actions:
                    shots[shot] += 1

        top_sequences = ranked(frequent, 5)
        top_isolation = ranked(isolation, 1)
        top_pressure = ranked(pressure, 1)

        strategies: Dict[str, List] = {
            "primaryDefensiveFocus": [],
            "screenDefense": [],
            "isolationDefense": [],
            "pressureDefense": [],
            "shotContest": [],
            "gamePlan": [],
        }

        for sequence, count in top_sequences:
            if "Calling for Screen → Screen Mismatch" in sequence:
                _append_once(strategies["screenDefense"], _strategy(
                    "Switch Screens Early",
                    f"Player used screen mismatch {count} times - prevent mismatch creation",
                    "Switch on screen calls before mismatch develops",
                    "High",
                ))
            if "Calling for Screen → Pick and Roll" in sequence:
                _append_once(strategies["screenDefense"], _strategy(
                    "Hedge and Recover",
                    f"Player frequently uses pick and roll ({count} times)",
                    "Hedge the screen, then recover to prevent drive",
                    "High",
                ))
            actions = sequence.split(SEQUENCE_SEPARATOR)
            if "Isolation" in actions and top_isolation:
                response, times = top_isolation[0]
                _append_once(strategies["isolationDefense"], _strategy(
                    f"Force {response}",
                    f"In isolation, player most often responds with {response} ({times} times)",
                    f"Take away {response} option, force counter",
                    "Medium",
                ))
            if "Double Teamed" in actions and top_pressure:
                response, times = top_pressure[0]
                _append_once(strategies["pressureDefense"], _strategy(
                    f"Prevent {response}",
                    f"When pressured, player most often responds with {response} ({times} times)",
                    f"Take away {response} option, force different response",
                    "High",
                ))

        if shots["Pull Up Shot"] > SHOT_CONTEST_THRESHOLD:
            strategies["shotContest"].append(_strategy(
                "Contest Pull-Ups Aggressively",
                f"Player frequently uses pull-up shots ({shots['Pull Up Shot']} times)",
                "Close out hard, contest every pull-up attempt",
                "High",
            ))
        if shots["Step Back"] > SHOT_CONTEST_THRESHOLD:
            strategies["shotContest"].append(_strategy(
                "Stay Attached on Step-Backs",
                f"Player uses step-back shots ({shots['Step Back']} times)",
                "Stay close, don't bite on step-back fakes",
                "Medium",
            ))

        total_plays = len(sequences)
        screen_percentage = round(sum(screen_usage.values()) / total_plays * 100, 1) if total_plays else 0.0
        isolation_count = sum(isolation.values())

        if screen_percentage > SCREEN_DEPENDENCY_THRESHOLD:
            strategies["gamePlan"].append(_strategy(
                "Disrupt Screen Actions",
                f"Player heavily relies on screens ({screen_percentage:.1f}% of plays)",
                "Switch screens, hedge aggressively, prevent clean screen execution",
                "Critical",
            ))
            strategies["primaryDefensiveFocus"].append("Screen Defense")
        if isolation_count > ISOLATION_THRESHOLD:
            strategies["gamePlan"].append(_strategy(
                "Force Isolation Decisions",
                f"Player uses isolation frequently ({isolation_count} times)",
                "Force isolation but take away preferred counter-moves",
                "High",
            ))
            strategies["primaryDefensiveFocus"].append("Isolation Defense")
        if pressure:
            strategies["primaryDefensiveFocus"].append("Pressure Defense")

        return {
            "playerId": player_id,
            "totalPlays": total_plays,
            "offensivePatterns": {
                "mostFrequentSequences": dict(frequent),
                "screenUsage": dict(screen_usage),
                "isolationTendencies": dict(isolation),
                "pressureResponses": dict(pressure),
                "shotSelection": dict(shots),
            },
            "defensiveStrategies": strategies,
            "keyInsights": {
                "mostFrequentSequence": top_sequences[0][0] if top_sequences else "None",
                "screenDependency": screen_percentage,
                "isolationFrequency": isolation_count,
                "pressureResponse": list(top_pressure[0]) if top_pressure else None,
            },
        }
