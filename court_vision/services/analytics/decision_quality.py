"""
Decision-quality grading.

Each of a player's tagged plays is an ordered action sequence. Sequences
of three or more actions are looked up whole in ``SEQUENCE_QUALITY``;
otherwise the opening pair (first action, response) is looked up in
``DECISION_QUALITY``. Unlisted pairs grade ``neutral``.

Every graded sequence contributes its label score once; the plain average
maps to a letter grade.
"""
import enum
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from court_vision.core.logging import get_logger
from court_vision.repositories import GameRepository, PlayRepository
from court_vision.services.analytics.sequences import SEQUENCE_SEPARATOR, tag_sequences

logger = get_logger(__name__)


class Quality(str, enum.Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NEUTRAL = "neutral"
    QUESTIONABLE = "questionable"
    RISKY = "risky"


QUALITY_SCORES: Dict[Quality, float] = {
    Quality.EXCELLENT: 4,
    Quality.GOOD: 3,
    Quality.NEUTRAL: 2.5,
    Quality.QUESTIONABLE: 2,
    Quality.RISKY: 1,
}

# (minimum average, grade), checked in order
GRADE_THRESHOLDS: Tuple[Tuple[float, str], ...] = ((3.5, "A"), (3.0, "B"), (2.5, "C"))
LOWEST_GRADE = "D"
NO_GRADE = "N/A"

# Bucket weights in the overall score; poor decisions are counted a second time
COMPLEX_SEQUENCE_WEIGHT = 1.2
POOR_DECISION_WEIGHT = 0.8

UNDEFINED_REASON = "Undefined sequence"

E, G, N, Q, R = Quality.EXCELLENT, Quality.GOOD, Quality.NEUTRAL, Quality.QUESTIONABLE, Quality.RISKY

_SHOT_RESULTS = {
    "Made Shot": (E, "Perfect execution"),
    "Missed Shot": (Q, "Inefficient shot selection"),
    "Blocked": (R, "Poor shot selection"),
    "Foul Drawn": (G, "Gets to the line"),
}

# initial action -> response -> (quality, reason)
DECISION_QUALITY: Dict[str, Dict[str, Tuple[Quality, str]]] = {
    "Bringing Ball Up": {
        "Calling for Screen": (E, "Smart setup, creates advantage"),
        "Isolation": (G, "Direct attack, but could create better opportunities"),
        "Quick Shot": (Q, "Rushes the offense, could be more patient"),
        "Turnover": (R, "Poor ball control early in possession"),
    },
    "Off-Ball Movement": {
        "Calling for Screen": (E, "Good off-ball awareness"),
        "Quick Shot": (G, "Uses movement to create space"),
        "Turnover": (R, "Poor off-ball execution"),
    },
    "Calling for Screen": {
        "Pick and Roll": (E, "Perfect execution of screen call"),
        "Pick and Pop": (E, "Smart variation, creates spacing"),
        "Screen Mismatch": (E, "Identifies and exploits defensive weakness"),
        "Screen Rejection": (Q, "Wastes screen opportunity"),
        "Turnover": (R, "Poor screen execution"),
    },
    "Pick and Roll": {
        "Drive to Basket": (E, "Attacks the advantage created by screen"),
        "Pull Up Shot": (G, "Uses screen effectively for space"),
        "Pass to Roller": (E, "Makes the right play, finds open teammate"),
        "Pass to Corner": (G, "Good ball movement, creates open shot"),
        "Double Teamed": (N, "Defense responds well, but creates opportunity"),
        "Step Back": (Q, "Gives up pick advantage"),
        "Turnover": (R, "Poor pick and roll execution"),
    },
    "Pick and Pop": {
        "Pull Up Shot": (E, "Perfect execution of pick and pop"),
        "Drive to Basket": (G, "Attacks the advantage"),
        "Pass to Popper": (E, "Makes the right play, finds open shooter"),
        "Double Teamed": (N, "Defense responds, but creates opportunity"),
        "Turnover": (R, "Poor pick and pop execution"),
    },
    "Screen Mismatch": {
        "Drive to Basket": (E, "Exploits the mismatch perfectly"),
        "Pull Up Shot": (G, "Uses mismatch advantage"),
        "Post Up": (E, "Smart to post up smaller defender"),
        "Step Back": (G, "Creates space against slower defender"),
        "Pass Out": (Q, "Gives up mismatch advantage"),
        "Turnover": (R, "Poor mismatch exploitation"),
    },
    "Isolation": {
        "Drive to Basket": (G, "Direct attack, but could create better opportunities"),
        "Pull Up Shot": (G, "Uses space effectively"),
        "Step Back": (G, "Creates space for shot"),
        "Fade Away": (G, "Creates separation"),
        "Double Teamed": (N, "Defense responds, but creates opportunity"),
        "Pass Out": (Q, "Gives up isolation opportunity"),
        "Turnover": (R, "Poor isolation execution"),
    },
    "Post Up": {
        "Drive to Basket": (G, "Attacks from post position"),
        "Pull Up Shot": (G, "Uses post advantage"),
        "Fade Away": (G, "Creates separation from post"),
        "Pass Out": (G, "Finds open teammate from post"),
        "Step Back": (Q, "Gives up post advantage"),
        "Double Teamed": (N, "Defense responds, but creates opportunity"),
        "Turnover": (R, "Poor post play execution"),
    },
    "Double Teamed": {
        "Pass Out": (E, "Makes the right play, finds open teammate"),
        "Split Defense": (G, "Aggressive but effective if successful"),
        "Pull Up Shot": (Q, "Forces the issue against double team"),
        "Drive to Basket": (R, "High difficulty against double team"),
        "Step Back": (Q, "Forces the issue against double team"),
        "Fade Away": (R, "High difficulty against double team"),
        "Turnover": (R, "Poor decision under pressure"),
    },
    "Drive to Basket": {
        "Layup/Dunk": (E, "Perfect finish at the rim"),
        "Pull Up Shot": (G, "Good mid-range option"),
        "Pass Out": (G, "Good court vision, finds open teammate"),
        "Foul Drawn": (G, "Gets to the line"),
        "Turnover": (R, "Poor ball control or decision"),
        "Missed Shot": (Q, "Inefficient drive finish"),
    },
    "Transition": {
        "Drive to Basket": (E, "Attacks in transition"),
        "Pull Up Shot": (G, "Uses transition advantage"),
        "Pass Out": (G, "Finds open teammate in transition"),
        "Layup/Dunk": (E, "Perfect transition finish"),
        "Step Back": (Q, "Slows down transition"),
        "Turnover": (R, "Poor transition execution"),
        "Missed Shot": (Q, "Inefficient transition"),
    },
    "Defensive Play": {
        "Steal": (E, "Great defensive play"),
        "Block": (E, "Excellent rim protection"),
        "Defensive Rebound": (G, "Good defensive positioning"),
        "Foul": (Q, "Could be cleaner defense"),
        "Turnover": (R, "Poor defensive execution"),
    },
    "Pull Up Shot": dict(_SHOT_RESULTS),
    "Step Back": dict(_SHOT_RESULTS),
    "Fade Away": dict(_SHOT_RESULTS),
    "Pass Out": {
        "Assist": (E, "Perfect pass execution"),
        "Turnover": (R, "Poor pass execution"),
        "Shot Attempt": (G, "Good pass leads to shot"),
    },
    "Pass to Roller": {
        "Assist": (E, "Perfect pick and roll execution"),
        "Turnover": (R, "Poor pick and roll execution"),
        "Shot Attempt": (G, "Good pick and roll execution"),
    },
    "Pass to Corner": {
        "Assist": (E, "Perfect ball movement"),
        "Turnover": (R, "Poor ball movement"),
        "Shot Attempt": (G, "Good ball movement"),
    },
}

# full sequence (3+ actions) -> (quality, reason)
SEQUENCE_QUALITY: Dict[str, Tuple[Quality, str]] = {
    "Calling for Screen → Pick and Roll → Drive to Basket": (E, "Perfect execution of modern basketball"),
    "Calling for Screen → Screen Mismatch → Drive to Basket": (E, "Smart identification and exploitation of mismatch"),
    "Post Up → Double Teamed → Pass Out": (E, "Perfect response to defensive pressure"),
    "Pick and Roll → Double Teamed → Pass Out": (E, "Makes the right play under pressure"),
    "Bringing Ball Up → Calling for Screen → Pick and Roll": (E, "Smart offensive setup"),
    "Calling for Screen → Screen Rejection → Turnover": (R, "Wastes screen and turns it over"),
    "Screen Mismatch → Pass Out → Turnover": (R, "Gives up advantage and turns it over"),
    "Double Teamed → Drive to Basket → Turnover": (R, "Forces the issue and turns it over"),
    "Bringing Ball Up → Quick Shot → Missed Shot": (Q, "Rushes offense and misses"),
    "Isolation → Pull Up Shot → Missed Shot": (Q, "Inefficient isolation"),
    "Post Up → Fade Away → Missed Shot": (Q, "Inefficient post play"),
}

# Report bucket for a graded opening pair, by initial action
CATEGORY_BY_INITIAL_ACTION: Dict[str, str] = {
    "Double Teamed": "defensiveResponses",
    "Calling for Screen": "screenActions",
    "Screen Mismatch": "screenActions",
    "Pick and Roll": "screenActions",
    "Pick and Pop": "screenActions",
    "Isolation": "offensiveDecisions",
    "Post Up": "offensiveDecisions",
    "Transition": "offensiveDecisions",
    "Bringing Ball Up": "setupActions",
    "Off-Ball Movement": "setupActions",
}
DEFAULT_CATEGORY = "executionActions"
CATEGORIES = ("defensiveResponses", "screenActions", "offensiveDecisions", "setupActions", "executionActions")


def _validate_tables() -> None:
    for initial, responses in DECISION_QUALITY.items():
        for response, (quality, _) in responses.items():
            if not isinstance(quality, Quality):
                raise ValueError(f"Bad quality for '{initial} → {response}': {quality!r}")
    for sequence, (quality, _) in SEQUENCE_QUALITY.items():
        if len(sequence.split(SEQUENCE_SEPARATOR)) < 3 or not isinstance(quality, Quality):
            raise ValueError(f"Bad multi-step sequence entry: {sequence!r}")


_validate_tables()


def grade_for(average: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if average >= threshold:
            return grade
    return LOWEST_GRADE


def classify(actions: List[str]) -> Optional[Tuple[Quality, str, bool]]:
    """
    Grade one action sequence.

    Returns:
        (quality, reason, defined) or None for sequences shorter than two;
        ``defined`` is False for the neutral fallback
    """
    if len(actions) < 2:
        return None
    if len(actions) >= 3:
        entry = SEQUENCE_QUALITY.get(SEQUENCE_SEPARATOR.join(actions))
        if entry:
            return entry[0], entry[1], True
    entry = DECISION_QUALITY.get(actions[0], {}).get(actions[1])
    if entry:
        return entry[0], entry[1], True
    return Quality.NEUTRAL, UNDEFINED_REASON, False


def _bump(bucket: Dict[str, Dict[str, Any]], key: str, quality: Quality, reason: str, **extra) -> None:
    if key not in bucket:
        bucket[key] = {"count": 0, "quality": quality.value, "reason": reason, **extra}
    bucket[key]["count"] += 1


def _overall_quality(analysis: Dict[str, Any]) -> Dict[str, Any]:
    """Weighted average over every bucket; each entry scores at the quality it was first seen with."""
    total_score = 0.0
    total_decisions = 0
    for bucket_name, weight in [(category, 1.0) for category in CATEGORIES] + [
        ("complexSequences", COMPLEX_SEQUENCE_WEIGHT),
        ("poorDecisions", POOR_DECISION_WEIGHT),
    ]:
        for entry in analysis[bucket_name].values():
            total_score += QUALITY_SCORES[Quality(entry["quality"])] * entry["count"] * weight
            total_decisions += entry["count"]

    if not total_decisions:
        return {"averageScore": 0, "totalDecisions": 0, "grade": NO_GRADE}
    average = total_score / total_decisions
    return {"averageScore": round(average, 2), "totalDecisions": total_decisions, "grade": grade_for(average)}


class DecisionQualityService:
    """Grades a player's tagged sequences."""

    def __init__(self, db: Session):
        self.db = db
        self.plays = PlayRepository(db)
        self.games = GameRepository(db)

    def decision_quality(self, player_id: str, game_id: Optional[str] = None) -> Dict[str, Any]:
        if game_id:
            game = self.games.find_by_identifier(game_id)
            game_id = game.id if game else game_id

        sequences = tag_sequences(self.plays.play_tags(player_id=player_id, game_id=game_id))
        analysis: Dict[str, Any] = {category: {} for category in CATEGORIES}
        analysis["complexSequences"] = {}
        analysis["poorDecisions"] = {}

        recent: List[Dict[str, Any]] = []
        graded_count = 0
        for actions in sequences:
            graded = classify(actions)
            if len(recent) < 5:
                recent.append({"actions": actions, "quality": graded[0].value if graded else Quality.NEUTRAL.value})
            if graded is None:
                continue

            quality, reason, defined = graded
            graded_count += 1
            initial, response = actions[0], actions[1]

            if len(actions) >= 3 and SEQUENCE_SEPARATOR.join(actions) in SEQUENCE_QUALITY:
                _bump(analysis["complexSequences"], SEQUENCE_SEPARATOR.join(actions), quality, reason)
            elif defined:
                category = CATEGORY_BY_INITIAL_ACTION.get(initial, DEFAULT_CATEGORY)
                _bump(analysis[category], response, quality, reason)
            else:
                category = "defensiveResponses" if initial == "Double Teamed" else "offensiveDecisions"
                _bump(analysis[category], response, quality, reason)

            if quality in (Quality.QUESTIONABLE, Quality.RISKY):
                _bump(analysis["poorDecisions"], response, quality, reason, context=initial)

        analysis["totalSequences"] = len(sequences)
        analysis["overallQuality"] = _overall_quality(analysis)
        logger.debug(f"Graded {graded_count} of {len(sequences)} sequences for player {player_id}")

        return {
            "playerId": player_id,
            "decisionAnalysis": analysis,
            "recentSequences": recent,
            "qualityScores": {quality.value: score for quality, score in QUALITY_SCORES.items()},
        }
