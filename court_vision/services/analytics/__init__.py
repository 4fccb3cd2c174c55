"""
Read-time analytics over tagged plays.

Key components:
- PatternService: player patterns, team tendencies, game context
- SuggestionService: contextual tagging suggestions
- DecisionQualityService: lookup-table sequence grading
- ScoutingService: defensive scouting reports
- NextTagService: history-based next-tag suggestions
"""

from court_vision.services.analytics.patterns import PatternService, SuggestionService
from court_vision.services.analytics.decision_quality import DecisionQualityService
from court_vision.services.analytics.scouting import ScoutingService
from court_vision.services.analytics.next_tag import NextTagService

__all__ = [
    "PatternService",
    "SuggestionService",
    "DecisionQualityService",
    "ScoutingService",
    "NextTagService",
]
