"""
AI narrative game analysis.
"""

from court_vision.services.ai.box_score import BoxScore, TeamBoxScore, box_score_from_summary
from court_vision.services.ai.game_analysis_service import (
    GameAnalysisService, fallback_analysis, reset_analysis_state,
)

__all__ = [
    "BoxScore",
    "TeamBoxScore",
    "box_score_from_summary",
    "GameAnalysisService",
    "fallback_analysis",
    "reset_analysis_state",
]
