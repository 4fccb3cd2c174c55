"""
Tagging: the tag taxonomy and its seeding, quick-action configuration and
play creation.
"""

from court_vision.services.tagging.play_service import (
    PlayService, PlayCreate, PlayTagInput, PlayTagContext, PlayValidationError,
)
from court_vision.services.tagging.quick_actions import (
    QUICK_ACTIONS, STARTER_ACTIONS, TAG_TRANSITIONS, allowed_next_actions, validate_transition_map,
)
from court_vision.services.tagging.taxonomy import DEFAULT_TAGS, TagDefinition, static_suggestions
from court_vision.services.tagging.seed import seed_tags

__all__ = [
    "PlayService",
    "PlayCreate",
    "PlayTagInput",
    "PlayTagContext",
    "PlayValidationError",
    "QUICK_ACTIONS",
    "STARTER_ACTIONS",
    "TAG_TRANSITIONS",
    "allowed_next_actions",
    "validate_transition_map",
    "DEFAULT_TAGS",
    "TagDefinition",
    "static_suggestions",
    "seed_tags",
]
