"""
Quick-action configuration for the tagging interface.

``TAG_TRANSITIONS`` lists the advised follow-ups for each quick action.
Transitions are advisory: play creation never rejects a sequence that
is not in the map.

The tables are validated when this module is imported; a table edit that
references an unknown action fails fast with ``ValueError``.
"""
import enum
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from court_vision.services.tagging.taxonomy import TAGS_BY_NAME


class ActionGroup(str, enum.Enum):
    OFFENSIVE = "offensive"
    DEFENSIVE = "defensive"
    PRESSURE = "pressure"
    RESPONSE = "response"


@dataclass(frozen=True)
class QuickAction:
    name: str
    color: str
    icon: str
    group: ActionGroup

    def to_dict(self) -> Dict:
        return {"name": self.name, "color": self.color, "icon": self.icon, "category": self.group.value}


QUICK_ACTIONS: Tuple[QuickAction, ...] = (
    # With the ball / on offense
    QuickAction("Isolation", "#4ECDC4", "🏀", ActionGroup.OFFENSIVE),
    QuickAction("Pick and Roll", "#45B7D1", "🔄", ActionGroup.OFFENSIVE),
    QuickAction("Post Up", "#96CEB4", "📯", ActionGroup.OFFENSIVE),
    QuickAction("Transition", "#FFEAA7", "⚡", ActionGroup.OFFENSIVE),
    QuickAction("3-Pointer", "#DDA0DD", "🎯", ActionGroup.OFFENSIVE),

    # On defense
    QuickAction("Double Team Defense", "#FF8C42", "🛡️", ActionGroup.DEFENSIVE),
    QuickAction("Block", "#FF8C42", "🛡️", ActionGroup.DEFENSIVE),
    QuickAction("Steal", "#FFD93D", "🤲", ActionGroup.DEFENSIVE),

    # What happens to the player
    QuickAction("Double Teamed", "#FF6B6B", "👥", ActionGroup.PRESSURE),

    # What the player does after pressure
    QuickAction("Pass Out", "#4CAF50", "📤", ActionGroup.RESPONSE),
    QuickAction("Split Defense", "#FF9800", "✂️", ActionGroup.RESPONSE),
    QuickAction("Pull Up Shot", "#9C27B0", "🎯", ActionGroup.RESPONSE),
    QuickAction("Drive to Basket", "#2196F3", "🏃", ActionGroup.RESPONSE),
    QuickAction("Step Back", "#E91E63", "↩️", ActionGroup.RESPONSE),
    QuickAction("Fade Away", "#607D8B", "🌊", ActionGroup.RESPONSE),
)

QUICK_ACTION_NAMES = frozenset(action.name for action in QUICK_ACTIONS)

STARTER_ACTIONS: Tuple[str, ...] = (
    "Isolation", "Pick and Roll", "Post Up", "Transition", "3-Pointer",
    "Double Team Defense", "Block", "Steal",
)

# Empty tuple = terminal action
TAG_TRANSITIONS: Dict[str, Tuple[str, ...]] = {
    "Isolation": ("Double Teamed", "Pull Up Shot", "Drive to Basket", "Step Back", "Fade Away"),
    "Pick and Roll": ("Double Teamed", "Pass Out", "Pull Up Shot", "Drive to Basket"),
    "Post Up": ("Double Teamed", "Pass Out", "Fade Away", "Pull Up Shot"),
    "Transition": ("Pull Up Shot", "Drive to Basket", "Pass Out"),
    "3-Pointer": (),

    "Double Team Defense": (),
    "Block": (),
    "Steal": (),

    "Double Teamed": ("Pass Out", "Split Defense", "Pull Up Shot", "Drive to Basket"),

    "Pass Out": (),
    "Split Defense": ("Pull Up Shot", "Drive to Basket"),
    "Pull Up Shot": (),
    "Drive to Basket": (),
    "Step Back": ("Pull Up Shot",),
    "Fade Away": (),
}


def validate_transition_map(
    transitions: Dict[str, Tuple[str, ...]],
    actions: frozenset,
    starters: Tuple[str, ...],
) -> None:
    """
    Check that every action the tables mention is a known quick action.

    Raises:
        ValueError: on an unknown source, target or starter, on a quick action
            with no transition entry, or on a quick action missing from the
            tag taxonomy
    """
    unknown_sources = set(transitions) - actions
    if unknown_sources:
        raise ValueError(f"Transition map has unknown actions: {sorted(unknown_sources)}")

    missing = actions - set(transitions)
    if missing:
        raise ValueError(f"Quick actions without a transition entry: {sorted(missing)}")

    for source, targets in transitions.items():
        unknown_targets = [t for t in targets if t not in actions]
        if unknown_targets:
            raise ValueError(f"'{source}' transitions to unknown actions: {unknown_targets}")

    unknown_starters = [s for s in starters if s not in actions]
    if unknown_starters:
        raise ValueError(f"Unknown starter actions: {unknown_starters}")

    untagged = sorted(a for a in actions if a not in TAGS_BY_NAME)
    if untagged:
        raise ValueError(f"Quick actions missing from the tag taxonomy: {untagged}")


validate_transition_map(TAG_TRANSITIONS, QUICK_ACTION_NAMES, STARTER_ACTIONS)


def allowed_next_actions(previous: Optional[str] = None) -> List[str]:
    """
    Advised next actions after ``previous``.

    Starter actions when there is no previous action; an empty list for a
    terminal or unknown action.
    """
    if not previous:
        return list(STARTER_ACTIONS)
    return list(TAG_TRANSITIONS.get(previous, ()))


def is_advised_transition(previous: str, action: str) -> bool:
    return action in TAG_TRANSITIONS.get(previous, ())


def action_groups() -> Dict[str, List[str]]:
    """Quick-action names by group, in display order."""
    groups: Dict[str, List[str]] = {group.value: [] for group in ActionGroup}
    for action in QUICK_ACTIONS:
        groups[action.group.value].append(action.name)
    return groups
