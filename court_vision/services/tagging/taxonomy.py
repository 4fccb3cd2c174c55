"""
Default tag taxonomy.

Each entry carries UI metadata (icon, color), the trigger hints that
describe when the tag applies and the ordered list of tags that usually
follow it. ``suggestions`` doubles as the static fallback for next-tag
suggestions when no tagging history exists.

Seeded with scripts/seed_tags.py (idempotent upsert by name).
"""
import enum
from dataclasses import dataclass
from typing import Dict, List, Tuple


class TagCategory(str, enum.Enum):
    OFFENSIVE_ACTION = "OFFENSIVE_ACTION"
    DEFENSIVE_ACTION = "DEFENSIVE_ACTION"
    SPECIAL_SITUATION = "SPECIAL_SITUATION"


@dataclass(frozen=True)
class TagDefinition:
    """One taxonomy entry."""
    name: str
    category: TagCategory
    subcategory: str
    description: str
    icon: str
    color: str
    triggers: Tuple[str, ...] = ()  # trigger names, stored as {name: true}
    suggestions: Tuple[str, ...] = ()

    def to_row(self) -> Dict:
        """Column values for the ``tags`` table."""
        return {
            "category": self.category.value,
            "subcategory": self.subcategory,
            "description": self.description,
            "icon": self.icon,
            "color": self.color,
            "triggers": {trigger: True for trigger in self.triggers},
            "suggestions": list(self.suggestions),
            "is_active": True,
        }


OFFENSE = TagCategory.OFFENSIVE_ACTION
DEFENSE = TagCategory.DEFENSIVE_ACTION
SPECIAL = TagCategory.SPECIAL_SITUATION


DEFAULT_TAGS: List[TagDefinition] = [
    # Possession starters
    TagDefinition("Bringing Ball Up", OFFENSE, "OffensiveAction", "Player brings the ball up the court", "🏀", "#4CAF50",
                  ("ball_handler", "transition_opportunity", "primary_ball_handler"),
                  ("Calling for Screen", "Isolation", "Quick Shot", "Pass Out")),
    TagDefinition("Off-Ball Movement", OFFENSE, "OffensiveAction", "Player movement without the ball", "🏃", "#2196F3",
                  ("off_ball_movement", "cutting_action", "spacing"),
                  ("Off-Ball Cut", "Off-Ball Screen", "Catch and Shoot", "Drive")),
    TagDefinition("Defensive Play", DEFENSE, "DefensiveScheme", "Defensive action or scheme", "🛡️", "#F44336",
                  ("defensive_setup", "defensive_rotation"),
                  ("Man-to-Man Defense", "Zone Defense 2-3", "Help Defense", "Switch Defense")),
    TagDefinition("Transition", OFFENSE, "OffensiveAction", "Transition play or fast break", "⚡", "#FF9800",
                  ("fast_break", "transition_opportunity", "speed_advantage"),
                  ("Drive to Basket", "Layup/Dunk", "Pull Up Shot", "Pass Out")),

    # Ball handler actions
    TagDefinition("Calling for Screen", OFFENSE, "OffensiveAction", "Player calls for a screen", "📞", "#4CAF50",
                  ("screen_set", "ball_handler", "pick_action"),
                  ("Pick and Roll", "Pick and Pop", "Screen Mismatch", "Screen Rejection")),
    TagDefinition("Isolation", OFFENSE, "OffensiveAction", "Isolation play for the ball handler", "👤", "#2196F3",
                  ("one_on_one", "ball_handler", "mismatch_opportunity"),
                  ("Drive to Basket", "Pull Up Shot", "Step Back", "Fade Away")),
    TagDefinition("Post Up", OFFENSE, "OffensiveAction", "Player posts up on the block", "📯", "#96CEB4",
                  ("post_position", "size_advantage", "back_to_basket"),
                  ("Double Teamed", "Pass Out", "Fade Away", "Pull Up Shot")),
    TagDefinition("Quick Shot", OFFENSE, "Shot", "Quick shot attempt", "🎯", "#9C27B0",
                  ("quick_release", "catch_and_shoot", "rhythm_shot"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),
    TagDefinition("3-Pointer", OFFENSE, "Shot", "Three point attempt", "🎯", "#DDA0DD",
                  ("perimeter_shot", "three_point_opportunity"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),

    # Screen actions
    TagDefinition("Pick and Roll", OFFENSE, "OffensiveAction", "Ball screen with the screener rolling", "🔄", "#45B7D1",
                  ("screen_set", "pick_and_roll", "ball_handler"),
                  ("Drive to Basket", "Pass to Roller", "Pull Up Shot", "Double Teamed")),
    TagDefinition("Pick and Pop", OFFENSE, "OffensiveAction", "Ball screen with the screener popping", "🔁", "#45B7D1",
                  ("screen_set", "pick_and_pop", "perimeter_pass"),
                  ("Pull Up Shot", "Pass to Popper", "Drive to Basket", "Double Teamed")),
    TagDefinition("Screen Mismatch", OFFENSE, "OffensiveAction", "Screen creates a mismatch", "⚖️", "#FF9800",
                  ("mismatch_created", "screen_set", "size_advantage"),
                  ("Drive to Basket", "Post Up", "Pull Up Shot", "Step Back")),
    TagDefinition("Screen Rejection", OFFENSE, "OffensiveAction", "Screen is rejected or not used", "❌", "#F44336",
                  ("screen_ignored", "ball_handler", "isolation_forced"),
                  ("Isolation", "Drive to Basket", "Pull Up Shot", "Pass Out")),

    # Drives
    TagDefinition("Drive to Basket", OFFENSE, "Drive", "Player drives to the basket", "🏃", "#4CAF50",
                  ("penetration", "rim_attack", "ball_handler"),
                  ("Layup/Dunk", "Pull Up Shot", "Pass Out", "Foul Drawn")),
    TagDefinition("Layup/Dunk", OFFENSE, "Shot", "Layup or dunk attempt", "🏀", "#4CAF50",
                  ("rim_shot", "close_range", "high_percentage"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),

    # Passes
    TagDefinition("Pass to Roller", OFFENSE, "OffensiveAction", "Pass to the rolling screener", "📤", "#FF9800",
                  ("pick_and_roll", "screen_action", "interior_pass"),
                  ("Layup/Dunk", "Made Shot", "Missed Shot", "Foul Drawn")),
    TagDefinition("Pass to Corner", OFFENSE, "OffensiveAction", "Pass to corner shooter", "📤", "#9C27B0",
                  ("kick_out", "perimeter_pass", "three_point_opportunity"),
                  ("Quick Shot", "Made Shot", "Missed Shot", "Shot Attempt")),
    TagDefinition("Pass to Popper", OFFENSE, "OffensiveAction", "Pass to popping screener", "📤", "#FF9800",
                  ("pick_and_pop", "screen_action", "perimeter_pass"),
                  ("Pull Up Shot", "Made Shot", "Missed Shot", "Shot Attempt")),
    TagDefinition("Pass Out", OFFENSE, "OffensiveAction", "Pass out of pressure", "📤", "#607D8B",
                  ("pressure_situation", "kick_out", "ball_movement"),
                  ("Quick Shot", "Shot Attempt", "Made Shot", "Missed Shot")),

    # Pressure and responses
    TagDefinition("Double Teamed", OFFENSE, "OffensiveAction", "Player is double teamed", "👥", "#F44336",
                  ("double_team", "pressure_situation", "ball_handler"),
                  ("Pass Out", "Split Defense", "Pull Up Shot", "Turnover")),
    TagDefinition("Split Defense", OFFENSE, "Drive", "Player splits the double team", "✂️", "#2196F3",
                  ("double_team", "penetration", "ball_handler"),
                  ("Layup/Dunk", "Pull Up Shot", "Foul Drawn", "Made Shot")),
    TagDefinition("Pull Up Shot", OFFENSE, "Shot", "Pull-up jumper off the dribble", "🎯", "#9C27B0",
                  ("off_dribble", "mid_range", "ball_handler"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),
    TagDefinition("Step Back", OFFENSE, "Shot", "Step-back to create space", "↩️", "#E91E63",
                  ("separation", "off_dribble", "ball_handler"),
                  ("Pull Up Shot", "Made Shot", "Missed Shot", "Blocked")),
    TagDefinition("Fade Away", OFFENSE, "Shot", "Fadeaway jumper", "🌊", "#607D8B",
                  ("separation", "contested_shot", "post_position"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),

    # Shot results
    TagDefinition("Made Shot", OFFENSE, "Shot", "Shot was made", "✅", "#4CAF50",
                  ("successful_shot", "points_scored", "offensive_success"),
                  ("Assist", "And One", "Offensive Rebound", "Defensive Rebound")),
    TagDefinition("Missed Shot", OFFENSE, "Shot", "Shot was missed", "❌", "#F44336",
                  ("missed_shot", "rebound_opportunity", "offensive_failure"),
                  ("Offensive Rebound", "Defensive Rebound", "Out of Bounds")),
    TagDefinition("Blocked", DEFENSE, "DefensiveScheme", "Shot was blocked", "🛡️", "#FF9800",
                  ("defensive_success", "shot_denied", "rim_protection"),
                  ("Defensive Rebound", "Offensive Rebound", "Out of Bounds")),
    TagDefinition("Shot Attempt", OFFENSE, "Shot", "Shot attempt by recipient", "🎯", "#2196F3",
                  ("catch_and_shoot", "pass_recipient", "shot_opportunity"),
                  ("Made Shot", "Missed Shot", "Blocked", "Foul Drawn")),

    # Fouls
    TagDefinition("Foul Drawn", OFFENSE, "OffensiveAction", "Player draws a foul", "🚨", "#F44336",
                  ("foul_drawn", "free_throw_opportunity", "contact_made"),
                  ("Free Throws", "And One", "Made Shot", "Missed Shot")),
    TagDefinition("Free Throws", SPECIAL, "GameManagement", "Free throw attempt", "🎯", "#4CAF50",
                  ("free_throw", "foul_situation", "scoring_opportunity"),
                  ("Made Shot", "Missed Shot", "Offensive Rebound", "Defensive Rebound")),
    TagDefinition("And One", OFFENSE, "Shot", "Made shot with foul", "➕", "#2196F3",
                  ("and_one", "made_shot", "foul_drawn"),
                  ("Free Throws", "Made Shot", "Offensive Rebound", "Defensive Rebound")),

    # Turnovers
    TagDefinition("Turnover", OFFENSE, "OffensiveAction", "Turnover by player", "❌", "#9C27B0",
                  ("turnover", "offensive_mistake", "possession_lost"),
                  ("Bad Pass", "Traveling", "Offensive Foul", "Shot Clock Violation")),
    TagDefinition("Bad Pass", OFFENSE, "OffensiveAction", "Bad pass turnover", "📤", "#F44336",
                  ("bad_pass", "turnover", "passing_mistake"),
                  ("Defensive Rebound", "Out of Bounds", "Steal")),
    TagDefinition("Traveling", OFFENSE, "OffensiveAction", "Traveling violation", "🚶", "#FF9800",
                  ("traveling", "turnover", "footwork_violation"),
                  ("Defensive Rebound", "Out of Bounds")),
    TagDefinition("Shot Clock Violation", SPECIAL, "GameManagement", "Shot clock violation", "⏰", "#607D8B",
                  ("shot_clock", "turnover", "time_management"),
                  ("Defensive Rebound", "Out of Bounds")),

    # Rebounds and dead balls
    TagDefinition("Offensive Rebound", OFFENSE, "OffensiveAction", "Offensive rebound", "🔄", "#4CAF50",
                  ("offensive_rebound", "second_chance", "possession_retained"),
                  ("Quick Shot", "Layup/Dunk", "Pull Up Shot", "Pass Out")),
    TagDefinition("Defensive Rebound", DEFENSE, "DefensiveScheme", "Defensive rebound", "🛡️", "#2196F3",
                  ("defensive_rebound", "possession_gained", "defensive_success"),
                  ("Bringing Ball Up", "Transition", "Pass Out")),
    TagDefinition("Out of Bounds", SPECIAL, "GameManagement", "Ball goes out of bounds", "📤", "#FF9800",
                  ("out_of_bounds", "possession_change", "boundary_violation"),
                  ("Bringing Ball Up", "Set Play", "Off-Ball Movement")),
    TagDefinition("Assist", OFFENSE, "OffensiveAction", "Assist on made shot", "✅", "#4CAF50",
                  ("assist", "made_shot", "playmaking"),
                  ("Made Shot", "Offensive Rebound", "Defensive Rebound")),

    # Team defense
    TagDefinition("Double Team Defense", DEFENSE, "Double Team", "Defense sends a second defender", "🛡️", "#FF8C42",
                  ("double_team", "help_defense", "trap")),
    TagDefinition("Block", DEFENSE, "Defense", "Defender blocks a shot", "🛡️", "#FF8C42",
                  ("rim_protection", "shot_denied"),
                  ("Defensive Rebound", "Offensive Rebound", "Out of Bounds")),
    TagDefinition("Steal", DEFENSE, "Defense", "Defender takes the ball", "🤲", "#FFD93D",
                  ("possession_gained", "active_hands"),
                  ("Transition", "Bringing Ball Up")),
]


TAGS_BY_NAME: Dict[str, TagDefinition] = {tag.name: tag for tag in DEFAULT_TAGS}


def static_suggestions(tag_name: str) -> List[str]:
    """Configured follow-up tags for ``tag_name`` (empty for unknown tags)."""
    definition = TAGS_BY_NAME.get(tag_name)
    return list(definition.suggestions) if definition else []
