"""
Helpers shared by the analytics services.

PlayTags arrive most-recent-first from the repository. Grouping keeps that
order across plays; inside a play, tags are ordered by their context
``sequence`` (missing = 1), then by creation time.
"""
from collections import Counter
from typing import Dict, Iterable, List, Optional, Tuple

from court_vision.models import PlayTag

SEQUENCE_SEPARATOR = " → "


def sequence_number(play_tag: PlayTag) -> int:
    context = play_tag.context or {}
    value = context.get("sequence") if isinstance(context, dict) else None
    return value if isinstance(value, int) and value >= 1 else 1


def group_by_play(play_tags: Iterable[PlayTag]) -> Dict[str, List[PlayTag]]:
    """play id -> that play's tags in sequence order (plays in first-seen order)."""
    grouped: Dict[str, List[PlayTag]] = {}
    for play_tag in play_tags:
        grouped.setdefault(play_tag.play_id, []).append(play_tag)
    for play_id, tags in grouped.items():
        grouped[play_id] = sorted(tags, key=lambda pt: (sequence_number(pt), pt.created_at))
    return grouped


def tag_sequences(play_tags: Iterable[PlayTag]) -> List[List[str]]:
    """Tag names per play, in sequence order."""
    return [[pt.tag.name for pt in tags] for tags in group_by_play(play_tags).values()]


def ranked(counts: Counter, limit: Optional[int] = None) -> List[Tuple[str, int]]:
    """(key, count) pairs by count descending; ties keep first-seen order."""
    items = sorted(counts.items(), key=lambda item: -item[1])
    return items[:limit] if limit is not None else items


def percentage(count: int, total: int) -> float:
    return round(count / total * 100, 1) if total else 0.0


def next_after(names: List[str], action: str) -> Optional[str]:
    """The action following the first occurrence of ``action``, if any."""
    if action not in names:
        return None
    index = names.index(action)
    return names[index + 1] if index + 1 < len(names) else None
