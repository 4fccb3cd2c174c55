"""
Next-tag suggestions from tagging history.
"""
from collections import Counter
from typing import Any, Dict

from sqlalchemy.orm import Session

from court_vision.repositories import PlayRepository, TagRepository
from court_vision.services.analytics.sequences import ranked, tag_sequences
from court_vision.services.tagging.taxonomy import static_suggestions


class NextTagService:
    """
    Counts what followed ``tag`` inside every stored play.

    Confidence is the follow-up's share of all observed transitions from
    ``tag``. With no history the tag's configured ``suggestions`` list is
    returned as-is.
    """

    def __init__(self, db: Session):
        self.db = db
        self.plays = PlayRepository(db)
        self.tags = TagRepository(db)

    def next_tag_suggestions(self, tag: str, limit: int = 3) -> Dict[str, Any]:
        # Tag lookups ignore case; history is matched on the stored name
        stored = self.tags.find_by_name(tag)
        if stored is not None:
            tag = stored.name

        followers: Counter = Counter()
        for actions in tag_sequences(self.plays.play_tags()):
            for current, following in zip(actions, actions[1:]):
                if current == tag:
                    followers[following] += 1

        total = sum(followers.values())
        if total:
            return {
                "tag": tag,
                "source": "history",
                "totalTransitions": total,
                "suggestions": [
                    {"name": name, "count": count, "confidence": round(count / total, 3)}
                    for name, count in ranked(followers, limit)
                ],
            }

        configured = list(stored.suggestions or []) if stored is not None else static_suggestions(tag)
        return {
            "tag": tag,
            "source": "static",
            "totalTransitions": 0,
            "suggestions": [{"name": name, "count": 0, "confidence": None} for name in configured],
        }
