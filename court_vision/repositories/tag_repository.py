"""
Tag repository.
"""
from typing import Optional, List, Iterable, Dict

from sqlalchemy import func

from court_vision.models import Tag
from court_vision.repositories.base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """Repository for the tag taxonomy."""

    def __init__(self, db):
        super().__init__(Tag, db)

    def find_by_name(self, name: str) -> Optional[Tag]:
        return self.where_first(func.lower(Tag.name) == name.strip().lower())

    def find_filtered(self, category: Optional[str] = None,
                      subcategory: Optional[str] = None) -> List[Tag]:
        query = self.query().filter(Tag.is_active.is_(True))
        if category:
            query = query.filter(Tag.category == category)
        if subcategory:
            query = query.filter(Tag.subcategory == subcategory)
        return query.order_by(Tag.name).all()

    def find_many(self, ids: Iterable[str]) -> Dict[str, Tag]:
        """Map of id -> Tag for the ids that exist."""
        ids = list(set(ids))
        if not ids:
            return {}
        return {tag.id: tag for tag in self.where(Tag.id.in_(ids))}
