"""
Player repository.

Players are keyed by ESPN athlete id, so ``find_by_id`` and
``find_by_external_id`` are the same lookup.
"""
from typing import Optional, List, Tuple

from sqlalchemy import or_, func

from court_vision.models import Player
from court_vision.repositories.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    """Repository for NBA player data access."""

    pk_column = "external_id"

    def __init__(self, db):
        super().__init__(Player, db)

    def find_by_external_id(self, external_id: str) -> Optional[Player]:
        return self.find_by_id(str(external_id))

    def find_by_name(self, first_name: str, last_name: str,
                     team_external_id: Optional[str] = None) -> Optional[Player]:
        """
        Case-insensitive first/last name match, narrowed by team when given.

        Falls back to the full ``name`` column for players synced without
        split name fields.
        """
        full = f"{first_name} {last_name}".strip().lower()
        query = self.query().filter(or_(
            (func.lower(Player.first_name) == first_name.lower())
            & (func.lower(Player.last_name) == last_name.lower()),
            func.lower(Player.name) == full,
        ))
        if team_external_id:
            narrowed = query.filter(Player.team_external_id == team_external_id).first()
            if narrowed:
                return narrowed
        return query.first()

    def search(
        self,
        search: Optional[str] = None,
        team_external_id: Optional[str] = None,
        position: Optional[str] = None,
        active: Optional[bool] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Tuple[List[Player], int]:
        """
        Filtered, paginated player listing ordered by name.

        Returns:
            (players, total matching)
        """
        query = self.query()
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(or_(
                func.lower(Player.name).like(pattern),
                func.lower(Player.full_name).like(pattern),
            ))
        if team_external_id:
            query = query.filter(Player.team_external_id == team_external_id)
        if position:
            query = query.filter(func.upper(Player.position) == position.upper())
        if active is not None:
            query = query.filter(Player.active.is_(active))

        total = query.count()
        players = query.order_by(Player.name).offset(offset).limit(limit).all()
        return players, total

    def find_by_team(self, team_external_id: str) -> List[Player]:
        return self.query().filter(
            Player.team_external_id == team_external_id
        ).order_by(Player.name).all()
