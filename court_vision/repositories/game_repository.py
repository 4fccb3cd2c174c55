"""
Game repository.
"""
from datetime import date as DateType
from typing import Optional, List, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import joinedload

from court_vision.models import Game, GameStatus, Team
from court_vision.repositories.base import BaseRepository
from court_vision.utils.timezone import day_bounds


class GameRepository(BaseRepository[Game]):
    """Repository for NBA game data access."""

    def __init__(self, db):
        super().__init__(Game, db)

    def _with_teams(self):
        return self.query().options(joinedload(Game.home_team), joinedload(Game.away_team))

    def find_by_external_id(self, external_id: str) -> Optional[Game]:
        return self.where_first(Game.external_id == str(external_id))

    def find_by_identifier(self, identifier: str) -> Optional[Game]:
        """Resolve a game by local id or ESPN event id."""
        return self._with_teams().filter(
            or_(Game.id == identifier, Game.external_id == identifier)
        ).first()

    def search(
        self,
        status: Optional[GameStatus] = None,
        season: Optional[str] = None,
        team: Optional[str] = None,
        on_date: Optional[DateType] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Game], int]:
        """
        Filtered game listing, newest first.

        Args:
            team: ESPN team id or abbreviation, matched on either side

        Returns:
            (games, total matching)
        """
        query = self._with_teams()
        if status:
            query = query.filter(Game.status == status)
        if season:
            query = query.filter(Game.season == season)
        if team:
            team_ids = [
                row[0] for row in self.db.query(Team.external_id).filter(
                    or_(Team.external_id == team, Team.abbreviation == team.upper())
                ).all()
            ]
            query = query.filter(or_(Game.home_team_id.in_(team_ids), Game.away_team_id.in_(team_ids)))
        if on_date:
            start, end = day_bounds(on_date)
            query = query.filter(Game.date >= start, Game.date < end)

        total = query.count()
        games = query.order_by(Game.date.desc()).offset(offset).limit(limit).all()
        return games, total

    def find_live(self) -> List[Game]:
        return self._with_teams().filter(Game.status == GameStatus.LIVE).order_by(Game.date).all()

    def find_on_date(self, on_date: Optional[DateType] = None) -> List[Game]:
        start, end = day_bounds(on_date)
        return self._with_teams().filter(Game.date >= start, Game.date < end).order_by(Game.date).all()
