"""
Team repository.

Usage:
    repo = TeamRepository(db)
    celtics = repo.find_by_external_id("2")
    celtics = repo.find_by_identifier("BOS")
"""
from typing import Optional, List

from sqlalchemy import or_, func

from court_vision.models import Team, TeamStatistic
from court_vision.repositories.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    """Repository for NBA team data access."""

    def __init__(self, db):
        super().__init__(Team, db)

    def find_by_external_id(self, external_id: str) -> Optional[Team]:
        return self.where_first(Team.external_id == str(external_id))

    def find_by_abbreviation(self, abbreviation: str) -> Optional[Team]:
        return self.where_first(func.upper(Team.abbreviation) == abbreviation.upper())

    def find_by_identifier(self, identifier: str) -> Optional[Team]:
        """Resolve a team by local id, ESPN id or abbreviation."""
        return self.where_first(or_(
            Team.id == identifier,
            Team.external_id == identifier,
            func.upper(Team.abbreviation) == identifier.upper(),
        ))

    def find_active(self, conference: Optional[str] = None) -> List[Team]:
        query = self.query().filter(Team.is_active.is_(True), Team.is_all_star.is_(False))
        if conference:
            query = query.filter(func.lower(Team.conference) == conference.lower())
        return query.order_by(Team.name).all()

    def external_id_set(self) -> set:
        """All ESPN team ids currently in the store."""
        return {row[0] for row in self.db.query(Team.external_id).all()}

    def statistics(self, team: Team, season: Optional[str] = None,
                   season_type: Optional[int] = None) -> List[TeamStatistic]:
        query = self.db.query(TeamStatistic).filter(TeamStatistic.team_id == team.id)
        if season:
            query = query.filter(TeamStatistic.season == season)
        if season_type is not None:
            query = query.filter(TeamStatistic.season_type == season_type)
        return query.order_by(TeamStatistic.category, TeamStatistic.stat_name).all()
