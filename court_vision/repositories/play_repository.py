"""
Play and PlayTag repository.

PlayTag queries feed the analytics layer; they always eager-load the tag
and play so aggregation runs over in-memory rows without extra queries.
"""
from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import func, desc
from sqlalchemy.orm import joinedload, selectinload

from court_vision.models import Play, PlayTag, Tag
from court_vision.repositories.base import BaseRepository


class PlayRepository(BaseRepository[Play]):
    """Repository for tagged plays."""

    def __init__(self, db):
        super().__init__(Play, db)

    def _with_tags(self, include_game: bool = False):
        options = [
            selectinload(Play.play_tags).joinedload(PlayTag.tag),
            selectinload(Play.play_tags).joinedload(PlayTag.player),
            selectinload(Play.play_tags).joinedload(PlayTag.team),
            joinedload(Play.created_by),
        ]
        if include_game:
            options.append(joinedload(Play.game))
        return self.query().options(*options)

    def find_with_tags(self, play_id: str) -> Optional[Play]:
        return self._with_tags(include_game=True).filter(Play.id == play_id).first()

    def search(
        self,
        game_id: Optional[str] = None,
        player_id: Optional[str] = None,
        tag_id: Optional[str] = None,
        team_id: Optional[str] = None,
        include_game: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> Tuple[List[Play], int]:
        """
        Filtered play listing, newest first.

        Player, tag and team filters match plays having at least one
        PlayTag with that value.

        Returns:
            (plays, total matching)
        """
        query = self._with_tags(include_game=include_game)
        if game_id:
            query = query.filter(Play.game_id == game_id)
        tag_filters = []
        if player_id:
            tag_filters.append(PlayTag.player_id == player_id)
        if tag_id:
            tag_filters.append(PlayTag.tag_id == tag_id)
        if team_id:
            tag_filters.append(PlayTag.team_id == team_id)
        if tag_filters:
            query = query.filter(Play.play_tags.any(*tag_filters))

        total = query.count()
        plays = query.order_by(Play.created_at.desc()).offset(offset).limit(limit).all()
        return plays, total

    def recent_for_game(self, game_id: str, limit: int = 10) -> List[Play]:
        return self._with_tags().filter(Play.game_id == game_id).order_by(
            Play.created_at.desc()
        ).limit(limit).all()

    def count_for_game(self, game_id: str) -> int:
        return self.count(Play.game_id == game_id)

    # ========================================================================
    # PlayTag queries
    # ========================================================================

    def play_tags(
        self,
        player_id: Optional[str] = None,
        team_id: Optional[str] = None,
        game_id: Optional[str] = None,
        since: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[PlayTag]:
        """
        PlayTags matching the filters, most recent first.

        Args:
            game_id: Local game id (matched through the owning play)
            since: Only tags created at or after this time
        """
        query = self.db.query(PlayTag).join(PlayTag.play).options(
            joinedload(PlayTag.tag), joinedload(PlayTag.play)
        )
        if player_id:
            query = query.filter(PlayTag.player_id == player_id)
        if team_id:
            query = query.filter(PlayTag.team_id == team_id)
        if game_id:
            query = query.filter(Play.game_id == game_id)
        if since:
            query = query.filter(PlayTag.created_at >= since)
        query = query.order_by(PlayTag.created_at.desc(), PlayTag.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    def tag_counts_for_game(self, game_id: str) -> List[Tuple[str, int]]:
        """[(tag name, count), ...] for one game, largest first."""
        count = func.count(PlayTag.id)
        return (
            self.db.query(Tag.name, count)
            .join(PlayTag, PlayTag.tag_id == Tag.id)
            .join(Play, Play.id == PlayTag.play_id)
            .filter(Play.game_id == game_id)
            .group_by(Tag.name)
            .order_by(desc(count), Tag.name)
            .all()
        )
