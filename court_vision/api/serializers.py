"""
Model -> JSON conversion and the response envelope shared by all routes.

Every success body is ``{"success": true, "data": ...}``; list endpoints add
``pagination`` or ``count`` next to ``data``.
"""
import math
from datetime import datetime
from typing import Any, Dict, Optional

from court_vision.models import Game, Play, PlayTag, Player, Tag, Team, TeamStatistic


def ok(data: Any, **extra) -> Dict[str, Any]:
    return {"success": True, "data": data, **extra}


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {"page": page, "limit": limit, "total": total, "pages": math.ceil(total / limit) if limit else 0}


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def team_to_dict(team: Team) -> dict:
    """Convert Team model to dictionary."""
    return {
        "id": team.id,
        "externalId": team.external_id,
        "abbreviation": team.abbreviation,
        "name": team.name,
        "displayName": team.display_name,
        "shortDisplayName": team.short_display_name,
        "nickname": team.nickname,
        "city": team.city,
        "conference": team.conference,
        "division": team.division,
        "primaryColor": team.primary_color,
        "alternateColor": team.alternate_color,
        "logoUrl": team.logo_url,
        "logoDarkUrl": team.logo_dark_url,
        "isActive": team.is_active,
        "lastSynced": _iso(team.last_synced),
    }


def game_to_dict(game: Game, include_teams: bool = True) -> dict:
    data = {
        "id": game.id,
        "externalId": game.external_id,
        "date": _iso(game.date),
        "status": game.status.value if game.status else None,
        "season": game.season,
        "venue": game.venue,
        "homeTeamId": game.home_team_id,
        "awayTeamId": game.away_team_id,
        "homeScore": game.home_score,
        "awayScore": game.away_score,
        "lastSynced": _iso(game.last_synced),
    }
    if include_teams:
        data["homeTeam"] = team_to_dict(game.home_team) if game.home_team else None
        data["awayTeam"] = team_to_dict(game.away_team) if game.away_team else None
    return data


def player_to_dict(player: Player, include_team: bool = False) -> dict:
    data = {
        "externalId": player.external_id,
        "name": player.name,
        "firstName": player.first_name,
        "lastName": player.last_name,
        "fullName": player.full_name,
        "shortName": player.short_name,
        "position": player.position,
        "teamExternalId": player.team_external_id,
        "jerseyNumber": player.jersey_number,
        "height": player.height,
        "weight": player.weight,
        "age": player.age,
        "college": player.college,
        "experience": player.experience,
        "active": player.active,
        "status": player.status,
        "headshotUrl": player.headshot_url,
        "balldontlieId": player.balldontlie_id,
        "seasonAverages": player.season_averages,
        "lastSynced": _iso(player.last_synced),
    }
    if include_team:
        data["team"] = team_to_dict(player.team) if player.team else None
    return data


def tag_to_dict(tag: Tag) -> dict:
    return {
        "id": tag.id,
        "name": tag.name,
        "category": tag.category,
        "subcategory": tag.subcategory,
        "description": tag.description,
        "icon": tag.icon,
        "color": tag.color,
        "triggers": tag.triggers or {},
        "suggestions": tag.suggestions or [],
        "isActive": tag.is_active,
    }


def play_tag_to_dict(play_tag: PlayTag) -> dict:
    return {
        "id": play_tag.id,
        "tagId": play_tag.tag_id,
        "tag": tag_to_dict(play_tag.tag) if play_tag.tag else None,
        "playerId": play_tag.player_id,
        "playerName": play_tag.player.name if play_tag.player else None,
        "teamId": play_tag.team_id,
        "teamAbbreviation": play_tag.team.abbreviation if play_tag.team else None,
        "context": play_tag.context,
        "confidence": play_tag.confidence,
        "createdAt": _iso(play_tag.created_at),
    }


def play_to_dict(play: Play, include_game: bool = False) -> dict:
    data = {
        "id": play.id,
        "gameId": play.game_id,
        "quarter": play.quarter,
        "gameTime": play.game_time,
        "description": play.description,
        "createdById": play.created_by_id,
        "createdBy": (play.created_by.username or play.created_by.email) if play.created_by else None,
        "createdAt": _iso(play.created_at),
        "tags": [play_tag_to_dict(pt) for pt in play.play_tags],
    }
    if include_game:
        data["game"] = game_to_dict(play.game) if play.game else None
    return data


def team_statistic_to_dict(stat: TeamStatistic) -> dict:
    return {
        "season": stat.season,
        "seasonType": stat.season_type,
        "category": stat.category,
        "name": stat.stat_name,
        "displayName": stat.display_name,
        "abbreviation": stat.abbreviation,
        "value": stat.value,
        "displayValue": stat.display_value,
        "perGameValue": stat.per_game_value,
    }
