"""Tests for the BallDontLie linking and ESPN team statistics sync jobs."""
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.orm import Session

from court_vision.models import Player, TeamStatistic
from court_vision.services.providers import BallDontLieService, ESPNApiService, ProviderError
from court_vision.services.sync.balldontlie_sync import BallDontLieSyncService
from court_vision.services.sync.team_stats_sync import TeamStatsSyncService


def bdl_player(bdl_id, first, last, abbreviation, conference="West"):
    return {
        "id": bdl_id,
        "first_name": first,
        "last_name": last,
        "team": {"abbreviation": abbreviation, "conference": conference},
    }


def bdl_client(*pages) -> Mock:
    client = Mock(spec=BallDontLieService)

    async def iter_player_pages(per_page=None, max_pages=None):
        for page in pages:
            yield page

    client.iter_player_pages = iter_player_pages
    client.get_season_averages = AsyncMock(return_value=[])
    return client


@pytest.fixture
def curry(db_session: Session, sample_teams) -> Player:
    player = Player(external_id="3975", name="Stephen Curry", first_name="Stephen",
                    last_name="Curry", position="PG", team_external_id="9")
    db_session.add(player)
    db_session.commit()
    return player


class TestBallDontLieSync:

    @pytest.mark.asyncio
    async def test_links_players_by_name_and_team(self, db_session: Session, sample_players, curry):
        client = bdl_client([
            bdl_player(115, "Stephen", "Curry", "GSW"),
            bdl_player(237, "LeBron", "James", "LAL"),
            bdl_player(999, "Nobody", "Here", "LAL"),
            bdl_player(500, "Old", "Timer", "BAL", conference="   "),
        ])

        result = await BallDontLieSyncService(db_session, client, delay=0).link_players()

        assert result.created == 2
        assert result.skipped == 1
        assert db_session.get(Player, "3975").balldontlie_id == 115
        assert db_session.get(Player, "1966").balldontlie_id == 237

    @pytest.mark.asyncio
    async def test_season_averages_for_linked_players(self, db_session: Session, curry):
        curry.balldontlie_id = 115
        db_session.commit()
        client = bdl_client()
        client.get_season_averages.return_value = [{"player_id": 115, "pts": 26.4, "games_played": 74}]

        result = await BallDontLieSyncService(db_session, client, delay=0).sync_season_averages(season=2024)

        assert result.created == 1
        client.get_season_averages.assert_awaited_once_with(2024, [115])
        db_session.refresh(curry)
        assert curry.season_averages == {"pts": 26.4, "games_played": 74}
        assert curry.has_statistics is True

    @pytest.mark.asyncio
    async def test_failed_batch_is_counted(self, db_session: Session, curry):
        curry.balldontlie_id = 115
        db_session.commit()
        client = bdl_client()
        client.get_season_averages.side_effect = ProviderError("balldontlie", "u", "HTTP 401", 401)

        result = await BallDontLieSyncService(db_session, client, delay=0).sync_season_averages(season=2024)

        assert result.errors == 1
        assert result.details[0]["id"] == "batch@0"


class TestTeamStatsSync:

    @pytest.mark.asyncio
    async def test_upserts_category_rows(self, db_session: Session, sample_teams):
        espn = Mock(spec=ESPNApiService)
        espn.get_team_statistics = AsyncMock(return_value=[
            {"name": "offensive", "stats": [
                {"name": "avgPoints", "displayName": "Points Per Game", "abbreviation": "PTS",
                 "value": 117.2, "displayValue": "117.2"},
                {"displayName": "nameless row"},
            ]},
        ])
        service = TeamStatsSyncService(db_session, espn, delay=0)

        first = await service.sync_team_stats(season="2025")
        second = await service.sync_team_stats(season="2025")

        assert first.created == 3  # one row per team
        assert second.updated == 3
        row = db_session.query(TeamStatistic).filter_by(stat_name="avgPoints").first()
        assert row.category == "offensive"
        assert row.value == 117.2
        assert row.season_type == 2

    @pytest.mark.asyncio
    async def test_failed_team_does_not_stop_others(self, db_session: Session, sample_teams):
        espn = Mock(spec=ESPNApiService)
        espn.get_team_statistics = AsyncMock(side_effect=[
            ProviderError("espn", "u", "HTTP 404", 404),
            [{"name": "defensive", "stats": [{"name": "avgBlocks", "value": 5.1}]}],
            [],
        ])

        result = await TeamStatsSyncService(db_session, espn, delay=0).sync_team_stats(season="2025")

        assert result.errors == 1
        assert result.created == 1
