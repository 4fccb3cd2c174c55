"""Tests for SyncOrchestrator and the sync run log."""
import json
from unittest.mock import AsyncMock, Mock

import pytest
from sqlalchemy.orm import Session

from court_vision.services.providers import ESPNApiService, ProviderError
from court_vision.services.sync.orchestrator import SyncOrchestrator, UnknownSyncJob, ALL_JOBS_ORDER
from court_vision.services.sync.run_log import SyncRunLog


@pytest.fixture
def espn():
    client = Mock(spec=ESPNApiService)
    client.get_team_refs = AsyncMock(return_value=[])
    client.get_scoreboard = AsyncMock(return_value=[])
    client.close = AsyncMock()
    return client


@pytest.fixture
def run_log(tmp_path):
    return SyncRunLog(str(tmp_path / "sync"))


class TestSyncOrchestrator:

    @pytest.mark.asyncio
    async def test_successful_run_is_logged(self, db_session: Session, espn, run_log):
        orchestrator = SyncOrchestrator(db_session, espn=espn, run_log=run_log, espn_delay=0)

        outcome = await orchestrator.run("teams", write_log=True)

        assert outcome["success"] is True
        assert outcome["job"] == "teams"
        assert outcome["result"]["created"] == 0
        assert run_log.recent("teams")[0]["status"] == "success"

    @pytest.mark.asyncio
    async def test_provider_failure_reports_unsuccessful(self, db_session: Session, espn, run_log):
        espn.get_scoreboard.side_effect = ProviderError("espn", "https://example.test/scoreboard", "HTTP 503", 503)
        orchestrator = SyncOrchestrator(db_session, espn=espn, run_log=run_log, espn_delay=0)

        outcome = await orchestrator.run("games", write_log=True, dates="20250115")

        assert outcome["success"] is False
        assert "HTTP 503" in outcome["error"]
        entry = run_log.recent("games")[0]
        assert entry["status"] == "failed"
        assert entry["result"] is None

    @pytest.mark.asyncio
    async def test_unknown_job(self, db_session: Session, espn):
        orchestrator = SyncOrchestrator(db_session, espn=espn)

        with pytest.raises(UnknownSyncJob):
            await orchestrator.run("odds")
        with pytest.raises(UnknownSyncJob):
            orchestrator.get_run_history("odds")

    @pytest.mark.asyncio
    async def test_run_all_continues_after_failure(self, db_session: Session, espn, run_log):
        espn.get_team_refs.side_effect = ProviderError("espn", "https://example.test/teams", "timeout")
        orchestrator = SyncOrchestrator(db_session, espn=espn, run_log=run_log, espn_delay=0)
        orchestrator.sync_players = AsyncMock(side_effect=ProviderError("espn", "u", "down"))
        orchestrator.sync_team_stats = AsyncMock(side_effect=ProviderError("espn", "u", "down"))

        outcome = await orchestrator.run("all", force=True)

        assert outcome["success"] is False
        assert [r["job"] for r in outcome["results"]] == list(ALL_JOBS_ORDER)
        assert [r["success"] for r in outcome["results"]] == [False, False, True, True, False]

    @pytest.mark.asyncio
    async def test_close_closes_created_clients(self, db_session: Session, espn):
        orchestrator = SyncOrchestrator(db_session, espn=espn)

        await orchestrator.close()

        espn.close.assert_awaited_once()

    def test_sync_status_counts(self, db_session: Session, sample_game, sample_tags, run_log):
        run_log.append("teams", "success", result={"created": 3})
        orchestrator = SyncOrchestrator(db_session, run_log=run_log)

        status = orchestrator.get_sync_status()

        assert status["entities"]["teams"]["total"] == 3
        assert status["entities"]["games"]["total"] == 1
        assert status["tagging"]["tags"] == len(sample_tags)
        assert status["last_runs"]["teams"]["result"] == {"created": 3}
        assert status["last_runs"]["games"] is None


class TestSyncRunLog:

    def test_recent_is_newest_first(self, run_log):
        for created in range(3):
            run_log.append("players", "success", result={"created": created})

        entries = run_log.recent("players", limit=2)

        assert [e["result"]["created"] for e in entries] == [2, 1]

    def test_missing_directory(self, tmp_path):
        assert SyncRunLog(str(tmp_path / "nowhere")).recent("teams") == []

    def test_malformed_lines_are_skipped(self, run_log):
        path = run_log.append("games", "success", offseason=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write("not json\n")

        entries = run_log.recent("games")

        assert len(entries) == 1
        assert entries[0]["offseason"] is True
        assert json.loads(path.read_text().splitlines()[0])["job"] == "games"
