"""Tests for atomic play creation."""
import pytest
from pydantic import ValidationError
from sqlalchemy.orm import Session

from court_vision.models import Play, PlayTag
from court_vision.services.tagging import (
    PlayCreate,
    PlayService,
    PlayTagContext,
    PlayTagInput,
    PlayValidationError,
)


def _tag_input(tag, sequence, total=2, **kwargs):
    return PlayTagInput(
        tag_id=tag.id,
        context=PlayTagContext(action=tag.name, sequence=sequence, total_actions=total),
        **kwargs,
    )


class TestCreatePlay:

    def test_creates_play_with_all_tags(self, db_session: Session, sample_game, sample_tags,
                                        sample_players, sample_teams, sample_user):
        tatum = sample_players["tatum"]
        payload = PlayCreate(
            game_id=sample_game.external_id,
            quarter=2,
            game_time="7:42",
            description="Tatum iso into a step back",
            created_by_id=sample_user.id,
            tags=[
                _tag_input(sample_tags["Isolation"], 1, player_id=tatum.external_id,
                           team_id=sample_teams["BOS"].id),
                _tag_input(sample_tags["Step Back"], 2, player_id=tatum.external_id,
                           team_id=sample_teams["BOS"].id, confidence=0.8),
            ],
        )

        play = PlayService(db_session).create_play(payload)

        assert play.game_id == sample_game.id
        assert play.quarter == 2
        assert len(play.play_tags) == 2
        contexts = sorted(pt.context["sequence"] for pt in play.play_tags)
        assert contexts == [1, 2]
        step_back = next(pt for pt in play.play_tags if pt.tag.name == "Step Back")
        assert step_back.confidence == 0.8
        assert step_back.context == {"action": "Step Back", "sequence": 2, "totalActions": 2}

    def test_unknown_game_is_404_and_writes_nothing(self, db_session: Session, sample_tags):
        payload = PlayCreate(game_id="does-not-exist", tags=[_tag_input(sample_tags["Isolation"], 1)])

        with pytest.raises(PlayValidationError) as excinfo:
            PlayService(db_session).create_play(payload)

        assert excinfo.value.status_code == 404
        assert db_session.query(Play).count() == 0
        assert db_session.query(PlayTag).count() == 0

    def test_unknown_tag_is_400(self, db_session: Session, sample_game, sample_tags):
        payload = PlayCreate(
            game_id=sample_game.id,
            tags=[
                _tag_input(sample_tags["Isolation"], 1),
                PlayTagInput(tag_id="missing-tag",
                             context=PlayTagContext(action="Ghost", sequence=2, total_actions=2)),
            ],
        )

        with pytest.raises(PlayValidationError) as excinfo:
            PlayService(db_session).create_play(payload)

        assert excinfo.value.status_code == 400
        assert "missing-tag" in excinfo.value.message
        assert db_session.query(Play).count() == 0

    def test_unknown_player_is_400(self, db_session: Session, sample_game, sample_tags):
        payload = PlayCreate(
            game_id=sample_game.id,
            tags=[_tag_input(sample_tags["Isolation"], 1, player_id="999999")],
        )
        with pytest.raises(PlayValidationError, match="Player 999999"):
            PlayService(db_session).create_play(payload)

    def test_unknown_creator_is_400(self, db_session: Session, sample_game, sample_tags):
        payload = PlayCreate(
            game_id=sample_game.id,
            created_by_id="nobody",
            tags=[_tag_input(sample_tags["Isolation"], 1)],
        )
        with pytest.raises(PlayValidationError, match="User nobody"):
            PlayService(db_session).create_play(payload)

    def test_unadvised_transition_is_still_recorded(self, db_session: Session, sample_game, sample_tags):
        # Steal is terminal in the quick-action map; the play is saved anyway
        payload = PlayCreate(
            game_id=sample_game.id,
            tags=[_tag_input(sample_tags["Steal"], 1), _tag_input(sample_tags["Isolation"], 2)],
        )
        play = PlayService(db_session).create_play(payload)
        assert len(play.play_tags) == 2


class TestPlayTagContext:

    def test_accepts_camel_case(self):
        context = PlayTagContext.model_validate({"action": "Isolation", "sequence": 1, "totalActions": 3})
        assert context.total_actions == 3
        assert context.to_json() == {"action": "Isolation", "sequence": 1, "totalActions": 3}

    def test_sequence_must_be_positive(self):
        with pytest.raises(ValidationError):
            PlayTagContext(action="Isolation", sequence=0, total_actions=1)

    def test_context_is_required(self):
        with pytest.raises(ValidationError):
            PlayTagInput.model_validate({"tagId": "abc"})
