"""Tests for ModerationService."""

import pytest

import repositories.db_models as db_models
from models.exceptions import (
    IdeaNotFoundException,
    InvalidTransitionException,
    ModeratorRequiredException,
)
from models.identity import ANONYMOUS, CallerIdentity
from repositories.db_models import IdeaStatus
from repositories.idea_repository import IdeaRepository
from services.moderation_service import ModerationService


class TestTransitionTable:
    """The status state machine."""

    @pytest.mark.parametrize(
        "current,target",
        [
            (IdeaStatus.PENDING, IdeaStatus.APPROVED),
            (IdeaStatus.PENDING, IdeaStatus.REJECTED),
            (IdeaStatus.APPROVED, IdeaStatus.IN_PROGRESS),
            (IdeaStatus.IN_PROGRESS, IdeaStatus.COMPLETED),
        ],
    )
    def test_allowed_transitions(self, current, target):
        assert ModerationService.can_transition(current, target) is True

    @pytest.mark.parametrize(
        "current,target",
        [
            (IdeaStatus.PENDING, IdeaStatus.COMPLETED),
            (IdeaStatus.APPROVED, IdeaStatus.PENDING),
            (IdeaStatus.REJECTED, IdeaStatus.APPROVED),
            (IdeaStatus.COMPLETED, IdeaStatus.IN_PROGRESS),
            (IdeaStatus.IN_PROGRESS, IdeaStatus.REJECTED),
        ],
    )
    def test_forbidden_transitions(self, current, target):
        assert ModerationService.can_transition(current, target) is False

    def test_terminal_statuses_have_no_targets(self):
        assert ModerationService.allowed_targets(IdeaStatus.REJECTED) == []
        assert ModerationService.allowed_targets(IdeaStatus.COMPLETED) == []
        assert ModerationService.allowed_targets(IdeaStatus.PENDING) == [
            IdeaStatus.APPROVED,
            IdeaStatus.REJECTED,
        ]


class TestVisibilityRule:
    def test_is_public(self):
        assert [s for s in IdeaStatus if ModerationService.is_public(s)] == [
            IdeaStatus.APPROVED,
            IdeaStatus.IN_PROGRESS,
            IdeaStatus.COMPLETED,
        ]

    def test_public_statuses_visible_to_anonymous(self):
        for status in (IdeaStatus.APPROVED, IdeaStatus.IN_PROGRESS, IdeaStatus.COMPLETED):
            assert ModerationService.is_visible_to(status, 1, ANONYMOUS)

    def test_hidden_statuses(self):
        stranger = CallerIdentity(user_id=2)
        owner = CallerIdentity(user_id=1)
        moderator = CallerIdentity(user_id=3, is_moderator=True)

        for status in (IdeaStatus.PENDING, IdeaStatus.REJECTED):
            assert not ModerationService.is_visible_to(status, 1, ANONYMOUS)
            assert not ModerationService.is_visible_to(status, 1, stranger)
            assert ModerationService.is_visible_to(status, 1, owner)
            assert ModerationService.is_visible_to(status, 1, moderator)


class TestTransitionStatus:
    """Test cases for moderation writes."""

    def test_approve_pending_idea(self, db_session, moderator_identity, pending_idea):
        result = ModerationService.transition_status(
            db_session, moderator_identity, pending_idea.id, IdeaStatus.APPROVED
        )

        assert result.status == IdeaStatus.APPROVED
        assert result.validated_at is not None

    def test_reject_with_note(self, db_session, moderator_identity, pending_idea):
        result = ModerationService.transition_status(
            db_session,
            moderator_identity,
            pending_idea.id,
            IdeaStatus.REJECTED,
            note="Duplicate of an existing idea",
        )

        assert result.status == IdeaStatus.REJECTED
        assert result.moderator_note == "Duplicate of an existing idea"

    def test_full_lifecycle(self, db_session, moderator_identity, pending_idea):
        idea_id = pending_idea.id
        for target in (IdeaStatus.APPROVED, IdeaStatus.IN_PROGRESS, IdeaStatus.COMPLETED):
            result = ModerationService.transition_status(
                db_session, moderator_identity, idea_id, target
            )
            assert result.status == target

    def test_non_moderator_rejected(self, db_session, user_identity, pending_idea):
        """Even the owner cannot moderate their own idea."""
        with pytest.raises(ModeratorRequiredException):
            ModerationService.transition_status(
                db_session, user_identity, pending_idea.id, IdeaStatus.APPROVED
            )

        assert (
            IdeaRepository(db_session).get_by_id(pending_idea.id).status
            == IdeaStatus.PENDING
        )

    def test_non_moderator_checked_before_existence(self, db_session, user_identity):
        with pytest.raises(ModeratorRequiredException):
            ModerationService.transition_status(
                db_session, user_identity, 99999, IdeaStatus.APPROVED
            )

    def test_missing_idea(self, db_session, moderator_identity):
        with pytest.raises(IdeaNotFoundException):
            ModerationService.transition_status(
                db_session, moderator_identity, 99999, IdeaStatus.APPROVED
            )

    def test_invalid_transition(self, db_session, moderator_identity, rejected_idea):
        with pytest.raises(InvalidTransitionException) as exc_info:
            ModerationService.transition_status(
                db_session, moderator_identity, rejected_idea.id, IdeaStatus.APPROVED
            )

        assert exc_info.value.current == "rejected"
        assert exc_info.value.target == "approved"

    def test_same_status_is_idempotent(
        self, db_session, moderator_identity, test_idea
    ):
        before = IdeaRepository(db_session).get_by_id(test_idea.id).updated_at

        result = ModerationService.transition_status(
            db_session, moderator_identity, test_idea.id, IdeaStatus.APPROVED
        )

        assert result.status == IdeaStatus.APPROVED
        assert IdeaRepository(db_session).get_by_id(test_idea.id).updated_at == before

    def test_lost_race_to_same_target_succeeds(
        self, db_session, moderator_identity, pending_idea, monkeypatch
    ):
        """Another moderator approved first: the second approval still succeeds."""
        idea_id = pending_idea.id
        original = IdeaRepository.compare_and_set_status

        def approve_first(self, idea_id, expected, target, **kwargs):
            original(self, idea_id, expected, target, **kwargs)
            return False

        monkeypatch.setattr(IdeaRepository, "compare_and_set_status", approve_first)

        result = ModerationService.transition_status(
            db_session, moderator_identity, idea_id, IdeaStatus.APPROVED
        )

        assert result.status == IdeaStatus.APPROVED

    def test_lost_race_to_other_target_fails(
        self, db_session, moderator_identity, pending_idea, monkeypatch
    ):
        """Another moderator rejected first: approving now is a conflict."""
        idea_id = pending_idea.id
        original = IdeaRepository.compare_and_set_status

        def reject_first(self, idea_id, expected, target, **kwargs):
            original(self, idea_id, expected, IdeaStatus.REJECTED)
            return False

        monkeypatch.setattr(IdeaRepository, "compare_and_set_status", reject_first)

        with pytest.raises(InvalidTransitionException):
            ModerationService.transition_status(
                db_session, moderator_identity, idea_id, IdeaStatus.APPROVED
            )

        # The failed call rolled back the competing write too
        assert (
            IdeaRepository(db_session).get_by_id(idea_id).status
            == db_models.IdeaStatus.PENDING
        )
