"""Tests for UserService."""

import pytest

from models.exceptions import UserNotFoundException
from models.identity import ANONYMOUS
from repositories.db_models import IdeaStatus
from services.comment_service import CommentService
from services.user_service import UserService
from services.vote_service import VoteService


class TestUserService:
    """Test cases for user profiles and activity."""

    def test_get_user(self, db_session, test_user):
        user = UserService.get_user(db_session, test_user.id)
        assert user.username == "testuser"
        assert user.display_name == "Test User"

    def test_get_missing_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            UserService.get_user(db_session, 99999)

    def test_activity_counts(
        self,
        db_session,
        test_user,
        user_identity,
        other_identity,
        test_idea,
        pending_idea,
        make_idea,
    ):
        second = make_idea(title="Second")
        VoteService.cast_vote(db_session, user_identity, test_idea.id, 1)
        VoteService.cast_vote(db_session, user_identity, second.id, -1)
        VoteService.cast_vote(db_session, other_identity, test_idea.id, 1)
        CommentService.add_comment(db_session, user_identity, test_idea.id, "Public")
        CommentService.add_comment(db_session, user_identity, pending_idea.id, "Hidden")

        public_view = UserService.get_activity(db_session, ANONYMOUS, test_user.id)
        own_view = UserService.get_activity(db_session, user_identity, test_user.id)

        assert public_view.ideas_count == 2
        assert public_view.comments_count == 1
        assert public_view.votes_cast == 2
        assert public_view.vote_total == 0
        assert own_view.ideas_count == 3
        assert own_view.comments_count == 2

    def test_approval_rate(
        self,
        db_session,
        test_user,
        other_user,
        user_identity,
        moderator_identity,
        test_idea,
        pending_idea,
        rejected_idea,
        make_idea,
    ):
        make_idea(title="Underway", status=IdeaStatus.IN_PROGRESS)

        public_view = UserService.get_activity(db_session, ANONYMOUS, test_user.id)
        own_view = UserService.get_activity(db_session, user_identity, test_user.id)
        moderator_view = UserService.get_activity(
            db_session, moderator_identity, test_user.id
        )
        no_ideas = UserService.get_activity(db_session, ANONYMOUS, other_user.id)

        assert public_view.approval_rate == 1.0
        assert own_view.ideas_count == 4
        assert own_view.approval_rate == pytest.approx(0.5)
        assert moderator_view.approval_rate == pytest.approx(0.5)
        assert no_ideas.ideas_count == 0
        assert no_ideas.approval_rate == 0.0

    def test_retracted_votes_not_counted(
        self, db_session, test_user, user_identity, test_idea
    ):
        VoteService.cast_vote(db_session, user_identity, test_idea.id, 1)
        VoteService.cast_vote(db_session, user_identity, test_idea.id, 0)

        activity = UserService.get_activity(db_session, ANONYMOUS, test_user.id)

        assert activity.votes_cast == 0

    def test_activity_missing_user(self, db_session):
        with pytest.raises(UserNotFoundException):
            UserService.get_activity(db_session, ANONYMOUS, 99999)
