"""
User Service

Read-only user lookups and the activity totals shown on a profile card.
"""

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import UserNotFoundException
from models.identity import CallerIdentity
from repositories.comment_repository import CommentRepository
from repositories.idea_repository import IdeaRepository
from repositories.user_repository import UserRepository
from repositories.vote_repository import VoteRepository


class UserService:
    """Service for user profiles and activity."""

    @staticmethod
    def get_user(db: Session, user_id: int) -> schemas.UserPublic:
        """
        Get a user's public profile.

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = UserRepository(db).get_by_id(user_id)
        if user is None:
            raise UserNotFoundException(user_id)
        return schemas.UserPublic.model_validate(user)

    @staticmethod
    def get_activity(
        db: Session, caller: CallerIdentity, user_id: int
    ) -> schemas.UserActivity:
        """
        Get a user's engagement totals as seen by the caller.

        Idea and comment counts only include ideas the caller may see, so a
        profile never reveals how many hidden ideas a user has. Vote totals
        count non-retracted votes and their signed sum. The approval rate is
        the share of those visible ideas that made it past moderation
        (approved or later), 0.0 for a user with no visible ideas.

        Args:
            db: Database session
            caller: Identity of the caller
            user_id: User whose activity is requested

        Returns:
            Activity totals

        Raises:
            UserNotFoundException: If the user does not exist
        """
        user = UserService.get_user(db, user_id)

        idea_repo = IdeaRepository(db)
        ideas_count = idea_repo.count_visible_by_user(
            user_id, caller.user_id, caller.is_moderator
        )
        approved_count = idea_repo.count_visible_by_user(
            user_id,
            caller.user_id,
            caller.is_moderator,
            statuses=db_models.PUBLIC_STATUSES,
        )
        comments_count = CommentRepository(db).count_visible_by_user(
            user_id, caller.user_id, caller.is_moderator
        )
        votes_cast, vote_total = VoteRepository(db).get_user_totals(user_id)

        return schemas.UserActivity(
            user_id=user.id,
            username=user.username,
            display_name=user.display_name,
            avatar_url=user.avatar_url,
            ideas_count=ideas_count,
            votes_cast=votes_cast,
            vote_total=vote_total,
            comments_count=comments_count,
            approval_rate=approved_count / ideas_count if ideas_count else 0.0,
        )
