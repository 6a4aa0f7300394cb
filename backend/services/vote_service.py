"""
Vote service for business logic.

Each user holds at most one vote per idea. Casting again replaces the value;
casting 0 retracts the vote but keeps its row.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.exceptions import (
    AuthenticationRequiredException,
    IdeaLockedException,
    IdeaNotFoundException,
    InvalidVoteValueException,
)
from models.identity import CallerIdentity
from repositories.database import unit_of_work
from repositories.idea_repository import IdeaRepository
from repositories.vote_repository import VoteRepository
from services.moderation_service import ModerationService


class VoteService:
    """Service for vote-related business logic."""

    @staticmethod
    def validate_value(value: Any) -> int:
        """
        Check that a vote value is -1, 0 or 1.

        Raises:
            InvalidVoteValueException: For any other value (booleans included)
        """
        if isinstance(value, bool) or value not in db_models.VALID_VOTE_VALUES:
            raise InvalidVoteValueException(value)
        return int(value)

    @staticmethod
    def cast_vote(
        db: Session, caller: CallerIdentity, idea_id: int, value: Any
    ) -> schemas.VoteResult:
        """
        Cast, change or retract the caller's vote on an idea.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID
            value: 1 (up), -1 (down) or 0 (retract)

        Returns:
            The caller's recorded value and the idea's new tally

        Raises:
            AuthenticationRequiredException: If the caller is anonymous
            InvalidVoteValueException: If value is not -1, 0 or 1
            IdeaNotFoundException: If the idea does not exist
            IdeaLockedException: If the idea is not publicly visible
        """
        if not caller.is_authenticated:
            raise AuthenticationRequiredException()
        vote_value = VoteService.validate_value(value)

        idea_repo = IdeaRepository(db)
        vote_repo = VoteRepository(db)

        with unit_of_work(db):
            idea = idea_repo.get_by_id(idea_id)
            if idea is None:
                raise IdeaNotFoundException(idea_id)
            if not ModerationService.is_public(idea.status):
                raise IdeaLockedException(idea_id, idea.status.value, "vote on")

            vote_repo.upsert(idea_id, caller.user_id, vote_value)  # type: ignore[arg-type]

        return schemas.VoteResult(
            idea_id=idea_id,
            user_vote=VoteService.get_user_vote(db, caller.user_id, idea_id),  # type: ignore[arg-type]
            vote_count=vote_repo.get_tally(idea_id),
        )

    @staticmethod
    def get_user_vote(db: Session, user_id: int, idea_id: int) -> int:
        """
        Get a user's vote value on an idea.

        Args:
            db: Database session
            user_id: User ID
            idea_id: Idea ID

        Returns:
            -1, 0 or 1; 0 when the user never voted or retracted
        """
        vote = VoteRepository(db).get_by_idea_and_user(idea_id, user_id)
        return int(vote.value) if vote is not None else 0

    @staticmethod
    def get_vote_row(
        db: Session, user_id: int, idea_id: int
    ) -> Optional[db_models.Vote]:
        """
        Get the vote row itself, to tell "never voted" (None) apart from a
        retracted vote (row with value 0).
        """
        return VoteRepository(db).get_by_idea_and_user(idea_id, user_id)

    @staticmethod
    def get_vote_count(db: Session, idea_id: int) -> int:
        """
        Get the tally of an idea: the sum of all vote values.

        Args:
            db: Database session
            idea_id: Idea ID

        Returns:
            Signed tally, 0 for an idea without votes
        """
        return VoteRepository(db).get_tally(idea_id)

    @staticmethod
    def get_vote_counts_batch(db: Session, idea_ids: list[int]) -> dict[int, int]:
        """Get tallies for several ideas in one query."""
        return VoteRepository(db).get_tallies_batch(idea_ids)
