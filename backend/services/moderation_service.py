"""
Service for idea moderation.

Owns the idea status state machine and the visibility rule derived from it.
"""

from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
from models.exceptions import (
    IdeaNotFoundException,
    InvalidTransitionException,
    ModeratorRequiredException,
)
from models.identity import CallerIdentity
from repositories.database import unit_of_work
from repositories.db_models import PUBLIC_STATUSES, Idea, IdeaStatus
from repositories.idea_repository import IdeaRepository

# Allowed moderator transitions: current status -> reachable statuses
TRANSITIONS: dict[IdeaStatus, frozenset[IdeaStatus]] = {
    IdeaStatus.PENDING: frozenset({IdeaStatus.APPROVED, IdeaStatus.REJECTED}),
    IdeaStatus.APPROVED: frozenset({IdeaStatus.IN_PROGRESS}),
    IdeaStatus.IN_PROGRESS: frozenset({IdeaStatus.COMPLETED}),
    IdeaStatus.REJECTED: frozenset(),
    IdeaStatus.COMPLETED: frozenset(),
}

# Decisions on a pending idea record when they were made
_DECISION_STATUSES = frozenset({IdeaStatus.APPROVED, IdeaStatus.REJECTED})


class ModerationService:
    """Service for moderation transitions and idea visibility."""

    @staticmethod
    def can_transition(current: IdeaStatus, target: IdeaStatus) -> bool:
        """True if a moderator may move an idea from current to target."""
        return target in TRANSITIONS.get(current, frozenset())

    @staticmethod
    def allowed_targets(current: IdeaStatus) -> list[IdeaStatus]:
        """Statuses reachable from current, in declaration order."""
        reachable = TRANSITIONS.get(current, frozenset())
        return [status for status in IdeaStatus if status in reachable]

    @staticmethod
    def is_public(status: IdeaStatus) -> bool:
        return status in PUBLIC_STATUSES

    @staticmethod
    def is_visible_to(
        status: IdeaStatus, owner_id: int, caller: CallerIdentity
    ) -> bool:
        """
        Visibility rule for a single idea.

        Public statuses are visible to everyone; the owner and moderators see
        the idea in any status.
        """
        return (
            status in PUBLIC_STATUSES or caller.is_moderator or caller.owns(owner_id)
        )

    @staticmethod
    def transition_status(
        db: Session,
        caller: CallerIdentity,
        idea_id: int,
        target: IdeaStatus,
        note: Optional[str] = None,
    ) -> schemas.IdeaAggregate:
        """
        Move an idea to a new status.

        Requesting the status an idea already holds succeeds without writing.
        The update is a compare-and-set on the status read beforehand: if
        another moderator changed it in between, the call succeeds only when
        the idea ended up in the requested status.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID
            target: Requested status
            note: Optional moderator note stored with the change

        Returns:
            The idea's aggregate row after the change

        Raises:
            ModeratorRequiredException: If the caller is not a moderator
            IdeaNotFoundException: If the idea does not exist
            InvalidTransitionException: If the move is not allowed from the
                idea's current status
        """
        if not caller.is_moderator:
            raise ModeratorRequiredException()

        idea_repo = IdeaRepository(db)

        with unit_of_work(db):
            idea: Idea | None = idea_repo.get_by_id(idea_id)
            if idea is None:
                raise IdeaNotFoundException(idea_id)

            current = idea.status
            if current != target:
                if not ModerationService.can_transition(current, target):
                    raise InvalidTransitionException(current.value, target.value)

                updated = idea_repo.compare_and_set_status(
                    idea_id,
                    expected=current,
                    target=target,
                    note=note,
                    stamp_validated=target in _DECISION_STATUSES,
                )
                if not updated:
                    idea = idea_repo.get_by_id(idea_id)
                    if idea is None:
                        raise IdeaNotFoundException(idea_id)
                    if idea.status != target:
                        raise InvalidTransitionException(
                            idea.status.value, target.value
                        )
                else:
                    logger.info(
                        f"Idea {idea_id} moved from {current.value} to "
                        f"{target.value} by moderator {caller.user_id}"
                    )

        aggregate = idea_repo.get_aggregate(idea_id, caller.user_id)
        if aggregate is None:
            raise IdeaNotFoundException(idea_id)
        return aggregate
