"""
Idea service for business logic.

Submission, owner edits and deletion of pending ideas, and the visibility
filtered reads that every idea listing and detail page goes through.
"""

from typing import List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import clean_text_field
from models.config import settings
from models.exceptions import (
    AuthenticationRequiredException,
    IdeaLockedException,
    IdeaNotFoundException,
    NotIdeaOwnerException,
)
from models.identity import CallerIdentity
from repositories.category_repository import CategoryRepository
from repositories.comment_repository import CommentRepository
from repositories.database import unit_of_work
from repositories.idea_repository import IdeaRepository
from repositories.vote_repository import VoteRepository
from services import ranking
from services.category_service import CategoryService
from services.moderation_service import ModerationService


class IdeaService:
    """Service for idea-related business logic."""

    @staticmethod
    def _check_owner_and_pending(
        idea: Optional[db_models.Idea],
        idea_id: int,
        caller: CallerIdentity,
        action: str,
    ) -> db_models.Idea:
        if idea is None:
            raise IdeaNotFoundException(idea_id)
        if not caller.owns(idea.user_id):
            raise NotIdeaOwnerException(action)
        if idea.status != db_models.IdeaStatus.PENDING:
            raise IdeaLockedException(idea_id, idea.status.value, action)
        return idea

    @staticmethod
    def submit_idea(
        db: Session, caller: CallerIdentity, idea: schemas.IdeaCreate
    ) -> schemas.IdeaAggregate:
        """
        Submit a new idea for moderation.

        Args:
            db: Database session
            caller: Identity of the caller
            idea: Title, description and category names

        Returns:
            The new idea (status pending) with its engagement

        Raises:
            AuthenticationRequiredException: If the caller is anonymous
            ValidationException: If a text field is empty or too long, or a
                category name is malformed
            CategoryNotFoundException: If a category is not in the catalog
        """
        if not caller.is_authenticated:
            raise AuthenticationRequiredException()

        title = clean_text_field(idea.title, "Title", settings.IDEA_TITLE_MAX_LENGTH)
        description = clean_text_field(
            idea.description, "Description", settings.IDEA_DESCRIPTION_MAX_LENGTH
        )
        categories = CategoryService.resolve_category_names(db, idea.categories)

        idea_repo = IdeaRepository(db)

        with unit_of_work(db):
            db_idea = idea_repo.add(
                db_models.Idea(
                    title=title,
                    description=description,
                    user_id=caller.user_id,
                    status=db_models.IdeaStatus.PENDING,
                )
            )
            idea_id = int(db_idea.id)
            CategoryRepository(db).replace_idea_categories(
                idea_id, [category.id for category in categories]
            )

        logger.info(f"Idea {idea_id} submitted by user {caller.user_id}")
        return IdeaService.get_idea(db, caller, idea_id)

    @staticmethod
    def edit_idea(
        db: Session,
        caller: CallerIdentity,
        idea_id: int,
        changes: schemas.IdeaUpdate,
    ) -> schemas.IdeaAggregate:
        """
        Edit a pending idea.

        Only the fields that are set are changed. A new category list
        replaces the old one entirely.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID
            changes: Fields to change

        Returns:
            The updated idea

        Raises:
            AuthenticationRequiredException: If the caller is anonymous
            IdeaNotFoundException: If the idea does not exist
            NotIdeaOwnerException: If the caller does not own the idea
            IdeaLockedException: If the idea is no longer pending
            ValidationException: If a new value is invalid
            CategoryNotFoundException: If a category is not in the catalog
        """
        if not caller.is_authenticated:
            raise AuthenticationRequiredException()

        title = (
            clean_text_field(changes.title, "Title", settings.IDEA_TITLE_MAX_LENGTH)
            if changes.title is not None
            else None
        )
        description = (
            clean_text_field(
                changes.description,
                "Description",
                settings.IDEA_DESCRIPTION_MAX_LENGTH,
            )
            if changes.description is not None
            else None
        )

        idea_repo = IdeaRepository(db)

        with unit_of_work(db):
            idea = IdeaService._check_owner_and_pending(
                idea_repo.get_for_update(idea_id), idea_id, caller, "edit"
            )
            # Catalog lookups only once ownership and status are settled
            if changes.categories is not None:
                categories = CategoryService.resolve_category_names(
                    db, changes.categories
                )
                CategoryRepository(db).replace_idea_categories(
                    idea_id, [category.id for category in categories]
                )
            idea_repo.update_content(idea, title=title, description=description)

        logger.info(f"Idea {idea_id} edited by its owner")
        return IdeaService.get_idea(db, caller, idea_id)

    @staticmethod
    def delete_idea(
        db: Session, caller: CallerIdentity, idea_id: int
    ) -> schemas.IdeaDeleteResponse:
        """
        Delete a pending idea together with its tags, votes and comments.

        The idea row is deleted only if it is still pending when the
        transaction runs; otherwise nothing is removed.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID

        Returns:
            Confirmation

        Raises:
            AuthenticationRequiredException: If the caller is anonymous
            IdeaNotFoundException: If the idea does not exist
            NotIdeaOwnerException: If the caller does not own the idea
            IdeaLockedException: If the idea is no longer pending
        """
        if not caller.is_authenticated:
            raise AuthenticationRequiredException()

        idea_repo = IdeaRepository(db)

        with unit_of_work(db):
            IdeaService._check_owner_and_pending(
                idea_repo.get_by_id(idea_id), idea_id, caller, "delete"
            )

            CategoryRepository(db).delete_links_for_idea(idea_id)
            VoteRepository(db).delete_by_idea_id(idea_id)
            CommentRepository(db).delete_by_idea_id(idea_id)

            if not idea_repo.delete_if_pending(idea_id):
                # Status changed after the check; the rollback restores the rows
                current = idea_repo.get_by_id(idea_id)
                if current is None:
                    raise IdeaNotFoundException(idea_id)
                raise IdeaLockedException(idea_id, current.status.value, "delete")

        logger.info(f"Idea {idea_id} deleted by its owner")
        return schemas.IdeaDeleteResponse(
            message="Idea deleted successfully", idea_id=idea_id
        )

    @staticmethod
    def get_idea(
        db: Session, caller: CallerIdentity, idea_id: int
    ) -> schemas.IdeaAggregate:
        """
        Get an idea with its live engagement.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID

        Returns:
            Aggregate row; user_vote is the caller's own vote

        Raises:
            IdeaNotFoundException: If the idea does not exist or is hidden
                from the caller
        """
        aggregate = IdeaRepository(db).get_aggregate(idea_id, caller.user_id)
        if aggregate is None or not ModerationService.is_visible_to(
            aggregate.status, aggregate.user_id, caller
        ):
            raise IdeaNotFoundException(idea_id)
        return aggregate

    @staticmethod
    def list_ideas(
        db: Session,
        caller: CallerIdentity,
        filters: Optional[schemas.IdeaFilter] = None,
        sort: schemas.RankingPolicy = schemas.RankingPolicy.NEWEST,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[schemas.IdeaAggregate]:
        """
        List the ideas visible to the caller, filtered and ranked.

        Args:
            db: Database session
            caller: Identity of the caller
            filters: Category, search text, status and "mine" filters
            sort: Ranking policy
            skip: Number of ranked rows to skip
            limit: Maximum number of rows (None for all)

        Returns:
            One page of ranked aggregate rows

        Raises:
            AuthenticationRequiredException: If "mine" is requested anonymously
            CategoryNotFoundException: If the category filter is unknown
        """
        filters = filters or schemas.IdeaFilter()

        author_id = None
        if filters.mine:
            if not caller.is_authenticated:
                raise AuthenticationRequiredException()
            author_id = caller.user_id

        category = None
        if filters.category:
            category = CategoryService.get_category(db, filters.category).name

        rows = IdeaRepository(db).get_aggregates(
            viewer_id=caller.user_id,
            viewer_is_moderator=caller.is_moderator,
            statuses=[filters.status] if filters.status is not None else None,
            author_id=author_id,
        )
        rows = ranking.filter_rows(rows, category=category, search=filters.search)
        return ranking.paginate(ranking.rank(rows, sort), skip, limit)
