"""
Comment service for business logic.

Comments are append-only plain text, listed oldest first.
"""

from typing import Any, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from models.config import settings
from models.exceptions import (
    AuthenticationRequiredException,
    EmptyCommentException,
    IdeaLockedException,
    IdeaNotFoundException,
    ValidationException,
)
from models.identity import CallerIdentity
from repositories.comment_repository import CommentRepository
from repositories.database import unit_of_work
from repositories.idea_repository import IdeaRepository
from repositories.user_repository import UserRepository
from services.moderation_service import ModerationService


class CommentService:
    """Service for comment-related business logic."""

    @staticmethod
    def _clean_content(content: Any) -> str:
        if not isinstance(content, str):
            raise ValidationException("Comment must be text")
        cleaned = (sanitize_plain_text(content) or "").strip()
        if not cleaned:
            raise EmptyCommentException()
        if len(cleaned) > settings.COMMENT_MAX_LENGTH:
            raise ValidationException(
                f"Comment must be at most {settings.COMMENT_MAX_LENGTH} characters"
            )
        return cleaned

    @staticmethod
    def add_comment(
        db: Session, caller: CallerIdentity, idea_id: int, content: Any
    ) -> schemas.Comment:
        """
        Append a comment to an idea.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID
            content: Comment text; HTML is stripped and whitespace trimmed

        Returns:
            Created comment with author information

        Raises:
            AuthenticationRequiredException: If the caller is anonymous
            IdeaNotFoundException: If the idea does not exist
            IdeaLockedException: If the idea is not visible to the caller
            EmptyCommentException: If nothing remains after cleaning
            ValidationException: If the comment is too long
        """
        if not caller.is_authenticated:
            raise AuthenticationRequiredException()
        cleaned = CommentService._clean_content(content)

        idea_repo = IdeaRepository(db)
        comment_repo = CommentRepository(db)

        with unit_of_work(db):
            idea = idea_repo.get_by_id(idea_id)
            if idea is None:
                raise IdeaNotFoundException(idea_id)
            if not ModerationService.is_visible_to(idea.status, idea.user_id, caller):
                raise IdeaLockedException(idea_id, idea.status.value, "comment on")

            comment = comment_repo.add(
                db_models.Comment(
                    idea_id=idea_id,
                    user_id=caller.user_id,
                    content=cleaned,
                )
            )
            comment_id = comment.id

        logger.info(f"User {caller.user_id} commented on idea {idea_id}")

        comment = comment_repo.get_by_id(comment_id)
        author = UserRepository(db).get_by_id(caller.user_id)  # type: ignore[arg-type]
        return schemas.Comment(
            id=comment.id,  # type: ignore[union-attr]
            idea_id=comment.idea_id,  # type: ignore[union-attr]
            user_id=comment.user_id,  # type: ignore[union-attr]
            content=comment.content,  # type: ignore[union-attr]
            created_at=comment.created_at,  # type: ignore[union-attr]
            author_username=author.username if author else None,
            author_display_name=author.display_name if author else None,
            author_avatar_url=author.avatar_url if author else None,
        )

    @staticmethod
    def list_comments(
        db: Session,
        caller: CallerIdentity,
        idea_id: int,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[schemas.Comment]:
        """
        Get the comments of an idea, oldest first.

        Args:
            db: Database session
            caller: Identity of the caller
            idea_id: Idea ID
            skip: Number of comments to skip
            limit: Maximum number of comments (None for the whole thread)

        Returns:
            Comments with author information ordered by (created_at, id)

        Raises:
            IdeaNotFoundException: If the idea does not exist or is hidden
                from the caller
        """
        idea = IdeaRepository(db).get_by_id(idea_id)
        if idea is None or not ModerationService.is_visible_to(
            idea.status, idea.user_id, caller
        ):
            raise IdeaNotFoundException(idea_id)

        rows = CommentRepository(db).get_comments_for_idea(
            idea_id, skip=max(skip, 0), limit=limit
        )
        return [
            schemas.Comment(
                id=comment.id,
                idea_id=comment.idea_id,
                user_id=comment.user_id,
                content=comment.content,
                created_at=comment.created_at,
                author_username=username,
                author_display_name=display_name,
                author_avatar_url=avatar_url,
            )
            for comment, username, display_name, avatar_url in rows
        ]

    @staticmethod
    def count_comments(db: Session, idea_id: int) -> int:
        """Number of comments on an idea."""
        return CommentRepository(db).count_for_idea(idea_id)
