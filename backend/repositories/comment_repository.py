"""
Comment repository for database operations.

Comments are append-only: this repository exposes no update path.
"""

from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class CommentRepository(BaseRepository[db_models.Comment]):
    """Repository for Comment entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize comment repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Comment, db)

    def get_comments_for_idea(
        self,
        idea_id: int,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> list[Any]:
        """
        Get comments for an idea with author information.

        Ordered by (created_at, id) ascending so that pages never overlap or
        skip rows when comments share a timestamp.

        Args:
            idea_id: Idea ID
            skip: Number of records to skip
            limit: Maximum number of records to return (None for all)

        Returns:
            List of tuples (comment, author_username, author_display_name,
            author_avatar_url)
        """
        query = (
            self.db.query(
                db_models.Comment,
                db_models.User.username.label("author_username"),
                db_models.User.display_name.label("author_display_name"),
                db_models.User.avatar_url.label("author_avatar_url"),
            )
            .outerjoin(db_models.User, db_models.Comment.user_id == db_models.User.id)
            .filter(db_models.Comment.idea_id == idea_id)
            .order_by(db_models.Comment.created_at.asc(), db_models.Comment.id.asc())
        )

        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_for_idea(self, idea_id: int) -> int:
        """Number of comments on an idea."""
        return int(
            self.db.query(func.count(db_models.Comment.id))
            .filter(db_models.Comment.idea_id == idea_id)
            .scalar()
            or 0
        )

    def count_visible_by_user(
        self,
        user_id: int,
        viewer_id: Optional[int] = None,
        viewer_is_moderator: bool = False,
    ) -> int:
        """
        Count a user's comments on ideas the viewer may see.

        Args:
            user_id: Comment author
            viewer_id: Viewer user ID
            viewer_is_moderator: Whether the viewer holds the moderator claim

        Returns:
            Number of comments
        """
        query = (
            self.db.query(func.count(db_models.Comment.id))
            .join(db_models.Idea, db_models.Comment.idea_id == db_models.Idea.id)
            .filter(db_models.Comment.user_id == user_id)
        )
        if not viewer_is_moderator:
            public = db_models.Idea.status.in_(list(db_models.PUBLIC_STATUSES))
            if viewer_id is None:
                query = query.filter(public)
            else:
                query = query.filter(or_(public, db_models.Idea.user_id == viewer_id))
        return int(query.scalar() or 0)

    def delete_by_idea_id(self, idea_id: int) -> int:
        """
        Delete all comments for an idea (used only when the idea itself is deleted).

        Args:
            idea_id: Idea ID

        Returns:
            Number of deleted records
        """
        count = (
            self.db.query(db_models.Comment)
            .filter(db_models.Comment.idea_id == idea_id)
            .delete(synchronize_session=False)
        )
        return count
