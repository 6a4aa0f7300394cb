"""
Idea repository for database operations.

Besides plain row access this repository owns the aggregate query: a single
join of ideas with their live vote sum, comment count, the viewer's own vote
and the author's display attributes. Nothing in the schema stores a counter,
so every read reflects the committed vote and comment rows.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Iterable, List, Optional

from sqlalchemy import func, literal, or_
from sqlalchemy.orm import Query, Session

import repositories.db_models as db_models

from .base import BaseRepository
from .category_repository import CategoryRepository

if TYPE_CHECKING:
    import models.schemas as schemas


class IdeaRepository(BaseRepository[db_models.Idea]):
    """Repository for Idea entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize idea repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Idea, db)

    def _aggregate_query(self, viewer_id: Optional[int]) -> Query:
        """
        Build the aggregate query (without filters).

        Subqueries:
        - vote sum per idea (upvotes and downvotes net out, retractions add 0)
        - comment count per idea
        - the viewer's own vote value (0 if anonymous or no row)
        """
        votes_subq = (
            self.db.query(
                db_models.Vote.idea_id,
                func.sum(db_models.Vote.value).label("vote_count"),
            )
            .group_by(db_models.Vote.idea_id)
            .subquery()
        )

        comments_subq = (
            self.db.query(
                db_models.Comment.idea_id,
                func.count(db_models.Comment.id).label("comment_count"),
            )
            .group_by(db_models.Comment.idea_id)
            .subquery()
        )

        user_vote_subq = None
        if viewer_id is not None:
            user_vote_subq = (
                self.db.query(
                    db_models.Vote.idea_id,
                    db_models.Vote.value.label("user_vote"),
                )
                .filter(db_models.Vote.user_id == viewer_id)
                .subquery()
            )

        query = (
            self.db.query(
                db_models.Idea,
                db_models.User.username.label("author_username"),
                db_models.User.display_name.label("author_display_name"),
                db_models.User.avatar_url.label("author_avatar_url"),
                func.coalesce(votes_subq.c.vote_count, 0).label("vote_count"),
                func.coalesce(comments_subq.c.comment_count, 0).label(
                    "comment_count"
                ),
                func.coalesce(user_vote_subq.c.user_vote, 0).label("user_vote")
                if user_vote_subq is not None
                else literal(0).label("user_vote"),
            )
            .outerjoin(db_models.User, db_models.Idea.user_id == db_models.User.id)
            .outerjoin(votes_subq, db_models.Idea.id == votes_subq.c.idea_id)
            .outerjoin(comments_subq, db_models.Idea.id == comments_subq.c.idea_id)
        )

        if user_vote_subq is not None:
            query = query.outerjoin(
                user_vote_subq, db_models.Idea.id == user_vote_subq.c.idea_id
            )

        return query

    @staticmethod
    def _apply_visibility(
        query: Query, viewer_id: Optional[int], viewer_is_moderator: bool
    ) -> Query:
        """
        Restrict a query to ideas the viewer may see.

        Moderators see everything; everyone sees public statuses; owners also
        see their own ideas in any status.
        """
        if viewer_is_moderator:
            return query

        public = db_models.Idea.status.in_(list(db_models.PUBLIC_STATUSES))
        if viewer_id is None:
            return query.filter(public)
        return query.filter(or_(public, db_models.Idea.user_id == viewer_id))

    def _to_aggregates(self, rows: list[Any]) -> List["schemas.IdeaAggregate"]:
        """Convert aggregate query rows to schemas, batch-loading categories."""
        import models.schemas as schemas

        idea_ids = [int(row[0].id) for row in rows]
        categories_by_idea = CategoryRepository(self.db).get_categories_for_ideas(
            idea_ids
        )

        result = []
        for row in rows:
            idea = row[0]
            result.append(
                schemas.IdeaAggregate(
                    id=idea.id,
                    title=idea.title,
                    description=idea.description,
                    status=idea.status,
                    user_id=idea.user_id,
                    author_username=row.author_username,
                    author_display_name=row.author_display_name,
                    author_avatar_url=row.author_avatar_url,
                    moderator_note=idea.moderator_note,
                    created_at=idea.created_at,
                    updated_at=idea.updated_at,
                    validated_at=idea.validated_at,
                    vote_count=int(row.vote_count or 0),
                    comment_count=int(row.comment_count or 0),
                    user_vote=int(row.user_vote or 0),
                    categories=[
                        schemas.CategoryRef.model_validate(category)
                        for category in categories_by_idea.get(int(idea.id), [])
                    ],
                )
            )
        return result

    def get_aggregate(
        self, idea_id: int, viewer_id: Optional[int] = None
    ) -> Optional["schemas.IdeaAggregate"]:
        """
        Get one idea with its live engagement, regardless of visibility.

        Args:
            idea_id: Idea ID
            viewer_id: Viewer whose own vote is reported in user_vote

        Returns:
            Aggregate row, or None if the idea does not exist
        """
        rows = (
            self._aggregate_query(viewer_id)
            .filter(db_models.Idea.id == idea_id)
            .all()
        )
        aggregates = self._to_aggregates(rows)
        return aggregates[0] if aggregates else None

    def get_aggregates(
        self,
        viewer_id: Optional[int] = None,
        viewer_is_moderator: bool = False,
        statuses: Optional[Iterable[db_models.IdeaStatus]] = None,
        author_id: Optional[int] = None,
    ) -> List["schemas.IdeaAggregate"]:
        """
        Get ideas visible to a viewer with their live engagement.

        Args:
            viewer_id: Viewer user ID (None for anonymous)
            viewer_is_moderator: Whether the viewer holds the moderator claim
            statuses: Optional status filter, applied on top of visibility
            author_id: Optional filter on the idea owner

        Returns:
            Aggregate rows ordered newest first
        """
        query = self._apply_visibility(
            self._aggregate_query(viewer_id), viewer_id, viewer_is_moderator
        )

        if statuses is not None:
            query = query.filter(db_models.Idea.status.in_(list(statuses)))
        if author_id is not None:
            query = query.filter(db_models.Idea.user_id == author_id)

        rows = query.order_by(
            db_models.Idea.created_at.desc(), db_models.Idea.id.asc()
        ).all()
        return self._to_aggregates(rows)

    def get_for_update(self, idea_id: int) -> Optional[db_models.Idea]:
        """
        Load an idea and lock its row until the transaction ends.

        SQLite has no row locks and serializes writers instead.
        """
        return (
            self.db.query(db_models.Idea)
            .filter(db_models.Idea.id == idea_id)
            .with_for_update()
            .first()
        )

    def update_content(
        self,
        idea: db_models.Idea,
        title: Optional[str] = None,
        description: Optional[str] = None,
    ) -> db_models.Idea:
        """Overwrite the set text fields of an idea and bump updated_at."""
        if title is not None:
            idea.title = title
        if description is not None:
            idea.description = description
        idea.updated_at = datetime.now(timezone.utc)
        self.db.flush()
        return idea

    def compare_and_set_status(
        self,
        idea_id: int,
        expected: db_models.IdeaStatus,
        target: db_models.IdeaStatus,
        note: Optional[str] = None,
        stamp_validated: bool = False,
    ) -> bool:
        """
        Move an idea to ``target`` only if it is still in ``expected``.

        Args:
            idea_id: Idea ID
            expected: Status the caller read before deciding
            target: New status
            note: Moderator note to store (kept unchanged when None)
            stamp_validated: Also set validated_at (approve/reject decisions)

        Returns:
            True if the row was updated, False if the status had changed
        """
        now = datetime.now(timezone.utc)
        values: dict[str, Any] = {"status": target, "updated_at": now}
        if note is not None:
            values["moderator_note"] = note
        if stamp_validated:
            values["validated_at"] = now

        updated = (
            self.db.query(db_models.Idea)
            .filter(db_models.Idea.id == idea_id, db_models.Idea.status == expected)
            .update(values, synchronize_session=False)
        )
        self.db.expire_all()
        return updated == 1

    def delete_if_pending(self, idea_id: int) -> bool:
        """
        Delete an idea row only while it is still pending.

        Returns:
            True if the row was deleted
        """
        deleted = (
            self.db.query(db_models.Idea)
            .filter(
                db_models.Idea.id == idea_id,
                db_models.Idea.status == db_models.IdeaStatus.PENDING,
            )
            .delete(synchronize_session=False)
        )
        self.db.expire_all()
        return deleted == 1

    def count_visible_by_user(
        self,
        user_id: int,
        viewer_id: Optional[int] = None,
        viewer_is_moderator: bool = False,
        statuses: Optional[Iterable[db_models.IdeaStatus]] = None,
    ) -> int:
        """
        Count a user's ideas that the viewer may see.

        Args:
            user_id: Owner whose ideas are counted
            viewer_id: Viewer user ID
            viewer_is_moderator: Whether the viewer holds the moderator claim
            statuses: Optional status filter, applied on top of visibility

        Returns:
            Number of ideas
        """
        query = self.db.query(func.count(db_models.Idea.id)).filter(
            db_models.Idea.user_id == user_id
        )
        query = self._apply_visibility(query, viewer_id, viewer_is_moderator)
        if statuses is not None:
            query = query.filter(db_models.Idea.status.in_(list(statuses)))
        return int(query.scalar() or 0)
