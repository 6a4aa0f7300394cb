"""
Vote repository for database operations.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import case, func
from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class VoteRepository(BaseRepository[db_models.Vote]):
    """Repository for Vote entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize vote repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Vote, db)

    def get_by_idea_and_user(
        self, idea_id: int, user_id: int
    ) -> Optional[db_models.Vote]:
        """
        Get vote by idea and user.

        Args:
            idea_id: Idea ID
            user_id: User ID

        Returns:
            Vote if found, None otherwise
        """
        return (
            self.db.query(db_models.Vote)
            .filter(
                db_models.Vote.idea_id == idea_id, db_models.Vote.user_id == user_id
            )
            .first()
        )

    def upsert(self, idea_id: int, user_id: int, value: int) -> None:
        """
        Insert or replace the vote of a user on an idea.

        Uses INSERT ... ON CONFLICT (idea_id, user_id) DO UPDATE so that two
        concurrent writes for the same pair can never produce two rows: the
        database serializes them and the last one wins.

        Args:
            idea_id: Idea ID
            user_id: User ID
            value: -1, 0 or 1
        """
        now = datetime.now(timezone.utc)
        dialect = self.db.get_bind().dialect.name

        if dialect == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        elif dialect == "sqlite":
            from sqlalchemy.dialects.sqlite import insert
        else:
            self._upsert_with_row_lock(idea_id, user_id, value, now)
            return

        stmt = insert(db_models.Vote).values(
            idea_id=idea_id,
            user_id=user_id,
            value=value,
            created_at=now,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["idea_id", "user_id"],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        self.db.execute(stmt)
        # Objects loaded earlier in this session may hold the previous value
        self.db.expire_all()

    def _upsert_with_row_lock(
        self, idea_id: int, user_id: int, value: int, now: datetime
    ) -> None:
        """Fallback upsert for dialects without ON CONFLICT support."""
        vote = (
            self.db.query(db_models.Vote)
            .filter(
                db_models.Vote.idea_id == idea_id, db_models.Vote.user_id == user_id
            )
            .with_for_update()
            .first()
        )
        if vote is None:
            self.add(
                db_models.Vote(
                    idea_id=idea_id,
                    user_id=user_id,
                    value=value,
                    created_at=now,
                    updated_at=now,
                )
            )
        else:
            vote.value = value
            vote.updated_at = now
            self.db.flush()

    def get_tally(self, idea_id: int) -> int:
        """
        Signed sum of all vote values for an idea.

        Args:
            idea_id: Idea ID

        Returns:
            Tally (0 if there are no votes)
        """
        return int(
            self.db.query(func.coalesce(func.sum(db_models.Vote.value), 0))
            .filter(db_models.Vote.idea_id == idea_id)
            .scalar()
            or 0
        )

    def get_tallies_batch(self, idea_ids: list[int]) -> dict[int, int]:
        """
        Get vote tallies for multiple ideas in a single query.

        Args:
            idea_ids: List of idea IDs

        Returns:
            Dict mapping idea_id to tally (0 for ideas without votes)
        """
        if not idea_ids:
            return {}

        rows = (
            self.db.query(
                db_models.Vote.idea_id,
                func.sum(db_models.Vote.value).label("tally"),
            )
            .filter(db_models.Vote.idea_id.in_(idea_ids))
            .group_by(db_models.Vote.idea_id)
            .all()
        )

        result = {idea_id: 0 for idea_id in idea_ids}
        for idea_id, tally in rows:
            result[idea_id] = int(tally or 0)
        return result

    def get_user_totals(self, user_id: int) -> tuple[int, int]:
        """
        Totals of the votes a user has cast.

        Args:
            user_id: User ID

        Returns:
            Tuple of (non-retracted vote count, signed sum of values)
        """
        row = (
            self.db.query(
                func.coalesce(
                    func.sum(case((db_models.Vote.value != 0, 1), else_=0)), 0
                ).label("votes_cast"),
                func.coalesce(func.sum(db_models.Vote.value), 0).label("total"),
            )
            .filter(db_models.Vote.user_id == user_id)
            .one()
        )
        return int(row.votes_cast or 0), int(row.total or 0)

    def delete_by_idea_id(self, idea_id: int) -> int:
        """
        Delete all votes for an idea.

        Args:
            idea_id: Idea ID

        Returns:
            Number of deleted records
        """
        count = (
            self.db.query(db_models.Vote)
            .filter(db_models.Vote.idea_id == idea_id)
            .delete(synchronize_session=False)
        )
        return count
