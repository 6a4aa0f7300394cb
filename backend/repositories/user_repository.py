"""
User repository for database operations.

Users are profile rows owned by the external identity provider; the core only
reads them for ownership checks and author display attributes.
"""

from typing import Optional

from sqlalchemy.orm import Session

import repositories.db_models as db_models
from .base import BaseRepository


class UserRepository(BaseRepository[db_models.User]):
    """Repository for User entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize user repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.User, db)

    def get_by_username(self, username: str) -> Optional[db_models.User]:
        """
        Get user by username.

        Args:
            username: Username

        Returns:
            User if found, None otherwise
        """
        return (
            self.db.query(db_models.User)
            .filter(db_models.User.username == username)
            .first()
        )

    def get_by_ids(self, user_ids: list[int]) -> dict[int, db_models.User]:
        """
        Fetch several users in one query.

        Args:
            user_ids: User IDs

        Returns:
            Dict mapping user_id to user (missing IDs are absent)
        """
        if not user_ids:
            return {}
        users = (
            self.db.query(db_models.User)
            .filter(db_models.User.id.in_(user_ids))
            .all()
        )
        return {user.id: user for user in users}
