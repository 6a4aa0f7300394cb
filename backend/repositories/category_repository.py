"""
Category repository for database operations.

Covers both the category catalog and the idea/category association rows.
"""

from typing import Dict, List, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

import repositories.db_models as db_models

from .base import BaseRepository


class CategoryRepository(BaseRepository[db_models.Category]):
    """Repository for Category entity database operations."""

    def __init__(self, db: Session):
        """
        Initialize category repository.

        Args:
            db: Database session
        """
        super().__init__(db_models.Category, db)

    def get_all_ordered(self) -> List[db_models.Category]:
        """Get every category ordered by name."""
        return self.db.query(db_models.Category).order_by(db_models.Category.name).all()

    def get_by_name(self, name: str) -> db_models.Category | None:
        """
        Get category by its name (identifier).

        Args:
            name: Category name

        Returns:
            Category if found, None otherwise
        """
        return (
            self.db.query(db_models.Category)
            .filter(db_models.Category.name == name)
            .first()
        )

    def get_by_names(self, names: Sequence[str]) -> List[db_models.Category]:
        """
        Get the categories matching a set of names.

        Args:
            names: Category names

        Returns:
            Categories found (missing names are simply absent)
        """
        if not names:
            return []
        return (
            self.db.query(db_models.Category)
            .filter(db_models.Category.name.in_(list(names)))
            .all()
        )

    def get_categories_for_ideas(
        self, idea_ids: list[int]
    ) -> Dict[int, List[db_models.Category]]:
        """
        Fetch the categories of several ideas in a single query.

        Args:
            idea_ids: Idea IDs

        Returns:
            Dict mapping idea_id to its categories ordered by name
        """
        if not idea_ids:
            return {}

        results = (
            self.db.query(db_models.IdeaCategory.idea_id, db_models.Category)
            .join(
                db_models.Category,
                db_models.IdeaCategory.category_id == db_models.Category.id,
            )
            .filter(db_models.IdeaCategory.idea_id.in_(idea_ids))
            .order_by(db_models.IdeaCategory.idea_id, db_models.Category.name)
            .all()
        )

        categories_by_idea: Dict[int, List[db_models.Category]] = {}
        for idea_id, category in results:
            categories_by_idea.setdefault(idea_id, []).append(category)
        return categories_by_idea

    def replace_idea_categories(self, idea_id: int, category_ids: list[int]) -> None:
        """
        Replace an idea's category set.

        Runs inside the caller's transaction, so a failure part way leaves the
        previous set untouched once rolled back.

        Args:
            idea_id: Idea ID
            category_ids: New category IDs (must be unique)
        """
        self.delete_links_for_idea(idea_id)
        self.db.add_all(
            [
                db_models.IdeaCategory(idea_id=idea_id, category_id=category_id)
                for category_id in category_ids
            ]
        )
        self.db.flush()

    def delete_links_for_idea(self, idea_id: int) -> int:
        """
        Delete all category associations of an idea.

        Returns:
            Number of deleted rows
        """
        count = (
            self.db.query(db_models.IdeaCategory)
            .filter(db_models.IdeaCategory.idea_id == idea_id)
            .delete(synchronize_session=False)
        )
        return count

    def count_public_ideas_by_category(self) -> Dict[int, int]:
        """
        Count publicly visible ideas per category.

        Returns:
            Dict mapping category_id to idea count (categories without ideas omitted)
        """
        rows = (
            self.db.query(
                db_models.IdeaCategory.category_id,
                func.count(db_models.Idea.id).label("idea_count"),
            )
            .join(db_models.Idea, db_models.IdeaCategory.idea_id == db_models.Idea.id)
            .filter(db_models.Idea.status.in_(list(db_models.PUBLIC_STATUSES)))
            .group_by(db_models.IdeaCategory.category_id)
            .all()
        )
        return {category_id: int(idea_count) for category_id, idea_count in rows}
