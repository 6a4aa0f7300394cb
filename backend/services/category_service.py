"""
Category Service

Read-mostly category catalog with in-process caching, plus resolution of the
category names attached to an idea.
"""

import json
import time
from pathlib import Path
from typing import Any, Iterable, Sequence

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from models.config import settings
from models.exceptions import CategoryNotFoundException, ValidationException
from repositories.category_repository import CategoryRepository
from repositories.database import unit_of_work

DEFAULT_CATALOG: list[dict[str, Any]] = [
    {
        "name": "community",
        "display_name": "Community",
        "description": "Neighbourhood life, events and local services",
        "icon": "Users",
    },
    {
        "name": "education",
        "display_name": "Education",
        "description": "Schools, libraries and lifelong learning",
        "icon": "BookOpen",
    },
    {
        "name": "environment",
        "display_name": "Environment",
        "description": "Green spaces, waste and climate",
        "icon": "Leaf",
    },
    {
        "name": "health",
        "display_name": "Health",
        "description": "Wellbeing, sport and care",
        "icon": "Heart",
    },
    {
        "name": "innovation",
        "display_name": "Innovation",
        "description": "New ideas that do not fit elsewhere",
        "icon": "Lightbulb",
    },
]


class CategoryService:
    """
    Service for the category catalog with in-memory caching.

    The cache is per process. Catalog changes made through seed_catalog
    invalidate it; changes made directly in the database are picked up once
    the TTL expires.
    """

    # Cache storage: {cache_key: (data, timestamp)}
    _cache: dict[str, tuple[Any, float]] = {}

    # Cache keys
    _CACHE_ALL_CATEGORIES = "all_categories"

    @classmethod
    def _get_from_cache(cls, key: str) -> Any | None:
        """
        Get data from cache if not expired.

        Args:
            key: Cache key

        Returns:
            Cached data or None if expired/missing
        """
        if key not in cls._cache:
            return None

        data, cached_time = cls._cache[key]
        if time.monotonic() - cached_time > settings.CATEGORY_CACHE_TTL_SECONDS:
            del cls._cache[key]
            return None

        return data

    @classmethod
    def _set_cache(cls, key: str, data: Any) -> None:
        cls._cache[key] = (data, time.monotonic())

    @classmethod
    def invalidate_cache(cls) -> None:
        """Invalidate all category caches after mutations."""
        cls._cache.clear()

    @staticmethod
    def list_categories(db: Session) -> list[schemas.Category]:
        """
        Get all categories ordered by name, with caching.

        Args:
            db: Database session

        Returns:
            List of all categories
        """
        cached = CategoryService._get_from_cache(CategoryService._CACHE_ALL_CATEGORIES)
        if cached is not None:
            return list(cached)

        categories = [
            schemas.Category.model_validate(category)
            for category in CategoryRepository(db).get_all_ordered()
        ]
        CategoryService._set_cache(CategoryService._CACHE_ALL_CATEGORIES, categories)
        return list(categories)

    @staticmethod
    def get_category(db: Session, name: str) -> schemas.Category:
        """
        Get a category by name.

        Args:
            db: Database session
            name: Category name

        Returns:
            Category

        Raises:
            CategoryNotFoundException: If no category has that name
        """
        normalized = CategoryService.normalize_name(name)
        for category in CategoryService.list_categories(db):
            if category.name == normalized:
                return category
        raise CategoryNotFoundException(normalized)

    @staticmethod
    def normalize_name(name: Any) -> str:
        """
        Normalize a requested category name.

        Raises:
            ValidationException: If the name is not text or is blank
        """
        if not isinstance(name, str):
            raise ValidationException(f"Category name must be text (got {name!r})")
        normalized = name.strip().lower()
        if not normalized:
            raise ValidationException("Category name cannot be empty")
        return normalized

    @staticmethod
    def resolve_category_names(
        db: Session, names: Iterable[Any]
    ) -> list[db_models.Category]:
        """
        Resolve requested category names to catalog rows.

        Duplicate names collapse to one entry; the result keeps the order of
        first appearance.

        Args:
            db: Database session
            names: Requested category names

        Returns:
            Matching categories

        Raises:
            ValidationException: If a name is blank or not text
            CategoryNotFoundException: If a name is not in the catalog
        """
        wanted: list[str] = []
        for name in names:
            normalized = CategoryService.normalize_name(name)
            if normalized not in wanted:
                wanted.append(normalized)

        by_name = {
            category.name: category
            for category in CategoryRepository(db).get_by_names(wanted)
        }
        for name in wanted:
            if name not in by_name:
                raise CategoryNotFoundException(name)
        return [by_name[name] for name in wanted]

    @staticmethod
    def list_with_counts(db: Session) -> list[schemas.CategoryWithCount]:
        """
        Get categories with the number of publicly visible ideas in each.

        Args:
            db: Database session

        Returns:
            Categories ordered by name with idea_count
        """
        counts = CategoryRepository(db).count_public_ideas_by_category()
        return [
            schemas.CategoryWithCount(
                **category.model_dump(), idea_count=counts.get(category.id, 0)
            )
            for category in CategoryService.list_categories(db)
        ]

    @staticmethod
    def seed_catalog(
        db: Session, entries: Sequence[dict[str, Any]] | None = None
    ) -> int:
        """
        Insert catalog entries that are not present yet.

        Existing categories are left untouched, so seeding twice is harmless.

        Args:
            db: Database session
            entries: Catalog entries (defaults to DEFAULT_CATALOG)

        Returns:
            Number of categories created
        """
        entries = DEFAULT_CATALOG if entries is None else entries
        category_repo = CategoryRepository(db)

        created = 0
        with unit_of_work(db):
            for entry in entries:
                data = schemas.CategoryCreate.model_validate(entry)
                name = CategoryService.normalize_name(data.name)
                if category_repo.get_by_name(name) is not None:
                    continue
                category_repo.add(
                    db_models.Category(**{**data.model_dump(), "name": name})
                )
                created += 1

        CategoryService.invalidate_cache()
        if created:
            logger.info(f"Seeded {created} categories")
        return created

    @staticmethod
    def load_catalog_file(path: str | Path) -> list[dict[str, Any]]:
        """
        Read catalog entries from a JSON file (a list of objects).

        Raises:
            ValidationException: If the file does not hold a list
        """
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, list):
            raise ValidationException(f"Category catalog {path} must be a JSON list")
        return entries
