"""Initialize the database schema and the category catalog."""

from typing import Any, Optional

from loguru import logger
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from models.config import settings
from repositories.database import Base, SessionLocal, engine
import repositories.db_models  # noqa: F401  (registers tables on Base)
from services.category_service import DEFAULT_CATALOG, CategoryService


def get_default_categories() -> list[dict[str, Any]]:
    """Catalog entries to seed: CATEGORY_CATALOG_PATH if set, else the defaults."""
    if settings.CATEGORY_CATALOG_PATH:
        return CategoryService.load_catalog_file(settings.CATEGORY_CATALOG_PATH)
    return DEFAULT_CATALOG


def init_db(
    bind: Optional[Engine] = None, db: Optional[Session] = None
) -> int:
    """
    Create missing tables and seed the category catalog.

    Safe to run repeatedly: existing tables and categories are left alone.

    Args:
        bind: Engine to create tables on (defaults to the application engine)
        db: Session to seed with (defaults to a new application session)

    Returns:
        Number of categories created
    """
    Base.metadata.create_all(bind=bind or engine)

    session = db or SessionLocal()
    try:
        created = CategoryService.seed_catalog(session, get_default_categories())
    except Exception:
        logger.exception("Database initialization failed")
        raise
    finally:
        if db is None:
            session.close()

    logger.info(f"Database initialization complete ({created} categories created)")
    return created


if __name__ == "__main__":
    init_db()
