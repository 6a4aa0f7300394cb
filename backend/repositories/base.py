"""
Base repository class providing common database operations.

Repositories never commit on their own: the service layer groups every
public operation into a single transaction with ``unit_of_work``.
"""

from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from repositories.database import Base

T = TypeVar("T", bound=Base)  # type: ignore[type-arg]


class BaseRepository(Generic[T]):
    """
    Base repository providing common CRUD operations.

    Type parameter T should be a SQLAlchemy model class.
    """

    def __init__(self, model: type[T], db: Session):
        """
        Initialize repository.

        Args:
            model: SQLAlchemy model class
            db: Database session
        """
        self.model = model
        self.db = db

    def get_by_id(self, id: int) -> T | None:
        """
        Get entity by ID.

        Args:
            id: Entity ID

        Returns:
            Entity if found, None otherwise
        """
        return self.db.get(self.model, id)

    def add(self, entity: T) -> T:
        """
        Add entity to the session and flush so it receives its ID.

        Args:
            entity: Entity to add

        Returns:
            The same entity, now with its primary key populated
        """
        self.db.add(entity)
        self.db.flush()
        return entity

    def add_all(self, entities: list[T]) -> None:
        """
        Add multiple entities to the session and flush.

        Args:
            entities: List of entities to add
        """
        self.db.add_all(entities)
        self.db.flush()

    def delete(self, entity: T) -> None:
        """
        Mark entity for deletion in the current transaction.

        Args:
            entity: Entity to delete
        """
        self.db.delete(entity)
        self.db.flush()

    def count(self) -> int:
        """Count total number of entities."""
        return self.db.query(self.model).count()

    def refresh(self, entity: T) -> None:
        """Reload entity state from the database."""
        self.db.refresh(entity)
