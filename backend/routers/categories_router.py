from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import models.schemas as schemas
from repositories.database import get_db
from services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("/", response_model=List[schemas.Category])
def get_categories(db: Session = Depends(get_db)) -> List[schemas.Category]:
    """Get the category catalog ordered by name."""
    return CategoryService.list_categories(db)


@router.get("/stats", response_model=List[schemas.CategoryWithCount])
def get_categories_with_counts(
    db: Session = Depends(get_db),
) -> List[schemas.CategoryWithCount]:
    """Get categories with the number of publicly visible ideas in each."""
    return CategoryService.list_with_counts(db)


@router.get("/{name}", response_model=schemas.Category)
def get_category(name: str, db: Session = Depends(get_db)) -> schemas.Category:
    """
    Get a category by name.

    Domain exceptions are caught by centralized exception handlers.
    """
    return CategoryService.get_category(db, name)
