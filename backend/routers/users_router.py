"""User profile router endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from models.identity import CallerIdentity
from repositories.database import get_db
from services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/{user_id}", response_model=schemas.UserPublic)
def get_user_public_profile(
    user_id: int, db: Session = Depends(get_db)
) -> schemas.UserPublic:
    """Get a user's display attributes."""
    return UserService.get_user(db, user_id)


@router.get("/{user_id}/activity", response_model=schemas.UserActivity)
def get_user_activity(
    user_id: int,
    caller: CallerIdentity = Depends(auth.get_optional_identity),
    db: Session = Depends(get_db),
) -> schemas.UserActivity:
    """
    Get a user's idea, vote and comment totals.

    Idea and comment counts only cover ideas the caller is allowed to see.
    """
    return UserService.get_activity(db, caller, user_id)
