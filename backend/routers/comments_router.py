from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.pagination import PaginationLimitComments, PaginationSkip
from helpers.rate_limiter import limiter
from models.config import settings
from models.identity import CallerIdentity
from repositories.database import get_db
from services.comment_service import CommentService

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("/{idea_id}", response_model=List[schemas.Comment])
def get_comments_for_idea(
    idea_id: int,
    skip: PaginationSkip = 0,
    limit: PaginationLimitComments = None,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_optional_identity),
):
    """
    Get the comments of an idea, oldest first.

    Domain exceptions are caught by centralized exception handlers.
    """
    return CommentService.list_comments(db, caller, idea_id, skip=skip, limit=limit)


@router.post("/{idea_id}", response_model=schemas.Comment)
@limiter.limit(lambda: settings.RATE_LIMIT_COMMENT)
def create_comment(
    request: Request,
    idea_id: int,
    comment: schemas.CommentCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
) -> schemas.Comment:
    """Add a comment to an idea."""
    return CommentService.add_comment(db, caller, idea_id, comment.content)
