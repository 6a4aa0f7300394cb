from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from helpers.pagination import PaginationLimit, PaginationSkip
from helpers.rate_limiter import limiter
from models.config import settings
from models.identity import CallerIdentity
from repositories.database import get_db
from repositories.db_models import IdeaStatus
from services import IdeaService, ModerationService

router = APIRouter(prefix="/ideas", tags=["ideas"])


@router.get("/", response_model=List[schemas.IdeaAggregate])
def list_ideas(
    sort: schemas.RankingPolicy = schemas.RankingPolicy.NEWEST,
    category: Optional[str] = Query(None, max_length=50),
    search: Optional[str] = Query(None, max_length=200),
    status: Optional[IdeaStatus] = None,
    mine: bool = False,
    skip: PaginationSkip = 0,
    limit: PaginationLimit = 20,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_optional_identity),
):
    """
    List the ideas visible to the caller.

    Anonymous callers see approved, in-progress and completed ideas. Signed in
    users also see their own ideas in any status; moderators see everything.
    """
    filters = schemas.IdeaFilter(
        category=category, search=search, status=status, mine=mine
    )
    return IdeaService.list_ideas(db, caller, filters, sort, skip, limit)


@router.post("/", response_model=schemas.IdeaAggregate)
@limiter.limit(lambda: settings.RATE_LIMIT_SUBMIT)
def submit_idea(
    request: Request,
    idea: schemas.IdeaCreate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
):
    """
    Submit a new idea. It stays pending until a moderator approves it.

    Domain exceptions are caught by centralized exception handlers.
    """
    return IdeaService.submit_idea(db, caller, idea)


@router.get("/{idea_id}", response_model=schemas.IdeaAggregate)
def get_idea(
    idea_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_optional_identity),
):
    """Get a single idea with its votes and comment count."""
    return IdeaService.get_idea(db, caller, idea_id)


@router.patch("/{idea_id}", response_model=schemas.IdeaAggregate)
def edit_idea(
    idea_id: int,
    changes: schemas.IdeaUpdate,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
):
    """Edit a pending idea. Only its owner may do this."""
    return IdeaService.edit_idea(db, caller, idea_id, changes)


@router.delete(
    "/{idea_id}",
    response_model=schemas.IdeaDeleteResponse,
    summary="Delete an idea",
    description="Owners can delete their ideas while they are still pending.",
)
def delete_idea(
    idea_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
) -> schemas.IdeaDeleteResponse:
    """Delete a pending idea with its tags, votes and comments."""
    return IdeaService.delete_idea(db, caller, idea_id)


@router.post("/{idea_id}/status", response_model=schemas.IdeaAggregate)
def change_idea_status(
    idea_id: int,
    change: schemas.IdeaStatusChange,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
):
    """
    Moderate an idea: approve, reject, start or complete it.

    Requires the moderator claim.
    """
    return ModerationService.transition_status(
        db, caller, idea_id, change.status, change.note
    )
