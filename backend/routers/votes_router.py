from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
from models.identity import CallerIdentity
from repositories.database import get_db
from services.vote_service import VoteService

router = APIRouter(prefix="/votes", tags=["votes"])


@router.put("/{idea_id}", response_model=schemas.VoteResult)
def cast_vote(
    idea_id: int,
    vote: schemas.VoteCast,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
) -> schemas.VoteResult:
    """
    Cast, change or retract (value 0) a vote on an idea.

    Domain exceptions are caught by centralized exception handlers.
    """
    return VoteService.cast_vote(db, caller, idea_id, vote.value)


@router.get("/{idea_id}/me", response_model=schemas.VoteResult)
def get_my_vote(
    idea_id: int,
    db: Session = Depends(get_db),
    caller: CallerIdentity = Depends(auth.get_current_identity),
) -> schemas.VoteResult:
    """Get the caller's vote on an idea (0 if none) and the idea's tally."""
    return schemas.VoteResult(
        idea_id=idea_id,
        user_vote=VoteService.get_user_vote(db, caller.user_id, idea_id),  # type: ignore[arg-type]
        vote_count=VoteService.get_vote_count(db, idea_id),
    )
