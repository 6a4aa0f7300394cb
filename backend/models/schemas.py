from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from repositories.db_models import IdeaStatus


class RankingPolicy(str, Enum):
    """Sort orders available for idea listings."""

    NEWEST = "newest"
    POPULAR = "popular"


# User Schemas
class UserPublic(BaseModel):
    """Public display attributes of a user."""

    id: int
    username: str
    display_name: str
    avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserActivity(BaseModel):
    """Engagement totals for a user's dashboard/profile card."""

    user_id: int
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    ideas_count: int
    votes_cast: int
    vote_total: int
    comments_count: int
    approval_rate: float


# Category Schemas
class CategoryBase(BaseModel):
    name: str
    display_name: str
    description: Optional[str] = None
    icon: str = "tag"


class CategoryCreate(CategoryBase):
    pass


class Category(CategoryBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class CategoryWithCount(Category):
    """Category listing entry with the number of publicly visible ideas."""

    idea_count: int


class CategoryRef(BaseModel):
    """Category as embedded in an idea."""

    name: str
    display_name: str
    icon: str = "tag"

    model_config = ConfigDict(from_attributes=True)


# Idea Schemas
class IdeaCreate(BaseModel):
    title: str
    description: str
    categories: List[str] = Field(
        default_factory=list, description="Category names from the catalog"
    )


class IdeaUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    categories: Optional[List[str]] = None


class IdeaStatusChange(BaseModel):
    status: IdeaStatus
    note: Optional[str] = Field(
        default=None, max_length=1000, description="Optional moderator note"
    )


class IdeaAggregate(BaseModel):
    """
    Read model of an idea joined with its engagement.

    vote_count and comment_count are computed from the live vote and comment
    rows every time the model is produced.
    """

    id: int
    title: str
    description: str
    status: IdeaStatus
    user_id: int
    author_username: Optional[str] = None
    author_display_name: Optional[str] = None
    author_avatar_url: Optional[str] = None
    moderator_note: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    validated_at: Optional[datetime] = None
    vote_count: int = 0
    comment_count: int = 0
    user_vote: int = 0
    categories: List[CategoryRef] = []


class IdeaFilter(BaseModel):
    """Filters applied to an idea listing before ranking."""

    category: Optional[str] = None
    search: Optional[str] = None
    status: Optional[IdeaStatus] = None
    mine: bool = False


class IdeaDeleteResponse(BaseModel):
    message: str
    idea_id: int


# Vote Schemas
class VoteCast(BaseModel):
    value: int = Field(..., description="-1 (down), 0 (retract) or 1 (up)")


class VoteResult(BaseModel):
    """Outcome of a vote: the caller's value and the idea's new tally."""

    idea_id: int
    user_vote: int
    vote_count: int


# Comment Schemas
class CommentCreate(BaseModel):
    content: str


class Comment(BaseModel):
    id: int
    idea_id: int
    user_id: int
    content: str
    created_at: datetime
    author_username: Optional[str] = None
    author_display_name: Optional[str] = None
    author_avatar_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
