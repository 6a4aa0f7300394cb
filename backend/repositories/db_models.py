"""
Database models using SQLAlchemy 2.0 style with Mapped type hints.

This module defines all database models with proper type annotations
for improved IDE support and type checking.
"""

import enum
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repositories.database import Base


class IdeaStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


# Statuses visible to everyone; in_progress/completed refine approved
PUBLIC_STATUSES = frozenset(
    {IdeaStatus.APPROVED, IdeaStatus.IN_PROGRESS, IdeaStatus.COMPLETED}
)

VALID_VOTE_VALUES = (-1, 0, 1)


def _utc_now() -> datetime:
    """Return current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


class User(Base):
    """Profile row for an identity managed by the external auth provider."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(
        String, unique=True, index=True, nullable=False
    )
    display_name: Mapped[str] = mapped_column(String, nullable=False)
    avatar_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    ideas: Mapped[List["Idea"]] = relationship("Idea", back_populates="author")
    votes: Mapped[List["Vote"]] = relationship("Vote", back_populates="user")
    comments: Mapped[List["Comment"]] = relationship(
        "Comment", back_populates="user"
    )


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    display_name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="tag")

    # Relationships
    idea_links: Mapped[List["IdeaCategory"]] = relationship(
        "IdeaCategory", back_populates="category"
    )


class Idea(Base):
    __tablename__ = "ideas"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    status: Mapped[IdeaStatus] = mapped_column(
        Enum(IdeaStatus), default=IdeaStatus.PENDING, nullable=False
    )
    moderator_note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )
    validated_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    # Relationships
    author: Mapped["User"] = relationship("User", back_populates="ideas")
    category_links: Mapped[List["IdeaCategory"]] = relationship(
        "IdeaCategory",
        back_populates="idea",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    categories: Mapped[List["Category"]] = relationship(
        "Category", secondary="idea_categories", viewonly=True
    )
    votes: Mapped[List["Vote"]] = relationship(
        "Vote", back_populates="idea", cascade="all, delete-orphan", passive_deletes=True
    )
    comments: Mapped[List["Comment"]] = relationship(
        "Comment",
        back_populates="idea",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_ideas_status", "status"),
        Index("ix_ideas_user_status", "user_id", "status"),
        Index("ix_ideas_created", "created_at"),
    )


class IdeaCategory(Base):
    """Association between an idea and a catalog category."""

    __tablename__ = "idea_categories"
    __table_args__ = (
        UniqueConstraint("idea_id", "category_id", name="uq_idea_category"),
        Index("ix_idea_categories_category", "category_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    idea_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    category_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("categories.id"), nullable=False
    )

    idea: Mapped["Idea"] = relationship("Idea", back_populates="category_links")
    category: Mapped["Category"] = relationship(
        "Category", back_populates="idea_links"
    )


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (
        UniqueConstraint("idea_id", "user_id", name="uq_vote_idea_user"),
        CheckConstraint("value IN (-1, 0, 1)", name="ck_vote_value"),
        Index("ix_votes_idea", "idea_id"),
        Index("ix_votes_user_idea", "user_id", "idea_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    idea_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    # 0 means the vote was retracted; the row is kept
    value: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=_utc_now, onupdate=_utc_now
    )

    # Relationships
    idea: Mapped["Idea"] = relationship("Idea", back_populates="votes")
    user: Mapped["User"] = relationship("User", back_populates="votes")


class Comment(Base):
    """Append-only comment on an idea."""

    __tablename__ = "comments"
    __table_args__ = (Index("ix_comments_idea_created", "idea_id", "created_at", "id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    idea_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ideas.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=_utc_now)

    # Relationships
    idea: Mapped["Idea"] = relationship("Idea", back_populates="comments")
    user: Mapped["User"] = relationship("User", back_populates="comments")
