"""
Services layer for business logic.

This package contains service modules that encapsulate business logic
separate from the API routes.
"""

from .category_service import CategoryService
from .moderation_service import ModerationService
from .vote_service import VoteService
from .comment_service import CommentService
from .idea_service import IdeaService
from .user_service import UserService

__all__ = [
    "CategoryService",
    "ModerationService",
    "VoteService",
    "CommentService",
    "IdeaService",
    "UserService",
]
