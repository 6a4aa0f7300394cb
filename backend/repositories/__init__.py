"""
Repository pattern implementation for data access layer.
"""

from .base import BaseRepository
from .category_repository import CategoryRepository
from .comment_repository import CommentRepository
from .idea_repository import IdeaRepository
from .user_repository import UserRepository
from .vote_repository import VoteRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "CommentRepository",
    "IdeaRepository",
    "UserRepository",
    "VoteRepository",
]
