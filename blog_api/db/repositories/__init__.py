"""
Repository classes for database access.

This module provides specialized repositories for different entity types:
- PostRepository: Data access for Post entities
- TagRepository: Data access for Tag entities
- UserRepository: Data access for User entities
- CommentRepository: Data access for Comment entities
"""

from .base import BaseRepository
from .comment import CommentRepository
from .post import PostRepository
from .tag import TagRepository
from .user import UserRepository

__all__ = [
    "BaseRepository",
    "CommentRepository",
    "PostRepository",
    "TagRepository",
    "UserRepository",
]
