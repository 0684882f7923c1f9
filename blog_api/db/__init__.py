"""
Database toolkit exposing ORM models and repositories.
"""

from .models import Base, Comment, Post, Tag, User, posts_tags
from .repositories import (
    BaseRepository,
    CommentRepository,
    PostRepository,
    TagRepository,
    UserRepository,
)

__all__ = [
    "Base",
    "BaseRepository",
    "Comment",
    "CommentRepository",
    "Post",
    "PostRepository",
    "Tag",
    "TagRepository",
    "User",
    "UserRepository",
    "posts_tags",
]
