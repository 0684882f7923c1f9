"""
FastAPI JSON API for the blog.
"""

from .main import app, create_app
from .routes import (
    comments_router,
    docs_router,
    health_router,
    posts_router,
    tags_router,
    users_router,
)

__all__ = [
    "app",
    "comments_router",
    "create_app",
    "docs_router",
    "health_router",
    "posts_router",
    "tags_router",
    "users_router",
]
