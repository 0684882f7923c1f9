"""
Schema creation and first-run content for fresh installations.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from .models import Base, Post, Tag, User

LOGGER = logging.getLogger(__name__)

WELCOME_MARKDOWN = """\
You're live! This post was created while setting up the blog.

Edit or delete it, then start writing.
"""

WELCOME_HTML = (
    "<p>You're live! This post was created while setting up the blog.</p>\n"
    "<p>Edit or delete it, then start writing.</p>"
)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet (development installs)."""

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    LOGGER.info("Database schema is up to date.")


async def seed_defaults(
    session: AsyncSession,
    *,
    owner_name: str = "Blog Owner",
    owner_email: str = "owner@example.com",
) -> Post | None:
    """
    Insert an owner account, a default tag and a published welcome post.

    Does nothing when any user already exists, so running it twice is safe.

    Returns:
        The welcome post, or None when the store was already seeded
    """
    user_count = await session.scalar(select(func.count()).select_from(User))
    if user_count:
        LOGGER.info("Skipping seed: %d user(s) already present.", user_count)
        return None

    owner = User(
        name=owner_name,
        slug="owner",
        email=owner_email.lower(),
        role="owner",
    )
    tag = Tag(name="Getting Started", slug="getting-started")
    post = Post(
        title="Welcome to your blog",
        slug="welcome",
        markdown=WELCOME_MARKDOWN,
        html=WELCOME_HTML,
        featured=True,
        published=True,
        published_at=datetime.now(UTC),
        author=owner,
        tags=[tag],
    )
    session.add_all([owner, tag, post])
    await session.flush()

    LOGGER.info("Seeded owner %s and welcome post #%d.", owner.email, post.id)
    return post


__all__ = ["create_schema", "seed_defaults"]
