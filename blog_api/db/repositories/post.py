"""
Post repository for data access operations on Post entities.

Every query reloads rows that are already in the session's identity map,
so returned posts (author and tags included) always mirror the store.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import Select, UnaryExpression, select

from ..models import Post
from .base import BaseRepository


def _select_posts() -> Select[tuple[Post]]:
    return select(Post).execution_options(populate_existing=True)


def _listing_order(newest_first: bool) -> tuple[UnaryExpression[Any], ...]:
    # PostgreSQL puts NULLs first on DESC unless told otherwise.
    if newest_first:
        return Post.published_at.desc().nulls_last(), Post.id.desc()
    return Post.published_at.asc().nulls_last(), Post.id.asc()


class PostRepository(BaseRepository):
    """Data access helpers for Post entities."""

    async def get_by_id(self, post_id: int) -> Post:
        """Return the post with the given primary key, drafts and pages included."""
        with self._store_errors("post.get_by_id"):
            post = await self._session.scalar(_select_posts().where(Post.id == post_id))
        return self._require(post, id=post_id)

    async def get_by_slug(self, slug: str) -> Post:
        """Return the post whose slug matches exactly."""
        with self._store_errors("post.get_by_slug"):
            post = await self._session.scalar(_select_posts().where(Post.slug == slug))
        return self._require(post, slug=slug)

    async def list_posts(
        self,
        *,
        include_pages: bool = False,
        published_only: bool = True,
        newest_first: bool = True,
    ) -> list[Post]:
        """
        Return posts ordered by publication time.

        Ties on ``published_at`` are broken by id in the same direction so
        the listing order is total. Posts without a publication time sort
        last in both directions.

        Args:
            include_pages: Also return static pages
            published_only: Skip drafts
            newest_first: Order by ``published_at`` descending
        """
        stmt = _select_posts()

        if not include_pages:
            stmt = stmt.where(Post.is_page.is_(False))

        if published_only:
            stmt = stmt.where(Post.published.is_(True))

        stmt = stmt.order_by(*_listing_order(newest_first))

        with self._store_errors("post.list_posts"):
            result = await self._session.scalars(stmt)
            return list(result)


__all__ = ["PostRepository"]
