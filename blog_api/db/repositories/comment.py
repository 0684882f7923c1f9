"""
Comment repository for data access operations on Comment entities.
"""

from __future__ import annotations

from sqlalchemy import select

from ..models import Comment, Post
from .base import BaseRepository


class CommentRepository(BaseRepository):
    """Data access helpers for Comment entities."""

    async def get_by_id(self, comment_id: int, *, approved_only: bool = True) -> Comment:
        """Return one comment; unapproved comments count as missing unless asked for."""
        stmt = select(Comment).where(Comment.id == comment_id)
        if approved_only:
            stmt = stmt.where(Comment.approved.is_(True))
        with self._store_errors("comment.get_by_id"):
            comment = await self._session.scalar(stmt)
        return self._require(comment, id=comment_id)

    async def list_for_post(self, post_id: int, *, approved_only: bool = True) -> list[Comment]:
        """
        Return the comment thread of a post, oldest first.

        Raises ``NotFoundError`` when the post itself does not exist; a post
        without comments yields an empty list.
        """
        with self._store_errors("comment.list_for_post"):
            found = await self._session.scalar(select(Post.id).where(Post.id == post_id))
            self._require(found, post_id=post_id)

            stmt = select(Comment).where(Comment.post_id == post_id)
            if approved_only:
                stmt = stmt.where(Comment.approved.is_(True))
            stmt = stmt.order_by(Comment.created_at.asc(), Comment.id.asc())

            result = await self._session.scalars(stmt)
            return list(result)


__all__ = ["CommentRepository"]
