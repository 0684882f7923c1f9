"""
Tag repository for data access operations on Tag entities.
"""

from __future__ import annotations

from sqlalchemy import select

from ..models import Tag
from .base import BaseRepository


class TagRepository(BaseRepository):
    """Data access helpers for Tag entities."""

    async def get_by_id(self, tag_id: int) -> Tag:
        with self._store_errors("tag.get_by_id"):
            tag = await self._session.scalar(select(Tag).where(Tag.id == tag_id))
        return self._require(tag, id=tag_id)

    async def get_by_slug(self, slug: str) -> Tag:
        with self._store_errors("tag.get_by_slug"):
            tag = await self._session.scalar(select(Tag).where(Tag.slug == slug))
        return self._require(tag, slug=slug)

    async def list_tags(self) -> list[Tag]:
        """Return every tag, hidden ones included, ordered by name."""
        with self._store_errors("tag.list_tags"):
            result = await self._session.scalars(select(Tag).order_by(Tag.name, Tag.id))
            return list(result)


__all__ = ["TagRepository"]
