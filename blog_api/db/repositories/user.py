"""
User repository for data access operations on User entities.
"""

from __future__ import annotations

from sqlalchemy import func, select

from ..models import User
from .base import BaseRepository


class UserRepository(BaseRepository):
    """Data access helpers for User entities."""

    async def get_by_id(self, user_id: int) -> User:
        with self._store_errors("user.get_by_id"):
            user = await self._session.scalar(select(User).where(User.id == user_id))
        return self._require(user, id=user_id)

    async def get_by_slug(self, slug: str) -> User:
        with self._store_errors("user.get_by_slug"):
            user = await self._session.scalar(select(User).where(User.slug == slug))
        return self._require(user, slug=slug)

    async def get_by_email(self, email: str) -> User:
        """
        Fetch a user by email address.

        Mailbox names are matched case-insensitively, so ``Jane@Example.com``
        finds ``jane@example.com``.
        """
        normalized = email.strip().lower()
        with self._store_errors("user.get_by_email"):
            user = await self._session.scalar(
                select(User).where(func.lower(User.email) == normalized)
            )
        return self._require(user, email=email)


__all__ = ["UserRepository"]
