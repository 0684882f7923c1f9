"""
Engine helpers shared by fixtures and tests.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

SQLITE_URL = "sqlite+aiosqlite:///:memory:"


def make_engine() -> AsyncEngine:
    """In-memory SQLite engine whose single connection is shared by every session."""
    return create_async_engine(SQLITE_URL, poolclass=StaticPool)


__all__ = ["SQLITE_URL", "make_engine"]
