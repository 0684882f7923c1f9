"""
FastAPI dependency injection providers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..config import Settings
from ..db.repositories import CommentRepository, PostRepository, TagRepository, UserRepository

LOGGER = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Settings Dependency
# -----------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    """Return the settings the running application was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# -----------------------------------------------------------------------------
# Database Session Management
# -----------------------------------------------------------------------------

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def build_engine(settings: Settings) -> AsyncEngine:
    """Create an async engine for the configured database URL."""
    url = str(settings.database.url)
    options: dict[str, Any] = {"echo": settings.database.echo}
    # SQLite engines use a static/singleton pool without sizing.
    if not url.startswith("sqlite"):
        options["pool_size"] = settings.database.pool_size
        options["pool_pre_ping"] = True
    return create_async_engine(url, **options)


def _get_engine(settings: Settings) -> AsyncEngine:
    """Create or return cached async engine."""
    global _engine
    if _engine is None:
        _engine = build_engine(settings)
    return _engine


def _get_session_factory(settings: Settings) -> async_sessionmaker[AsyncSession]:
    """Create or return cached session factory."""
    global _session_factory
    if _session_factory is None:
        engine = _get_engine(settings)
        _session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
    return _session_factory


async def get_db(
    settings: SettingsDep,
) -> AsyncGenerator[AsyncSession, None]:
    """
    Provide a database session scoped to one request.

    The API only reads, but the session is still committed on success and
    rolled back on exception so connections return to the pool clean.
    """
    factory = _get_session_factory(settings)
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


DbSessionDep = Annotated[AsyncSession, Depends(get_db)]


# -----------------------------------------------------------------------------
# Repository Dependencies
# -----------------------------------------------------------------------------


async def get_post_repository(session: DbSessionDep) -> PostRepository:
    """Provide PostRepository with current session."""
    return PostRepository(session)


async def get_tag_repository(session: DbSessionDep) -> TagRepository:
    """Provide TagRepository with current session."""
    return TagRepository(session)


async def get_user_repository(session: DbSessionDep) -> UserRepository:
    """Provide UserRepository with current session."""
    return UserRepository(session)


async def get_comment_repository(session: DbSessionDep) -> CommentRepository:
    """Provide CommentRepository with current session."""
    return CommentRepository(session)


PostRepoDep = Annotated[PostRepository, Depends(get_post_repository)]
TagRepoDep = Annotated[TagRepository, Depends(get_tag_repository)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]
CommentRepoDep = Annotated[CommentRepository, Depends(get_comment_repository)]


# -----------------------------------------------------------------------------
# Lifecycle Helpers
# -----------------------------------------------------------------------------


@asynccontextmanager
async def lifespan_dependencies(settings: Settings) -> AsyncIterator[None]:
    """
    Context manager for application lifespan.

    Builds the engine up front and disposes of the pool on shutdown.
    """
    global _engine, _session_factory

    LOGGER.info("Initializing database engine...")
    _get_session_factory(settings)

    try:
        yield
    finally:
        LOGGER.info("Disposing database engine...")
        if _engine:
            await _engine.dispose()
        _engine = None
        _session_factory = None


# -----------------------------------------------------------------------------
# Health Check Helpers
# -----------------------------------------------------------------------------


async def check_database_health(settings: Settings) -> tuple[bool, float]:
    """Check database connectivity and return (healthy, latency_ms)."""
    factory = _get_session_factory(settings)
    start = time.perf_counter()
    try:
        async with factory() as session:
            await session.execute(text("SELECT 1"))
        latency = (time.perf_counter() - start) * 1000
        return True, latency
    except Exception as exc:
        LOGGER.error("Database health check failed: %s", exc)
        latency = (time.perf_counter() - start) * 1000
        return False, latency


__all__ = [
    "CommentRepoDep",
    "DbSessionDep",
    "PostRepoDep",
    "SettingsDep",
    "TagRepoDep",
    "UserRepoDep",
    "build_engine",
    "check_database_health",
    "get_app_settings",
    "get_comment_repository",
    "get_db",
    "get_post_repository",
    "get_tag_repository",
    "get_user_repository",
    "lifespan_dependencies",
]
