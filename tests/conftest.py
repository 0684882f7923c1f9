"""
Shared pytest fixtures for database sessions, settings, and the HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
)

from blog_api.api.dependencies import get_db
from blog_api.api.main import create_app
from blog_api.config import Settings
from blog_api.db.models import Base
from tests.support import SQLITE_URL, make_engine


@pytest.fixture
async def db_engine() -> AsyncIterator[AsyncEngine]:
    """Provide an async in-memory SQLite engine with the blog schema."""
    engine = make_engine()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Create an AsyncSession per test; nothing is committed."""
    session_maker = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def persist(db_session: AsyncSession) -> Callable[..., Awaitable[None]]:
    """Add ORM objects to the test session and flush them."""

    async def _persist(*entities: Any) -> None:
        db_session.add_all(entities)
        await db_session.flush()

    return _persist


@pytest.fixture
def settings_override(tmp_path: Path) -> Settings:
    """Test-friendly settings; served to handlers through a dependency override."""

    base_settings = Settings()
    database = base_settings.database.model_copy(update={"url": SQLITE_URL, "echo": False})
    log_conf = base_settings.logging.model_copy(update={"directory": tmp_path / "logs"})
    return base_settings.model_copy(update={"database": database, "logging": log_conf})


@pytest.fixture
def app_factory(
    db_session: AsyncSession, settings_override: Settings
) -> Callable[..., FastAPI]:
    """Build an app from test settings bound to the test session.

    Keyword arguments override ``api`` settings.
    """

    def _build(**api_overrides: Any) -> FastAPI:
        api_conf = settings_override.api.model_copy(update=api_overrides)
        settings = settings_override.model_copy(update={"api": api_conf})
        app = create_app(settings)

        async def _test_db() -> AsyncIterator[AsyncSession]:
            yield db_session

        app.dependency_overrides[get_db] = _test_db
        return app

    return _build


@pytest.fixture
async def client(app_factory: Callable[..., FastAPI]) -> AsyncIterator[AsyncClient]:
    """HTTP client speaking to an app with legacy status codes."""
    transport = ASGITransport(app=app_factory())
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client


@pytest.fixture
async def strict_client(app_factory: Callable[..., FastAPI]) -> AsyncIterator[AsyncClient]:
    """HTTP client speaking to an app with normalized 400/404 status codes."""
    transport = ASGITransport(app=app_factory(legacy_status_codes=False))
    async with AsyncClient(transport=transport, base_url="http://test") as http_client:
        yield http_client
