"""
HTTP-level tests for the blog API routes.

Requests go through httpx's ASGI transport. Apps are built from test settings
and the database session is swapped for the test session via a dependency
override.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from blog_api.api import routes as routes_module
from blog_api.api.dependencies import get_db, get_post_repository
from blog_api.api.main import create_app
from blog_api.config import Settings
from blog_api.db.repositories import PostRepository
from blog_api.exceptions import RepositoryError
from blog_api.logger import ACCESS_LOGGER_NAME
from tests.factories import CommentFactory, PostFactory, TagFactory, UserFactory
from tests.support import SQLITE_URL, make_engine

Persist = Callable[..., Awaitable[None]]

BY_ID_ROUTES = [
    "/api/posts/{id}",
    "/api/tags/{id}",
    "/api/users/{id}",
    "/api/comments/{id}",
    "/api/comments/post/{id}",
]

MANIFEST_KEYS = {
    "api_documentation_url",
    "comments_url",
    "comment_url",
    "comment_post_url",
    "posts_url",
    "post_url",
    "post_slug_url",
    "tags_url",
    "tag_url",
    "tag_slug_url",
    "users_url",
    "user_url",
    "user_slug_url",
    "user_email_url",
}


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


# -----------------------------------------------------------------------------
# Liveness, Health, and Documentation
# -----------------------------------------------------------------------------


class TestServiceEndpoints:
    """Ping, health, documentation, and placeholder collections."""

    @pytest.mark.asyncio
    async def test_ping_returns_compact_pong(self, client: AsyncClient) -> None:
        response = await client.get("/api/ping")

        assert response.status_code == 200
        assert response.content == b'{"status":"pong"}'

    @pytest.mark.asyncio
    async def test_ping_does_not_need_the_database(self, settings_override: Settings) -> None:
        """No session override: any store access would fail to connect."""
        unreachable = settings_override.database.model_copy(
            update={"url": "postgresql+psycopg://nobody@127.0.0.1:1/missing"}
        )
        app = create_app(settings_override.model_copy(update={"database": unreachable}))

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/ping")

        assert response.status_code == 200
        assert response.json() == {"status": "pong"}

    @pytest.mark.asyncio
    async def test_documentation_lists_exactly_the_documented_routes(
        self, client: AsyncClient
    ) -> None:
        response = await client.get("/api/")

        assert response.status_code == 200
        manifest = json.loads(response.content)
        assert set(manifest) == MANIFEST_KEYS
        assert manifest["tag_slug_url"] == "/api/tags/slug/:slug"
        assert response.text.startswith('{\n  "')

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/api/users/", "/api/comments"])
    async def test_unimplemented_collections(self, client: AsyncClient, path: str) -> None:
        response = await client.get(path)

        assert response.status_code == 200
        assert response.json() == {"message": "Not implemented"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("healthy", "expected"), [(True, "healthy"), (False, "unhealthy")])
    async def test_health_reports_database_status(
        self,
        client: AsyncClient,
        monkeypatch: pytest.MonkeyPatch,
        healthy: bool,
        expected: str,
    ) -> None:
        checked_urls: list[str] = []

        async def fake_check(settings: Settings) -> tuple[bool, float]:
            checked_urls.append(settings.database.url)
            return healthy, 1.5

        monkeypatch.setattr(routes_module, "check_database_health", fake_check)

        response = await client.get("/health")

        assert response.status_code == 200
        assert checked_urls == [SQLITE_URL]
        data = response.json()
        assert data["status"] == expected
        assert data["components"][0]["name"] == "database"
        assert data["components"][0]["latency_ms"] == 1.5

    @pytest.mark.asyncio
    async def test_unknown_route_uses_error_envelope(self, client: AsyncClient) -> None:
        response = await client.get("/api/nowhere")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "error": "Not Found"}

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient) -> None:
        response = await client.get("/api/ping", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_access_log_line_carries_request_id(
        self, client: AsyncClient, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER_NAME):
            await client.get("/api/ping", headers={"X-Request-ID": "req-456"})

        [record] = [r for r in caplog.records if r.name == ACCESS_LOGGER_NAME]
        assert record.getMessage().startswith("GET /api/ping -> 200 (")
        assert record.request_id == "req-456"


# -----------------------------------------------------------------------------
# Status Conventions
# -----------------------------------------------------------------------------


class TestStatusConventions:
    """Malformed ids, misses, and the strict status policy."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("template", BY_ID_ROUTES)
    async def test_non_numeric_id_is_a_500(self, client: AsyncClient, template: str) -> None:
        response = await client.get(template.format(id="abc"))

        assert response.status_code == 500
        body = response.json()
        assert body["statusCode"] == 500
        assert body["error"] == 'parsing "abc": invalid syntax'

    @pytest.mark.asyncio
    @pytest.mark.parametrize("template", BY_ID_ROUTES)
    async def test_unknown_numeric_id_is_a_404(self, client: AsyncClient, template: str) -> None:
        response = await client.get(template.format(id="9999"))

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "error": "record not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "path",
        [
            "/api/posts/slug/missing",
            "/api/users/slug/missing",
            "/api/users/email/nobody@example.com",
        ],
    )
    async def test_slug_and_email_misses_are_404(self, client: AsyncClient, path: str) -> None:
        response = await client.get(path)

        assert response.status_code == 404
        assert response.json()["error"] == "record not found"

    @pytest.mark.asyncio
    async def test_tag_slug_miss_is_a_500(self, client: AsyncClient) -> None:
        response = await client.get("/api/tags/slug/unknown-slug")

        assert response.status_code == 500
        assert response.json() == {"statusCode": 500, "error": "record not found"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("template", BY_ID_ROUTES)
    async def test_strict_mode_answers_400_for_bad_ids(
        self, strict_client: AsyncClient, template: str
    ) -> None:
        response = await strict_client.get(template.format(id="1.5"))

        assert response.status_code == 400
        assert response.json()["statusCode"] == 400

    @pytest.mark.asyncio
    async def test_handlers_follow_settings_given_to_create_app(
        self, db_session: AsyncSession, settings_override: Settings
    ) -> None:
        strict_api = settings_override.api.model_copy(update={"legacy_status_codes": False})
        app = create_app(settings_override.model_copy(update={"api": strict_api}))

        async def _test_db() -> AsyncIterator[AsyncSession]:
            yield db_session

        app.dependency_overrides[get_db] = _test_db

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            bad_id = await ac.get("/api/posts/abc")
            tag_miss = await ac.get("/api/tags/slug/unknown-slug")

        assert bad_id.status_code == 400
        assert bad_id.json() == {"statusCode": 400, "error": 'parsing "abc": invalid syntax'}
        assert tag_miss.status_code == 404

    @pytest.mark.asyncio
    async def test_strict_mode_answers_404_for_tag_slug_miss(
        self, strict_client: AsyncClient
    ) -> None:
        response = await strict_client.get("/api/tags/slug/unknown-slug")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "error": "record not found"}

    @pytest.mark.asyncio
    async def test_store_failure_on_listing_is_a_404(
        self, app_factory: Callable[..., FastAPI]
    ) -> None:
        class BrokenPostRepository(PostRepository):
            async def list_posts(self, **kwargs: object) -> list:
                raise RepositoryError("connection reset by peer")

        app = app_factory()
        app.dependency_overrides[get_post_repository] = lambda: BrokenPostRepository(None)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/posts/")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "error": "connection reset by peer"}

    @pytest.mark.asyncio
    async def test_missing_schema_surfaces_store_message(
        self, app_factory: Callable[..., FastAPI]
    ) -> None:
        """A real driver error (no tables) becomes the envelope message."""
        engine = make_engine()
        app = app_factory()

        async def _empty_db() -> AsyncIterator[AsyncSession]:
            async with async_sessionmaker(engine)() as session:
                yield session

        app.dependency_overrides[get_db] = _empty_db
        try:
            async with AsyncClient(
                transport=ASGITransport(app=app), base_url="http://test"
            ) as ac:
                listing = await ac.get("/api/tags/")
                by_slug = await ac.get("/api/tags/slug/anything")
        finally:
            await engine.dispose()

        assert listing.status_code == 404
        assert "no such table" in listing.json()["error"]
        assert by_slug.status_code == 500
        assert "no such table" in by_slug.json()["error"]


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------


class TestPostRoutes:
    """Post listing and lookups."""

    @pytest.mark.asyncio
    async def test_listing_is_empty_array_without_posts(self, client: AsyncClient) -> None:
        response = await client.get("/api/posts/")

        assert response.status_code == 200
        assert response.content == b"[]"

    @pytest.mark.asyncio
    async def test_listing_excludes_drafts_and_pages_newest_first(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        now = _utcnow()
        oldest = PostFactory.build(slug="oldest", published_at=now - timedelta(days=3))
        newest = PostFactory.build(slug="newest", published_at=now - timedelta(hours=1))
        middle = PostFactory.build(slug="middle", published_at=now - timedelta(days=1))
        draft = PostFactory.build(slug="draft", published=False, published_at=now)
        page = PostFactory.build(slug="about", is_page=True, published_at=now)
        await persist(oldest, newest, middle, draft, page)

        response = await client.get("/api/posts/")

        assert response.status_code == 200
        slugs = [post["slug"] for post in response.json()]
        assert slugs == ["newest", "middle", "oldest"]

        timestamps = [post["published_at"] for post in response.json()]
        assert timestamps == sorted(timestamps, reverse=True)
        assert len(set(timestamps)) == len(timestamps)

    @pytest.mark.asyncio
    async def test_listing_breaks_ties_by_id(self, client: AsyncClient, persist: Persist) -> None:
        moment = _utcnow()
        first = PostFactory.build(published_at=moment)
        second = PostFactory.build(published_at=moment)
        await persist(first)
        await persist(second)

        response = await client.get("/api/posts/")

        assert [post["id"] for post in response.json()] == [second.id, first.id]

    @pytest.mark.asyncio
    async def test_get_post_by_id_includes_author_and_tags(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        author = UserFactory.build(name="Ada Lovelace")
        tags = [TagFactory.build(name="Python"), TagFactory.build(name="Async")]
        post = PostFactory.build(title="Hello", author=author, tags=tags)
        await persist(author, *tags, post)

        response = await client.get(f"/api/posts/{post.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == post.id
        assert data["title"] == "Hello"
        assert data["author"]["name"] == "Ada Lovelace"
        assert [tag["name"] for tag in data["tags"]] == ["Async", "Python"]
        assert response.text.startswith('{\n  "id": ')

    @pytest.mark.asyncio
    async def test_get_post_by_id_serves_drafts(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        draft = PostFactory.build(published=False, published_at=None)
        await persist(draft)

        response = await client.get(f"/api/posts/{draft.id}")

        assert response.status_code == 200
        assert response.json()["published"] is False
        assert response.json()["published_at"] is None

    @pytest.mark.asyncio
    async def test_get_post_by_slug(self, client: AsyncClient, persist: Persist) -> None:
        post = PostFactory.build(slug="hello-world")
        await persist(post)

        response = await client.get("/api/posts/slug/hello-world")

        assert response.status_code == 200
        assert response.json()["id"] == post.id


# -----------------------------------------------------------------------------
# Tags
# -----------------------------------------------------------------------------


class TestTagRoutes:
    """Tag listing and lookups."""

    @pytest.mark.asyncio
    async def test_listing_orders_by_name(self, client: AsyncClient, persist: Persist) -> None:
        await persist(
            TagFactory.build(name="Rust"),
            TagFactory.build(name="Go"),
            TagFactory.build(name="Python", hidden=True),
        )

        response = await client.get("/api/tags/")

        assert response.status_code == 200
        assert [tag["name"] for tag in response.json()] == ["Go", "Python", "Rust"]

    @pytest.mark.asyncio
    async def test_listing_is_empty_array_without_tags(self, client: AsyncClient) -> None:
        response = await client.get("/api/tags/")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_tag_by_id_and_slug(self, client: AsyncClient, persist: Persist) -> None:
        tag = TagFactory.build(name="Databases", slug="databases")
        await persist(tag)

        by_id = await client.get(f"/api/tags/{tag.id}")
        by_slug = await client.get("/api/tags/slug/databases")

        assert by_id.status_code == 200
        assert by_slug.status_code == 200
        assert by_id.json() == by_slug.json()
        assert by_id.json()["name"] == "Databases"


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class TestUserRoutes:
    """User lookups by id, slug, and email."""

    @pytest.mark.asyncio
    async def test_lookups_return_the_same_user(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        user = UserFactory.build(slug="grace", email="grace@example.com")
        await persist(user)

        responses = [
            await client.get(f"/api/users/{user.id}"),
            await client.get("/api/users/slug/grace"),
            await client.get("/api/users/email/grace@example.com"),
        ]

        assert [r.status_code for r in responses] == [200, 200, 200]
        assert {r.json()["id"] for r in responses} == {user.id}

    @pytest.mark.asyncio
    async def test_email_lookup_ignores_case(self, client: AsyncClient, persist: Persist) -> None:
        user = UserFactory.build(email="mixed@example.com")
        await persist(user)

        response = await client.get("/api/users/email/Mixed@Example.COM")

        assert response.status_code == 200
        assert response.json()["email"] == "mixed@example.com"


# -----------------------------------------------------------------------------
# Comments
# -----------------------------------------------------------------------------


class TestCommentRoutes:
    """Single comments and post threads."""

    @pytest.mark.asyncio
    async def test_get_comment_by_id(self, client: AsyncClient, persist: Persist) -> None:
        post = PostFactory.build()
        await persist(post)
        comment = CommentFactory.build(post_id=post.id, content="Nice post")
        await persist(comment)

        response = await client.get(f"/api/comments/{comment.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["content"] == "Nice post"
        assert data["post_id"] == post.id
        assert "author_ip" not in data

    @pytest.mark.asyncio
    async def test_unapproved_comment_is_a_404(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        post = PostFactory.build()
        await persist(post)
        pending = CommentFactory.build(post_id=post.id, approved=False)
        await persist(pending)

        response = await client.get(f"/api/comments/{pending.id}")

        assert response.status_code == 404
        assert response.json() == {"statusCode": 404, "error": "record not found"}

    @pytest.mark.asyncio
    async def test_thread_lists_approved_comments_oldest_first(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        post = PostFactory.build()
        other = PostFactory.build()
        await persist(post, other)
        now = _utcnow()
        await persist(
            CommentFactory.build(post_id=post.id, content="second", created_at=now),
            CommentFactory.build(
                post_id=post.id, content="first", created_at=now - timedelta(minutes=5)
            ),
            CommentFactory.build(post_id=post.id, content="spam", approved=False),
            CommentFactory.build(post_id=other.id, content="elsewhere"),
        )

        response = await client.get(f"/api/comments/post/{post.id}")

        assert response.status_code == 200
        assert [c["content"] for c in response.json()] == ["first", "second"]

    @pytest.mark.asyncio
    async def test_thread_of_post_without_comments_is_empty(
        self, client: AsyncClient, persist: Persist
    ) -> None:
        post = PostFactory.build()
        await persist(post)

        response = await client.get(f"/api/comments/post/{post.id}")

        assert response.status_code == 200
        assert response.json() == []
