"""
API route definitions for the blog.

Every lookup handler follows the same convention: extract one path
parameter, call one repository lookup, then either render the entity as
indented JSON or raise ``ApiError`` to produce the error envelope.
"""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from ..config import Settings
from ..exceptions import InvalidIdentifierError, RepositoryError
from .dependencies import (
    CommentRepoDep,
    PostRepoDep,
    SettingsDep,
    TagRepoDep,
    UserRepoDep,
    check_database_health,
)
from .params import parse_identifier
from .responses import ApiError, IndentedJSONResponse, render
from .schemas import (
    CommentResponse,
    ComponentHealth,
    ErrorEnvelope,
    HealthResponse,
    HealthStatus,
    MessageResponse,
    PingResponse,
    PostResponse,
    RouteManifest,
    TagResponse,
    UserResponse,
)

T = TypeVar("T")

# -----------------------------------------------------------------------------
# Router Definitions
# -----------------------------------------------------------------------------

health_router = APIRouter(tags=["Health"])
docs_router = APIRouter(prefix="/api", tags=["Documentation"])
comments_router = APIRouter(prefix="/api/comments", tags=["Comments"])
posts_router = APIRouter(prefix="/api/posts", tags=["Posts"])
tags_router = APIRouter(prefix="/api/tags", tags=["Tags"])
users_router = APIRouter(prefix="/api/users", tags=["Users"])

_LOOKUP_ERRORS = {
    400: {"model": ErrorEnvelope, "description": "Malformed id (strict mode)"},
    404: {"model": ErrorEnvelope, "description": "No matching record"},
    500: {"model": ErrorEnvelope, "description": "Malformed id (legacy mode)"},
}


# -----------------------------------------------------------------------------
# Status Policy
# -----------------------------------------------------------------------------


def malformed_id_status(settings: Settings) -> int:
    """Status answered for an id that is not an integer."""
    if settings.api.legacy_status_codes:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_400_BAD_REQUEST


def tag_slug_miss_status(settings: Settings) -> int:
    """Status answered when no tag has the requested slug."""
    if settings.api.legacy_status_codes:
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return status.HTTP_404_NOT_FOUND


def _identifier(raw: str, settings: Settings) -> int:
    try:
        return parse_identifier(raw)
    except InvalidIdentifierError as exc:
        raise ApiError(malformed_id_status(settings), exc.message) from exc


async def _lookup(fetch: Awaitable[T], status_code: int = status.HTTP_404_NOT_FOUND) -> T:
    try:
        return await fetch
    except RepositoryError as exc:
        raise ApiError(status_code, exc.message) from exc


# -----------------------------------------------------------------------------
# Health Endpoints
# -----------------------------------------------------------------------------


@health_router.get(
    "/api/ping",
    response_model=PingResponse,
    summary="Liveness probe",
    description="Always answers pong without touching the database.",
)
async def ping() -> JSONResponse:
    return JSONResponse(PingResponse().model_dump())


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the service and its database.",
)
async def health_check(settings: SettingsDep) -> HealthResponse:
    """Probe the database and report overall service health."""
    db_healthy, db_latency = await check_database_health(settings)
    database = ComponentHealth(
        name="database",
        status=HealthStatus.HEALTHY if db_healthy else HealthStatus.UNHEALTHY,
        latency_ms=db_latency,
        message=None if db_healthy else "Database connection failed",
    )

    return HealthResponse(
        status=database.status,
        version=settings.app.version,
        environment=settings.app.environment.value,
        components=[database],
    )


# -----------------------------------------------------------------------------
# Documentation Endpoint
# -----------------------------------------------------------------------------


@docs_router.get(
    "/",
    response_model=RouteManifest,
    summary="API documentation",
    description="Static map of route names to URL templates, similar to https://api.github.com.",
)
async def api_documentation() -> IndentedJSONResponse:
    return render(RouteManifest())


# -----------------------------------------------------------------------------
# Comments Endpoints
# -----------------------------------------------------------------------------


@comments_router.get("", response_model=MessageResponse, summary="List comments")
async def list_comments() -> IndentedJSONResponse:
    """Collection listing is not served; answers a fixed message."""
    return render(MessageResponse())


@comments_router.get(
    "/post/{post_id}",
    response_model=list[CommentResponse],
    summary="Comments of a post",
    responses=_LOOKUP_ERRORS,
)
async def list_post_comments(
    post_id: str,
    comments: CommentRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    """Return approved comments of a post, oldest first."""
    identifier = _identifier(post_id, settings)
    thread = await _lookup(comments.list_for_post(identifier))
    return render([CommentResponse.model_validate(comment) for comment in thread])


@comments_router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
    responses=_LOOKUP_ERRORS,
)
async def get_comment(
    comment_id: str,
    comments: CommentRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    """Return an approved comment; unapproved ones are answered as misses."""
    identifier = _identifier(comment_id, settings)
    comment = await _lookup(comments.get_by_id(identifier))
    return render(CommentResponse.model_validate(comment))


# -----------------------------------------------------------------------------
# Posts Endpoints
# -----------------------------------------------------------------------------


@posts_router.get(
    "/",
    response_model=list[PostResponse],
    summary="List posts",
    description="Published posts (pages excluded), newest publication first.",
    responses={404: {"model": ErrorEnvelope, "description": "Store query failed"}},
)
async def list_posts(posts: PostRepoDep) -> IndentedJSONResponse:
    listing = await _lookup(posts.list_posts(include_pages=False, published_only=True))
    return render([PostResponse.model_validate(post) for post in listing])


@posts_router.get(
    "/slug/{slug}",
    response_model=PostResponse,
    summary="Get post by slug",
    responses={404: _LOOKUP_ERRORS[404]},
)
async def get_post_by_slug(slug: str, posts: PostRepoDep) -> IndentedJSONResponse:
    post = await _lookup(posts.get_by_slug(slug))
    return render(PostResponse.model_validate(post))


@posts_router.get(
    "/{post_id}",
    response_model=PostResponse,
    summary="Get post",
    responses=_LOOKUP_ERRORS,
)
async def get_post(
    post_id: str,
    posts: PostRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    identifier = _identifier(post_id, settings)
    post = await _lookup(posts.get_by_id(identifier))
    return render(PostResponse.model_validate(post))


# -----------------------------------------------------------------------------
# Tags Endpoints
# -----------------------------------------------------------------------------


@tags_router.get(
    "/",
    response_model=list[TagResponse],
    summary="List tags",
    responses={404: {"model": ErrorEnvelope, "description": "Store query failed"}},
)
async def list_tags(tags: TagRepoDep) -> IndentedJSONResponse:
    listing = await _lookup(tags.list_tags())
    return render([TagResponse.model_validate(tag) for tag in listing])


@tags_router.get(
    "/slug/{slug}",
    response_model=TagResponse,
    summary="Get tag by slug",
    responses={
        404: {"model": ErrorEnvelope, "description": "No matching tag (strict mode)"},
        500: {"model": ErrorEnvelope, "description": "No matching tag (legacy mode)"},
    },
)
async def get_tag_by_slug(
    slug: str,
    tags: TagRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    tag = await _lookup(tags.get_by_slug(slug), tag_slug_miss_status(settings))
    return render(TagResponse.model_validate(tag))


@tags_router.get(
    "/{tag_id}",
    response_model=TagResponse,
    summary="Get tag",
    responses=_LOOKUP_ERRORS,
)
async def get_tag(
    tag_id: str,
    tags: TagRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    identifier = _identifier(tag_id, settings)
    tag = await _lookup(tags.get_by_id(identifier))
    return render(TagResponse.model_validate(tag))


# -----------------------------------------------------------------------------
# Users Endpoints
# -----------------------------------------------------------------------------


@users_router.get("/", response_model=MessageResponse, summary="List users")
async def list_users() -> IndentedJSONResponse:
    """Collection listing is not served; answers a fixed message."""
    return render(MessageResponse())


@users_router.get(
    "/slug/{slug}",
    response_model=UserResponse,
    summary="Get user by slug",
    responses={404: _LOOKUP_ERRORS[404]},
)
async def get_user_by_slug(slug: str, users: UserRepoDep) -> IndentedJSONResponse:
    user = await _lookup(users.get_by_slug(slug))
    return render(UserResponse.model_validate(user))


@users_router.get(
    "/email/{email}",
    response_model=UserResponse,
    summary="Get user by email",
    responses={404: _LOOKUP_ERRORS[404]},
)
async def get_user_by_email(email: str, users: UserRepoDep) -> IndentedJSONResponse:
    user = await _lookup(users.get_by_email(email))
    return render(UserResponse.model_validate(user))


@users_router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get user",
    responses=_LOOKUP_ERRORS,
)
async def get_user(
    user_id: str,
    users: UserRepoDep,
    settings: SettingsDep,
) -> IndentedJSONResponse:
    identifier = _identifier(user_id, settings)
    user = await _lookup(users.get_by_id(identifier))
    return render(UserResponse.model_validate(user))


__all__ = [
    "comments_router",
    "docs_router",
    "health_router",
    "malformed_id_status",
    "posts_router",
    "tag_slug_miss_status",
    "tags_router",
    "users_router",
]
