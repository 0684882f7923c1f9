"""
Pydantic schemas describing every response shape of the JSON API.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

NOT_IMPLEMENTED = "Not implemented"


# -----------------------------------------------------------------------------
# Entity Schemas
# -----------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public profile of an author."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique user identifier.")
    name: str = Field(..., description="Display name.")
    slug: str = Field(..., description="URL-safe profile identifier.")
    email: str = Field(..., description="Contact email address.")
    image: str | None = Field(default=None, description="Avatar URL.")
    cover: str | None = Field(default=None, description="Profile cover image URL.")
    bio: str | None = Field(default=None, description="Short biography.")
    website: str | None = Field(default=None, description="Personal website.")
    location: str | None = Field(default=None, description="Free-form location.")
    role: str = Field(..., description="Account role.")
    created_at: datetime = Field(..., description="Record creation timestamp.")
    updated_at: datetime = Field(..., description="Record last update timestamp.")


class TagResponse(BaseModel):
    """Tag attached to posts."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique tag identifier.")
    name: str = Field(..., description="Display name.")
    slug: str = Field(..., description="URL-safe tag identifier.")
    hidden: bool = Field(default=False, description="Whether the tag is hidden from listings.")
    created_at: datetime = Field(..., description="Record creation timestamp.")
    updated_at: datetime = Field(..., description="Record last update timestamp.")


class PostResponse(BaseModel):
    """Post or page with its author and tags."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique post identifier.")
    title: str = Field(..., description="Post title.")
    slug: str = Field(..., description="URL-safe post identifier.")
    markdown: str = Field(..., description="Markdown source.")
    html: str = Field(..., description="Rendered HTML body.")
    featured: bool = Field(..., description="Whether the post is featured.")
    is_page: bool = Field(..., description="Whether this is a static page.")
    allow_comment: bool = Field(..., description="Whether comments are accepted.")
    published: bool = Field(..., description="Whether the post is publicly published.")
    image: str | None = Field(default=None, description="Cover image URL.")
    meta_description: str | None = Field(default=None, description="SEO description.")
    author: UserResponse | None = Field(default=None, description="Post author.")
    tags: list[TagResponse] = Field(default_factory=list, description="Tags ordered by name.")
    created_at: datetime = Field(..., description="Record creation timestamp.")
    updated_at: datetime = Field(..., description="Record last update timestamp.")
    published_at: datetime | None = Field(default=None, description="Publication timestamp.")


class CommentResponse(BaseModel):
    """Reader comment."""

    model_config = ConfigDict(from_attributes=True)

    id: int = Field(..., description="Unique comment identifier.")
    post_id: int = Field(..., description="Post the comment belongs to.")
    parent_id: int | None = Field(default=None, description="Comment being replied to.")
    author: str = Field(..., description="Commenter display name.")
    author_email: str = Field(..., description="Commenter email address.")
    author_url: str | None = Field(default=None, description="Commenter website.")
    content: str = Field(..., description="Comment body.")
    approved: bool = Field(..., description="Whether a moderator approved the comment.")
    created_at: datetime = Field(..., description="Submission timestamp.")


# -----------------------------------------------------------------------------
# Envelope / Fixed-Body Schemas
# -----------------------------------------------------------------------------


class ErrorEnvelope(BaseModel):
    """Uniform error body written by every failing handler."""

    model_config = ConfigDict(populate_by_name=True)

    status_code: int = Field(..., alias="statusCode", description="HTTP status code.")
    error: str = Field(..., description="Human-readable error message.")


class MessageResponse(BaseModel):
    """Placeholder body for collections that are not served yet."""

    message: str = Field(default=NOT_IMPLEMENTED, description="Status message.")


class PingResponse(BaseModel):
    """Liveness probe body."""

    status: str = Field(default="pong")


class RouteManifest(BaseModel):
    """Static map of route names to URL templates."""

    api_documentation_url: str = "/api/"
    comments_url: str = "/api/comments"
    comment_url: str = "/api/comments/:id"
    comment_post_url: str = "/api/comments/post/:id"
    posts_url: str = "/api/posts/"
    post_url: str = "/api/posts/:id"
    post_slug_url: str = "/api/posts/slug/:slug"
    tags_url: str = "/api/tags/"
    tag_url: str = "/api/tags/:id"
    tag_slug_url: str = "/api/tags/slug/:slug"
    users_url: str = "/api/users/"
    user_url: str = "/api/users/:id"
    user_slug_url: str = "/api/users/slug/:slug"
    user_email_url: str = "/api/users/email/:email"


# -----------------------------------------------------------------------------
# Health / Status Schemas
# -----------------------------------------------------------------------------


class HealthStatus(str, Enum):
    """Service health status values."""

    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


class ComponentHealth(BaseModel):
    """Health status for a single component."""

    name: str = Field(..., description="Component name.")
    status: HealthStatus = Field(..., description="Component status.")
    latency_ms: float | None = Field(default=None, description="Response latency in milliseconds.")
    message: str | None = Field(default=None, description="Optional status message.")


class HealthResponse(BaseModel):
    """Aggregated health check response."""

    status: HealthStatus = Field(..., description="Overall service status.")
    version: str = Field(..., description="Application version.")
    environment: str = Field(..., description="Deployment environment.")
    components: list[ComponentHealth] = Field(
        default_factory=list,
        description="Individual component health statuses.",
    )


__all__ = [
    "NOT_IMPLEMENTED",
    "CommentResponse",
    "ComponentHealth",
    "ErrorEnvelope",
    "HealthResponse",
    "HealthStatus",
    "MessageResponse",
    "PingResponse",
    "PostResponse",
    "RouteManifest",
    "TagResponse",
    "UserResponse",
]
