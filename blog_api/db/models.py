"""
SQLAlchemy ORM models for posts, tags, users, and comments.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    func,
    text,
)
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

# SQLite only autoincrements INTEGER PRIMARY KEY columns.
Identifier = BigInteger().with_variant(Integer(), "sqlite")


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(UTC)


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base that enables async-friendly ORM operations."""

    pass


class TimestampMixin:
    """Reusable timestamp columns for auditing."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        onupdate=_utc_now,
        server_default=func.now(),
    )


posts_tags = Table(
    "posts_tags",
    Base.metadata,
    Column("post_id", Identifier, ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Identifier, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(TimestampMixin, Base):
    """Author account shown as the byline of posts."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    slug: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    cover: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    website: Mapped[str | None] = mapped_column(String(255), nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default="author",
        server_default=text("'author'"),
    )


class Tag(TimestampMixin, Base):
    """Label grouping related posts."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    slug: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    hidden: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )


class Post(TimestampMixin, Base):
    """Blog post or static page."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    slug: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    markdown: Mapped[str] = mapped_column(Text, nullable=False, default="")
    html: Mapped[str] = mapped_column(Text, nullable=False, default="")
    featured: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    is_page: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    allow_comment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=text("true")
    )
    published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(200), nullable=True)
    author_id: Mapped[int | None] = mapped_column(
        Identifier,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Eager loading keeps serialization free of lazy loads under AsyncSession.
    author: Mapped[User | None] = relationship("User", lazy="selectin")
    tags: Mapped[list[Tag]] = relationship(
        "Tag",
        secondary=posts_tags,
        lazy="selectin",
        order_by="Tag.name",
    )

    __table_args__ = (
        # Published listing: WHERE published AND NOT is_page ORDER BY published_at DESC
        Index("ix_posts_published_page_published_at", "published", "is_page", "published_at"),
        Index("ix_posts_author_id", "author_id"),
    )


class Comment(Base):
    """Reader comment attached to a post."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Identifier, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Identifier,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    parent_id: Mapped[int | None] = mapped_column(
        Identifier,
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
    )
    author: Mapped[str] = mapped_column(String(150), nullable=False)
    author_email: Mapped[str] = mapped_column(String(254), nullable=False)
    author_url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    author_ip: Mapped[str | None] = mapped_column(String(45), nullable=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    approved: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utc_now,
        server_default=func.now(),
    )

    __table_args__ = (Index("ix_comments_post_id_created_at", "post_id", "created_at"),)


__all__ = ["Base", "Comment", "Post", "Tag", "User", "posts_tags"]
