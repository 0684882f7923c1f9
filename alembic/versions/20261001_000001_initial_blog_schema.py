"""Initial schema with users, tags, posts, post tags, and comments."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

revision = "20261001000001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("slug", sa.String(length=150), nullable=False),
        sa.Column("email", sa.String(length=254), nullable=False),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("cover", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("website", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column(
            "role",
            sa.String(length=32),
            nullable=False,
            server_default=sa.text("'author'"),
        ),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_users_slug"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )

    op.create_table(
        "tags",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=150), nullable=False),
        sa.Column("slug", sa.String(length=150), nullable=False),
        sa.Column("hidden", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_tags_slug"),
    )

    op.create_table(
        "posts",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(length=150), nullable=False),
        sa.Column("slug", sa.String(length=150), nullable=False),
        sa.Column("markdown", sa.Text(), nullable=False),
        sa.Column("html", sa.Text(), nullable=False),
        sa.Column("featured", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_page", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("allow_comment", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("image", sa.String(length=255), nullable=True),
        sa.Column("meta_description", sa.String(length=200), nullable=True),
        sa.Column(
            "author_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )
    op.create_index(
        "ix_posts_published_page_published_at",
        "posts",
        ["published", "is_page", "published_at"],
    )
    op.create_index("ix_posts_author_id", "posts", ["author_id"])

    op.create_table(
        "posts_tags",
        sa.Column(
            "post_id",
            sa.BigInteger(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "tag_id",
            sa.BigInteger(),
            sa.ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )

    op.create_table(
        "comments",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column(
            "post_id",
            sa.BigInteger(),
            sa.ForeignKey("posts.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "parent_id",
            sa.BigInteger(),
            sa.ForeignKey("comments.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("author", sa.String(length=150), nullable=False),
        sa.Column("author_email", sa.String(length=254), nullable=False),
        sa.Column("author_url", sa.String(length=255), nullable=True),
        sa.Column("author_ip", sa.String(length=45), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "ix_comments_post_id_created_at",
        "comments",
        ["post_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_comments_post_id_created_at", table_name="comments")
    op.drop_table("comments")
    op.drop_table("posts_tags")
    op.drop_index("ix_posts_author_id", table_name="posts")
    op.drop_index("ix_posts_published_page_published_at", table_name="posts")
    op.drop_table("posts")
    op.drop_table("tags")
    op.drop_table("users")
