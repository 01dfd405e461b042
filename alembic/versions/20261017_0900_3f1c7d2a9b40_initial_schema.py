"""initial schema

Revision ID: 3f1c7d2a9b40
Revises:
Create Date: 2026-10-17 09:00:00.000000+00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f1c7d2a9b40"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

JSONDocument = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _updated_at() -> sa.Column:
    return sa.Column(
        "updated_at",
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _string_pk() -> sa.Column:
    return sa.Column("id", sa.String(36), nullable=False)


def _integer_pk() -> sa.Column:
    return sa.Column(
        "id",
        sa.Integer(),
        autoincrement=True,
        nullable=False,
    )


def upgrade() -> None:
    """Upgrade database schema."""
    op.create_table(
        "users",
        _string_pk(),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
        sa.UniqueConstraint("email", name=op.f("uq_users_email")),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "topics",
        _string_pk(),
        sa.Column("topic_name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", JSONDocument, nullable=False),
        sa.Column("owner_id", sa.String(36), nullable=True),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(
            ["owner_id"], ["users.id"], name=op.f("fk_topics_owner_id_users"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_topics")),
        sa.UniqueConstraint("topic_name", name=op.f("uq_topics_topic_name")),
    )
    op.create_index(op.f("ix_topics_owner_id"), "topics", ["owner_id"])

    op.create_table(
        "followers",
        _integer_pk(),
        sa.Column("followable_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(36), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(
            ["followable_id"],
            ["topics.id"],
            name=op.f("fk_followers_followable_id_topics"),
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_followers_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_followers")),
        sa.UniqueConstraint("followable_id", "user_id", name=op.f("uq_followers_followable_id")),
    )
    op.create_index(op.f("ix_followers_followable_id"), "followers", ["followable_id"])

    op.create_table(
        "posts",
        _string_pk(),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("topic_id", sa.String(36), nullable=False),
        sa.Column("author_id", sa.String(36), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(
            ["topic_id"], ["topics.id"], name=op.f("fk_posts_topic_id_topics"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["author_id"], ["users.id"], name=op.f("fk_posts_author_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_posts")),
    )
    op.create_index(op.f("ix_posts_author_id"), "posts", ["author_id"])
    op.create_index("ix_posts_topic_id_created_at", "posts", ["topic_id", "created_at"])

    op.create_table(
        "comments",
        _integer_pk(),
        sa.Column("post_id", sa.String(36), nullable=False),
        sa.Column("author_id", sa.String(36), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.ForeignKeyConstraint(
            ["post_id"], ["posts.id"], name=op.f("fk_comments_post_id_posts"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["author_id"], ["users.id"], name=op.f("fk_comments_author_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_comments")),
    )
    op.create_index(op.f("ix_comments_post_id"), "comments", ["post_id"])

    for table, column in (("likes", "likable_id"), ("viewers", "viewable_id")):
        op.create_table(
            table,
            _integer_pk(),
            sa.Column(column, sa.String(36), nullable=False),
            sa.Column("user_id", sa.String(36), nullable=False),
            _created_at(),
            sa.ForeignKeyConstraint(
                [column], ["posts.id"], name=op.f(f"fk_{table}_{column}_posts"), ondelete="CASCADE"
            ),
            sa.ForeignKeyConstraint(
                ["user_id"], ["users.id"], name=op.f(f"fk_{table}_user_id_users"), ondelete="CASCADE"
            ),
            sa.PrimaryKeyConstraint("id", name=op.f(f"pk_{table}")),
            sa.UniqueConstraint(column, "user_id", name=op.f(f"uq_{table}_{column}")),
        )
        op.create_index(op.f(f"ix_{table}_{column}"), table, [column])

    op.create_table(
        "post_aggregates",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("post", JSONDocument, nullable=False),
        sa.Column("liked_user_ids", JSONDocument, nullable=False),
        sa.Column("viewer_ids", JSONDocument, nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("comment_count", sa.Integer(), nullable=False),
        sa.Column("popularity_score", sa.Float(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_post_aggregates")),
    )
    op.create_index(op.f("ix_post_aggregates_like_count"), "post_aggregates", ["like_count"])
    op.create_index(
        op.f("ix_post_aggregates_popularity_score"), "post_aggregates", ["popularity_score"]
    )

    op.create_table(
        "topic_aggregates",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("topic", JSONDocument, nullable=False),
        sa.Column("follower_ids", JSONDocument, nullable=False),
        sa.Column("follower_count", sa.Integer(), nullable=False),
        sa.Column("post_count", sa.Integer(), nullable=False),
        sa.Column("popularity_score", sa.Float(), nullable=False),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_topic_aggregates")),
    )
    op.create_index(
        op.f("ix_topic_aggregates_popularity_score"), "topic_aggregates", ["popularity_score"]
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("topic_aggregates")
    op.drop_table("post_aggregates")
    op.drop_table("viewers")
    op.drop_table("likes")
    op.drop_table("comments")
    op.drop_table("posts")
    op.drop_table("followers")
    op.drop_table("topics")
    op.drop_table("users")
