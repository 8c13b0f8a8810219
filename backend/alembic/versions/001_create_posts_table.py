"""Create posts table

Revision ID: 001
Revises: None
Create Date: 2024-01-15 00:00:00.000000+00:00

What:  Creates the `posts` table read by the blog pages.
How:   Unique slug constraint plus a published DESC index for the
       "most recent posts" query.

Rollback: downgrade() drops the table entirely (destructive: all posts lost).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "slug",
            sa.String(255),
            nullable=False,
            comment="URL-safe unique identifier",
        ),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column(
            "body",
            sa.Text(),
            nullable=False,
            server_default=sa.text("''"),
            comment="Post content, may contain markup",
        ),
        sa.Column(
            "published",
            sa.DateTime(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this post was published (UTC)",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="uq_posts_slug"),
    )

    op.create_index(
        "idx_posts_published",
        "posts",
        [sa.text("published DESC")],
    )


def downgrade() -> None:
    """WARNING: destructive. Archive posts with a forward migration instead."""
    op.drop_index("idx_posts_published", table_name="posts")
    op.drop_table("posts")
