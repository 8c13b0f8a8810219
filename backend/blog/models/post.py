"""
Blog Backend: Post SQLAlchemy Model
=====================================

What:  ORM model representing the `posts` table.
Why:   Maps Python objects to database rows for type-safe queries.
Who:   Read by PostService; Alembic tracks it for migrations.

Table Design Rationale:
    - Integer surrogate key; the public identifier is the slug
    - slug: unique and immutable once published, used in URLs
    - body: TEXT, may contain markup written by the author
    - published: UTC with timezone

    Index on published DESC:
        Serves the "most recent N posts" query without a sort step.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from blog.database import Base


class Post(Base):
    """
    A published blog post.

    Posts are written by an external authoring process; this application
    only ever reads them.
    """

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="URL-safe unique identifier",
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    body: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
        comment="Post content, may contain markup",
    )

    published: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this post was published (UTC)",
    )

    __table_args__ = (
        Index("idx_posts_published", published.desc()),
    )

    def __repr__(self) -> str:
        return f"<Post(slug='{self.slug}', published='{self.published}')>"
