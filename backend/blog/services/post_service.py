"""
Blog Backend: Post Service (Data Access)
==========================================

What:  The two read queries the site needs, and the translation of storage
       failures into the DatabaseError family.
Who:   Called by the /blog and /blog/{slug} page handlers.

Failure Mapping:
    ┌────────────────────────────┐    ┌─────────────────────┐
    │ checking out a connection  │───▶│ ConnectionPoolError │
    ├────────────────────────────┤    ├─────────────────────┤
    │ query ran, no row (by slug)│───▶│ NotFoundError       │
    ├────────────────────────────┤    ├─────────────────────┤
    │ anything else, timeouts    │───▶│ QueryError          │
    └────────────────────────────┘    └─────────────────────┘

    A connection is checked out explicitly before the query runs, so a
    failure there can be told apart from a failure of the query itself.

Design Decision:
    PostService holds no per-request state. It receives the session for each
    call; the only thing it is constructed with is the query timeout.
"""

import asyncio
import logging
from typing import List

from fastapi import Request
from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from blog.exceptions import ConnectionPoolError, NotFoundError, QueryError
from blog.models.post import Post
from blog.schemas.post import PostView

logger = logging.getLogger(__name__)


class PostService:
    """
    Read-only access to published posts.

    Responsibilities:
        - select_last_n_posts(): most recent posts, newest first
        - select_post_with_slug(): single post lookup with not-found handling
    """

    def __init__(self, query_timeout: float = 5.0):
        self.query_timeout = query_timeout

    async def select_last_n_posts(self, db: AsyncSession, n: int) -> List[PostView]:
        """
        Return up to `n` posts ordered by publication time, most recent first.

        An empty store yields an empty list, not an error.

        Query plan:
            SELECT * FROM posts ORDER BY published DESC, id DESC LIMIT :n
            → Uses idx_posts_published

        Raises:
            ConnectionPoolError: No connection could be checked out
            QueryError: The query failed or timed out
        """
        if n < 1:
            return []

        query = (
            select(Post)
            .order_by(desc(Post.published), desc(Post.id))
            .limit(n)
        )
        result = await self._execute(db, query, context={"limit": n})
        try:
            return [PostView.model_validate(row) for row in result.scalars().all()]
        except Exception as e:
            logger.error("Failed to read post rows: %s", str(e), exc_info=True)
            raise QueryError(
                message="Could not read post rows",
                context={"limit": n, "error_type": type(e).__name__},
            ) from e

    async def select_post_with_slug(self, db: AsyncSession, slug: str) -> PostView:
        """
        Return the single post whose slug matches `slug` exactly.

        Query plan:
            SELECT * FROM posts WHERE slug = :slug
            → Uses the unique index on slug

        Raises:
            ConnectionPoolError: No connection could be checked out
            NotFoundError: No post has this slug
            QueryError: The query failed or timed out
        """
        query = select(Post).where(Post.slug == slug)
        result = await self._execute(db, query, context={"slug": slug})
        try:
            row = result.scalar_one_or_none()
            found = PostView.model_validate(row) if row is not None else None
        except Exception as e:
            logger.error("Failed to read post %r: %s", slug, str(e), exc_info=True)
            raise QueryError(
                message="Could not read post row",
                context={"slug": slug, "error_type": type(e).__name__},
            ) from e

        if found is None:
            raise NotFoundError(resource="post", key=slug)

        return found

    async def _execute(self, db: AsyncSession, query: Select, context: dict):
        """
        Check out a connection, then run `query` under the query timeout.

        The session keeps the checked-out connection for the rest of the
        request; closing the session returns it to the pool.
        """
        try:
            await db.connection()
        except Exception as e:
            logger.error(
                "Could not acquire database connection: %s: %s",
                type(e).__name__,
                str(e),
            )
            raise ConnectionPoolError(
                context={**context, "error_type": type(e).__name__},
            ) from e

        try:
            return await asyncio.wait_for(db.execute(query), timeout=self.query_timeout)
        except asyncio.TimeoutError as e:
            logger.error("Query did not complete within %.1fs: %s", self.query_timeout, context)
            raise QueryError(
                message=f"Query did not complete within {self.query_timeout}s",
                context={**context, "error_type": "TimeoutError"},
            ) from e
        except Exception as e:
            logger.error("Query failed: %s: %s", type(e).__name__, str(e))
            raise QueryError(
                context={**context, "error_type": type(e).__name__},
            ) from e


# ── Dependency ────────────────────────────────────────────────────────────
def get_post_service(request: Request) -> PostService:
    """FastAPI dependency returning the PostService the app was built with."""
    return request.app.state.post_service
