"""Builders for test posts."""

from datetime import datetime, timezone

from blog.models.post import Post

BASE_TIME = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def make_post(slug: str, title: str, published: datetime, body: str = "") -> Post:
    return Post(
        slug=slug,
        title=title,
        body=body or f"<p>Body of {title}</p>",
        published=published,
    )


async def add_posts(session_factory, posts):
    async with session_factory() as session:
        session.add_all(posts)
        await session.commit()
