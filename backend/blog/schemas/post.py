"""
Blog Backend: Pydantic Schemas
================================

What:  Pydantic models handed to templates and returned by JSON endpoints.
Why:   Decouples what templates see from SQLAlchemy rows. A PostView is a
       plain value object, so it can outlive the session it was read in.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class PostView(BaseModel):
    """
    What:  A post as the templates see it.
    Who:   Built by PostService from `Post` rows; rendered by blog.html and post.html.
    """
    slug: str = Field(description="URL-safe unique identifier")
    title: str = Field(description="Post title")
    body: str = Field(description="Post content, may contain markup")
    published: datetime = Field(description="Publication timestamp (UTC)")

    model_config = {"from_attributes": True, "frozen": True}


class HealthResponse(BaseModel):
    """
    What:  Health check response for monitoring and load balancers.
    Who:   Returned by GET /health.

    Status meanings:
        - healthy:   The database answers queries
        - unhealthy: The database is unreachable (HTTP 503)
    """
    status: str = Field(description="Overall health: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database status: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since the service started")
