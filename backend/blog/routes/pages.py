"""
Blog Backend: Page Route Handlers
===================================

What:  The four HTML pages of the site.
How:   Every handler has the same shape: gather → render → respond.
       Data comes from PostService; rendering goes through render_page.

Route Inventory:
    GET /              index.html
    GET /blog          blog.html   (context: posts = most recent N)
    GET /blog/{slug}   post.html   (context: post)
    GET /hireme        hireme.html

Error Mapping:
    ConnectionPoolError → InternalError (500)
    NotFoundError       → PostNotFound (404), post page only
    other DatabaseError → InternalError (500)
    render failure      → InternalError (500), raised by render_page
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncSession

from blog.config import Settings, get_settings
from blog.database import get_db_session
from blog.exceptions import (
    ConnectionPoolError,
    DatabaseError,
    InternalError,
    NotFoundError,
    PostNotFound,
)
from blog.middleware.request_id import request_id_var
from blog.rendering import get_templates, render_page
from blog.services.post_service import PostService, get_post_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"], default_response_class=HTMLResponse)


@router.get("/", summary="Landing page")
async def index(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """Render the landing page. It has no data dependency."""
    return render_page(templates, request, "index")


@router.get("/blog", summary="Most recent posts")
async def blog(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    posts_service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
    settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """
    List the most recent posts, newest first.

    The recent-posts query never raises NotFoundError (an empty store gives an
    empty list), so every data access failure here is an internal error.
    """
    rid = request_id_var.get("")
    try:
        posts = await posts_service.select_last_n_posts(db, settings.blog_post_count)
    except ConnectionPoolError as e:
        logger.error("[%s] Error with connection pool: %s", rid, e)
        raise InternalError() from e
    except DatabaseError as e:
        logger.error("[%s] Database error: %s", rid, e)
        raise InternalError() from e

    return render_page(templates, request, "blog", {"posts": posts})


@router.get("/blog/{slug}", summary="A single post")
async def post(
    slug: str,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    posts_service: PostService = Depends(get_post_service),
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """
    Show the post whose slug matches exactly.

    A missing slug is the only expected failure and becomes PostNotFound;
    every other data access failure is an internal error.
    """
    rid = request_id_var.get("")
    try:
        found = await posts_service.select_post_with_slug(db, slug)
    except ConnectionPoolError as e:
        logger.error("[%s] Error with connection pool: %s", rid, e)
        raise InternalError() from e
    except NotFoundError as e:
        # Expected for mistyped or stale links; not a server fault
        logger.warning("[%s] Post not found: %s", rid, e)
        raise PostNotFound() from e
    except DatabaseError as e:
        logger.error("[%s] Database error: %s", rid, e)
        raise InternalError() from e

    return render_page(templates, request, "post", {"post": found})


@router.get("/hireme", summary="Hire me page")
async def hire_me(
    request: Request,
    templates: Jinja2Templates = Depends(get_templates),
) -> HTMLResponse:
    """Render the hire-me page. It has no data dependency."""
    return render_page(templates, request, "hireme")
