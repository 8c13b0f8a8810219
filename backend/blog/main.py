"""
Blog Backend: FastAPI Application Factory
===========================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() builds the shared handles (settings,
       engine, session factory, template set, PostService), stores them on
       app.state and wires middleware, exception handlers and routers.
Who:   Called by uvicorn (uvicorn blog.main:app) and by the test suite,
       which passes its own session factory and templates.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Log → Errors → GZip      │
    │                                                     │
    │  Routes:      GET /  /blog  /blog/{slug}  /hireme   │
    │               GET /health                           │
    │                                                     │
    │  Exception Handlers:                                │
    │    PostNotFound → 404 │ InternalError → 500 (HTML)  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, log readiness
    Shutdown: dispose the engine (close all pooled connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog import __version__
from blog.config import Settings, settings as default_settings
from blog.database import build_engine, build_session_factory, dispose_engine
from blog.exceptions import ServerError
from blog.middleware.errors import UnexpectedErrorMiddleware
from blog.middleware.logging import RequestLoggingMiddleware
from blog.middleware.request_id import RequestIDMiddleware
from blog.rendering import build_templates
from blog.routes import health, pages
from blog.services.post_service import PostService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup, before anything else logs.
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Run initialization on startup and cleanup on shutdown.

    Code before yield runs on startup, code after yield on shutdown.
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("Blog backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        # Don't exit: /health still reports and pages answer with 500
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Templates directory: %s", app_settings.templates_dir)
    logger.info(
        "Server ready at http://%s:%d",
        app_settings.backend_host,
        app_settings.backend_port,
    )

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blog backend shutting down...")
    await dispose_engine(app.state.engine)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTML error responses.

    Handler hierarchy:
        ServerError (PostNotFound, InternalError) → its own status and message
        Starlette HTTPException (unknown path...)  → its status, detail as body
        Exception: turned into the InternalError page by
            UnexpectedErrorMiddleware, inside the request-id and access-log
            middleware, so those still apply

    Detail about the failure was already logged where it was detected.
    Responses carry only pre-written messages.
    """

    @app.exception_handler(ServerError)
    async def handle_server_error(request: Request, exc: ServerError):
        return HTMLResponse(content=exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return HTMLResponse(
            content=str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    app_settings: Optional[Settings] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    templates: Optional[Jinja2Templates] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Every shared handle can be supplied by the caller. Whatever is not
    supplied is built from `app_settings` (or the environment). The handles
    are immutable after this call and reach handlers only through
    dependencies that read app.state.
    """
    app_settings = app_settings or default_settings
    engine = engine or build_engine(app_settings)

    app = FastAPI(
        title="Blog",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )

    app.state.settings = app_settings
    app.state.engine = engine
    app.state.session_factory = session_factory or build_session_factory(engine)
    app.state.templates = templates or build_templates(app_settings.templates_dir)
    app.state.post_service = PostService(query_timeout=app_settings.db_query_timeout)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute: RequestID → Logging → UnexpectedError → GZip
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(UnexpectedErrorMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(pages.router)
    app.include_router(health.router)

    return app


# uvicorn expects `blog.main:app` to be importable
app = create_app()
