"""
Blog Backend: Page Route Tests
================================

What:  End-to-end tests of the HTML routes through the ASGI app.
How:   The app is built by create_app() against the in-memory store. Pool
       failures are simulated by overriding the session dependency with a
       mocked session; render failures by pointing the app at a template
       directory that is missing files or variables.
"""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import OperationalError, ProgrammingError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from blog.database import get_db_session
from blog.exceptions import InternalError, PostNotFound
from blog.main import create_app
from blog.rendering import build_templates
from blog.services.post_service import get_post_service

HTML_CONTENT_TYPE = "text/html; charset=utf-8"


def client_for(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


def override_session(app, session):
    async def _session():
        yield session

    app.dependency_overrides[get_db_session] = _session


class TestStaticPages:
    """Pages with no data dependency."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/", "/hireme"])
    async def test_renders(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 200
        assert response.headers["content-type"] == HTML_CONTENT_TYPE
        assert "<html" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/", "/hireme"])
    async def test_ignores_database_state(self, app, mock_db_session, path):
        """A broken pool must not affect pages that never query."""
        mock_db_session.connection.side_effect = PoolTimeoutError("pool exhausted")
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get(path)

        assert response.status_code == 200


class TestBlogPage:

    @pytest.mark.asyncio
    async def test_lists_posts_newest_first(self, test_client, seeded_posts):
        response = await test_client.get("/blog")

        assert response.status_code == 200
        text = response.text
        assert text.index("Third Post") < text.index("Second Post") < text.index("First Post")
        assert 'href="/blog/third-post"' in text

    @pytest.mark.asyncio
    async def test_empty_store(self, test_client):
        response = await test_client.get("/blog")

        assert response.status_code == 200
        assert "Nothing published yet." in response.text

    @pytest.mark.asyncio
    async def test_pool_failure_is_internal_error(self, app, mock_db_session):
        mock_db_session.connection.side_effect = PoolTimeoutError(
            "QueuePool limit of size 10 overflow 5 reached, secret-host:5432"
        )
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get("/blog")

        assert response.status_code == 500
        assert response.text == InternalError.message
        assert "secret-host" not in response.text
        assert response.headers["content-type"] == HTML_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_query_failure_is_internal_error(self, app, mock_db_session):
        mock_db_session.execute.side_effect = ProgrammingError(
            "SELECT * FROM posts", {}, Exception('relation "posts" does not exist')
        )
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get("/blog")

        assert response.status_code == 500
        assert response.text == InternalError.message

    @pytest.mark.asyncio
    async def test_respects_configured_post_count(
        self, test_settings, db_engine, session_factory, seeded_posts
    ):
        settings = test_settings.model_copy(update={"blog_post_count": 2})
        app = create_app(settings, engine=db_engine, session_factory=session_factory)

        async with client_for(app) as client:
            response = await client.get("/blog")

        assert response.status_code == 200
        assert "Third Post" in response.text
        assert "Second Post" in response.text
        assert "First Post" not in response.text


class TestPostPage:

    @pytest.mark.asyncio
    async def test_renders_post(self, test_client, seeded_posts):
        response = await test_client.get("/blog/second-post")

        assert response.status_code == 200
        assert "<h1>Second Post</h1>" in response.text
        # Bodies are trusted markup and are not escaped
        assert "<p>Body of Second Post</p>" in response.text

    @pytest.mark.asyncio
    async def test_unknown_slug_is_404(self, test_client, seeded_posts):
        response = await test_client.get("/blog/no-such-post")

        assert response.status_code == 404
        assert response.text == PostNotFound.message
        assert response.headers["content-type"] == HTML_CONTENT_TYPE

    @pytest.mark.asyncio
    async def test_pool_failure_is_internal_error(self, app, mock_db_session):
        mock_db_session.connection.side_effect = OperationalError(
            "connect", {}, Exception("password authentication failed for user blog")
        )
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get("/blog/first-post")

        assert response.status_code == 500
        assert response.text == InternalError.message
        assert "password" not in response.text

    @pytest.mark.asyncio
    async def test_query_failure_is_internal_error(self, app, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError(
            "SELECT * FROM posts", {}, Exception("server closed the connection")
        )
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get("/blog/first-post")

        assert response.status_code == 500
        assert response.text == InternalError.message


class TestRenderFailures:
    """A template that cannot be rendered yields 500, never a crash."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/", "/blog", "/blog/first-post", "/hireme"])
    async def test_missing_template(
        self, tmp_path, test_settings, db_engine, session_factory, seeded_posts, path
    ):
        app = create_app(
            test_settings,
            engine=db_engine,
            session_factory=session_factory,
            templates=build_templates(str(tmp_path)),
        )

        async with client_for(app) as client:
            response = await client.get(path)
            # The app keeps serving after the failure
            second = await client.get(path)

        assert response.status_code == 500
        assert response.text == InternalError.message
        assert second.status_code == 500

    @pytest.mark.asyncio
    async def test_undefined_variable(
        self, tmp_path, test_settings, db_engine, session_factory
    ):
        (tmp_path / "index.html").write_text("<p>{{ visitor.name }}</p>")
        app = create_app(
            test_settings,
            engine=db_engine,
            session_factory=session_factory,
            templates=build_templates(str(tmp_path)),
        )

        async with client_for(app) as client:
            response = await client.get("/")

        assert response.status_code == 500
        assert "visitor" not in response.text


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, test_client):
        response = await test_client.get("/")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_echoed_on_error_pages(self, test_client):
        response = await test_client.get(
            "/blog/no-such-post", headers={"X-Request-ID": "abc12345"}
        )

        assert response.status_code == 404
        assert response.headers["X-Request-ID"] == "abc12345"


class TestUnknownPaths:

    @pytest.mark.asyncio
    async def test_unknown_path_is_html_404(self, test_client):
        response = await test_client.get("/does/not/exist")

        assert response.status_code == 404
        assert response.headers["content-type"] == HTML_CONTENT_TYPE
        assert response.text == "Not Found"


class TestUnexpectedErrors:
    """Exceptions no route handler maps still go through the middleware chain."""

    @pytest.mark.asyncio
    async def test_unreadable_row_is_internal_error(self, app, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = object()
        mock_db_session.execute.return_value = mock_result
        override_session(app, mock_db_session)

        async with client_for(app) as client:
            response = await client.get("/blog/x", headers={"X-Request-ID": "abc12345"})

        assert response.status_code == 500
        assert response.text == InternalError.message
        assert response.headers["X-Request-ID"] == "abc12345"

    @pytest.mark.asyncio
    async def test_unhandled_exception_keeps_request_id_and_access_log(
        self, app, mock_db_session, caplog
    ):
        broken_service = MagicMock()
        broken_service.select_post_with_slug = AsyncMock(
            side_effect=RuntimeError("secret-host:5432 exploded")
        )
        override_session(app, mock_db_session)
        app.dependency_overrides[get_post_service] = lambda: broken_service
        caplog.set_level(logging.INFO, logger="blog.access")

        async with client_for(app) as client:
            response = await client.get("/blog/x", headers={"X-Request-ID": "abc12345"})

        assert response.status_code == 500
        assert response.text == InternalError.message
        assert response.headers["X-Request-ID"] == "abc12345"
        assert response.headers["content-type"] == HTML_CONTENT_TYPE
        access_lines = [r for r in caplog.records if r.name == "blog.access"]
        assert [(r.status, r.request_id) for r in access_lines] == [(500, "abc12345")]

    @pytest.mark.asyncio
    async def test_app_keeps_serving_after_unhandled_exception(self, app, mock_db_session):
        broken_service = MagicMock()
        broken_service.select_post_with_slug = AsyncMock(side_effect=RuntimeError("boom"))
        override_session(app, mock_db_session)
        app.dependency_overrides[get_post_service] = lambda: broken_service

        async with client_for(app) as client:
            first = await client.get("/blog/x")
            second = await client.get("/")

        assert first.status_code == 500
        assert second.status_code == 200


class TestPageDocumentation:

    @pytest.mark.parametrize(
        "path, expected",
        [
            ("/", "landing page"),
            ("/blog", "most recent posts"),
            ("/blog/{slug}", "slug matches exactly"),
            ("/hireme", "hire-me page"),
        ],
    )
    def test_handler_docstring_is_published(self, test_settings, path, expected):
        description = create_app(test_settings).openapi()["paths"][path]["get"]["description"]

        assert expected in description
