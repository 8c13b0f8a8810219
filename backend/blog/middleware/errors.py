"""
Blog Backend: Unexpected Error Middleware
===========================================

What:  Turns any exception that escaped the route layer into the
       InternalError page.
Why:   Starlette runs `Exception` handlers outside all user middleware, so
       such a response would lose the X-Request-ID header and the access log
       line. This middleware sits inside both of them.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import HTMLResponse, Response

from blog.exceptions import InternalError
from blog.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class UnexpectedErrorMiddleware(BaseHTTPMiddleware):
    """Last line of defence: stack trace to the log, fixed message to the client."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                str(e),
                exc_info=True,
            )
            return HTMLResponse(
                content=InternalError.message,
                status_code=InternalError.status_code,
            )
