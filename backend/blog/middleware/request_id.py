"""
Blog Backend: Request ID Middleware
=====================================

What:  Gives every request a short correlation ID and returns it in
       the X-Request-ID response header.
Why:   Lets the log lines of one page view be grouped. A visitor who reports
       an error page can quote the header value.
"""

import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Assigns a unique ID to each request.

    Behavior:
        1. Reuse X-Request-ID if the client (or a proxy) sent one
        2. Otherwise generate the first 8 characters of a UUID4
        3. Store it in request_id_var and request.state
        4. Echo it in the response headers
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())[:8]

        request_id_var.set(rid)
        request.state.request_id = rid

        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = rid
        return response
