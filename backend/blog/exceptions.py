"""
Blog Backend: Exception Hierarchy
===================================

What:  Two small exception families.
       1. Data access errors, raised by PostService when the store fails.
       2. Server errors, the closed set of failures a visitor can see.
How:   Page handlers catch data access errors, log them, and raise the
       matching server error. One exception handler (registered in main.py)
       turns any ServerError into an HTML response with its status code and
       fixed message.

Exception Hierarchy:
    DatabaseError (base)
    ├── ConnectionPoolError  could not get a connection from the pool
    ├── NotFoundError        query ran, no matching row (single-row lookups)
    └── QueryError           any other execution failure

    ServerError (base)
    ├── InternalError        → 500 Internal Server Error
    └── PostNotFound         → 404 Not Found
"""

from typing import Any, Dict, Optional


# ══════════════════════════════════════════════════════════════════════════
# Data Access Errors
# ══════════════════════════════════════════════════════════════════════════

class DatabaseError(Exception):
    """
    Base exception for failures in the data access layer.

    Attributes:
        message:  Short description of what failed (logged, never shown)
        context:  Diagnostic detail such as the slug or driver error type
    """

    def __init__(
        self,
        message: str = "A database error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} | Context: {self.context}"
        return self.message


class ConnectionPoolError(DatabaseError):
    """
    Raised when no connection could be obtained from the pool.

    When:  Pool exhausted past pool_timeout, backend unreachable,
           authentication refused.
    """

    def __init__(
        self,
        message: str = "Could not acquire a database connection",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(DatabaseError):
    """
    Raised when a single-row lookup executed successfully but matched nothing.

    SQLAlchemy returns None for a missing row; PostService converts that into
    this exception so callers can tell "absent" apart from "broken".
    """

    def __init__(
        self,
        resource: str = "row",
        key: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"No {resource} found"
        if key is not None:
            message = f"No {resource} found for '{key}'"
        ctx = context or {}
        ctx["resource"] = resource
        if key is not None:
            ctx["key"] = key
        super().__init__(message=message, context=ctx)


class QueryError(DatabaseError):
    """
    Raised for any other failure while executing a query.

    When:  Malformed SQL, missing table, constraint violation, connection
           dropped mid-query, query exceeding db_query_timeout.
    """

    def __init__(
        self,
        message: str = "Query execution failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


# ══════════════════════════════════════════════════════════════════════════
# Server Errors (user-facing)
# ══════════════════════════════════════════════════════════════════════════

class ServerError(Exception):
    """
    Base class for errors that are turned into an HTTP response.

    Each subclass fixes a status code and a pre-written message. Neither
    depends on the underlying failure, so nothing internal can leak into
    the response body.
    """

    status_code: int = 500
    message: str = "An internal error occurred. Please try again later."

    def __init__(self) -> None:
        super().__init__(self.message)


class InternalError(ServerError):
    """Anything that went wrong on our side: templates, database, pool."""

    status_code = 500
    message = "An internal error occurred. Please try again later."


class PostNotFound(ServerError):
    """The requested slug does not match any post."""

    status_code = 404
    message = "The post you are looking for does not exist."
