"""
Music DB API - Custom Exception Hierarchy
===========================================

What:  Defines application-specific exceptions for different error scenarios.
Why:   Custom exceptions let services signal "not found" or "bad input" without
       knowing about HTTP. Global handlers (registered in main.py) turn them
       into JSON error responses with the right status code.
How:   Each exception class carries a message and optional context dict.
       The message is returned in the `error` field; context is only logged.
Who:   Raised by services and middleware; caught by global handlers.
When:  During request processing.

Exception Hierarchy:
    MusicDBError (base)               → 500 Internal Server Error
    ├── ValidationError               → 400 Bad Request (malformed id, bad filter value)
    ├── QueryError                    → 400 Bad Request (lookup query failed)
    ├── NotFoundError                 → 404 Not Found
    ├── DatabaseError                 → 500 Internal Server Error
    └── ServiceUnavailableError       → 503 Service Unavailable (database not connected)
"""

from typing import Any, Dict, Optional


class MusicDBError(Exception):
    """
    Base exception for all Music DB application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(MusicDBError):
    """
    Raised when client input cannot be coerced into what the query needs.

    When:    Malformed track id, non-numeric value for a numeric filter.
    HTTP:    400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class QueryError(MusicDBError):
    """
    Raised when a single-track lookup fails while executing.

    HTTP:    400 Bad Request, matching the published contract of the
             id and title lookups.
    """

    def __init__(
        self,
        message: str = "Invalid query",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(MusicDBError):
    """
    Raised when a requested track does not exist.

    The message is free text chosen by the caller ("Id does not exist",
    "Title not found") because clients already depend on those strings.
    """

    def __init__(
        self,
        message: str = "Not found",
        resource: str = "track",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(MusicDBError):
    """
    Raised when a list query fails unexpectedly.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The driver's
        error text is logged server-side only.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ServiceUnavailableError(MusicDBError):
    """
    Raised (or rendered directly by the availability gate) while the
    database link is down.

    HTTP:    503 Service Unavailable
    """

    def __init__(
        self,
        message: str = "Service unavailable",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
