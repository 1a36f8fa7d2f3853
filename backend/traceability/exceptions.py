"""
Traceability API — Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for the three error kinds the API emits.
Why:   Services raise these instead of building HTTP responses; global
       handlers registered in main.py map each type to a status code and the
       `{"error": <message>}` body.
How:   Each exception carries a client-safe message and an optional context
       dict that is logged server-side but never returned.

Exception Hierarchy:
    TraceabilityError (base)
    ├── ValidationError  → 400 Bad Request (required field missing)
    ├── NotFoundError    → 404 Not Found (product does not exist)
    └── InternalError    → 500 Internal Server Error (database failure)
"""

from typing import Any, Dict, List, Optional


class TraceabilityError(Exception):
    """
    Base exception for all application errors.

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


class ValidationError(TraceabilityError):
    """
    Raised when the client omitted a required field.

    HTTP:    400 Bad Request

    The names of the missing fields are kept in `context["missing"]` for the
    server log; the response only carries the message.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        missing: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if missing:
            ctx["missing"] = list(missing)
        super().__init__(message=message, context=ctx)
        self.missing = list(missing or [])


class NotFoundError(TraceabilityError):
    """
    Raised when the referenced product does not exist.

    HTTP:    404 Not Found
    """

    def __init__(
        self,
        message: str = "The requested resource was not found",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class InternalError(TraceabilityError):
    """
    Raised when a database operation fails.

    HTTP:    500 Internal Server Error

    Security Note:
        The message returned to the client is always generic. The original
        exception type and detail go into `context` and the server log only.
    """

    def __init__(
        self,
        message: str = "Internal Server Error.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
