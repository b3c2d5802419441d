"""
Vibe Backend — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions, one per failure class.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers (registered in main.py) turn them into the
       failure envelope `{"success": false, "error": ..., "message": ...}`
       with the matching HTTP status code.
Who:   Raised by services and auth dependencies; caught by global handlers.

Exception Hierarchy:
    VibeError (base)
    ├── ValidationError          → 400 Bad Request
    ├── AuthenticationError      → 401 Unauthorized
    ├── PermissionDeniedError    → 403 Forbidden
    ├── NotFoundError            → 404 Not Found
    ├── ConflictError            → 409 Conflict
    ├── RateLimitExceededError   → 429 Too Many Requests
    └── DatabaseError            → 500 Internal Server Error
"""

from typing import Any, Dict, Optional


class VibeError(Exception):
    """
    Base exception for all Vibe application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(VibeError):
    """
    Raised when client input breaks a business rule.

    Schema-level problems (wrong types, lengths) are rejected earlier by
    FastAPI with a 422; this covers rules that need state or cross-field
    checks, e.g. a search term that is too short.
    """

    status_code = 400
    error_code = "validation_error"

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


class AuthenticationError(VibeError):
    """Missing, malformed, expired or forged bearer token; bad credentials."""

    status_code = 401
    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class PermissionDeniedError(VibeError):
    """
    The caller is authenticated but may not touch this resource.

    When: editing someone else's post or listing, ending a room one does not
    host, opening a private room one is not part of, wrong room password.
    """

    status_code = 403
    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(VibeError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that into
    this exception so routes stay free of None checks.
    """

    status_code = 404
    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource.capitalize()} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(VibeError):
    """The request clashes with current state (duplicate account, full room, ended room)."""

    status_code = 409
    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with the current state of the resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(VibeError):
    """
    Raised when database operations fail unexpectedly.

    Security Note:
        The message returned to the client is always generic. Details are
        logged server-side only.
    """

    status_code = 500
    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(VibeError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    Response includes a Retry-After header.
    """

    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
