"""
Customer Details Backend — Custom Exception Hierarchy
=======================================================

What:  Application-specific exceptions for the different failure scenarios.
Why:   Each type maps to exactly one HTTP status in the global handlers
       registered by main.py, so services never deal with HTTP responses.
How:   Every exception carries a user-facing message and an optional
       context dict that is logged but not always returned.
Who:   Raised by services, auth dependencies and middleware.

Exception Hierarchy:
    CustomerApiError (base)
    ├── ValidationError             → 400 Bad Request
    ├── OperationFailedError        → 400 Bad Request ("Error: <message>")
    ├── UnsupportedApiVersionError  → 400 Bad Request
    ├── AuthenticationError         → 401 Unauthorized
    ├── AuthorizationError          → 403 Forbidden
    ├── NotFoundError               → 404 Not Found
    ├── RateLimitExceededError      → 429 Too Many Requests
    └── DatabaseError               → 400 Bad Request ("Error: <generic message>")
"""

from typing import Any, Dict, Iterable, Optional


class CustomerApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info for the server log
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CustomerApiError):
    """
    Raised when client input fails a business rule.

    When:    Coordinates out of range, customer without coordinates,
             blank search text, empty update body, malformed seed file.
    HTTP:    400 Bad Request

    Schema-level problems (wrong JSON types, non-numeric query params)
    are still answered by FastAPI's own 422.
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


class OperationFailedError(CustomerApiError):
    """
    Raised when a service operation fails for an unexpected, non-database reason.

    HTTP:    400 Bad Request, message formatted as "Error: <cause>".
    This is the public contract of the customer endpoints: a failed
    operation is reported to the caller as a bad request with the cause.
    """

    def __init__(
        self,
        cause: str = "The operation could not be completed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=f"Error: {cause}", context=context)


class UnsupportedApiVersionError(CustomerApiError):
    """Raised when a request names an API version the server does not serve."""

    def __init__(
        self,
        requested: str,
        supported: Iterable[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        supported = list(supported)
        message = (
            f"The requested API version '{requested}' is not supported. "
            f"Supported versions: {', '.join(supported)}"
        )
        ctx = context or {}
        ctx.update(requested_version=requested, supported_versions=supported)
        super().__init__(message=message, context=ctx)
        self.requested = requested


class AuthenticationError(CustomerApiError):
    """
    Raised when the caller cannot be authenticated.

    When:    Wrong username/password at login, missing bearer token,
             bad signature, expired token, wrong issuer/audience.
    HTTP:    401 Unauthorized, with `WWW-Authenticate: Bearer`

    The login failure message never reveals whether the username exists.
    """

    def __init__(
        self,
        message: str = "Authentication required",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AuthorizationError(CustomerApiError):
    """
    Raised when an authenticated caller's role is not allowed on a route.

    HTTP:    403 Forbidden
    """

    def __init__(
        self,
        required_roles: Iterable[str] = (),
        role: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        required = list(required_roles)
        message = "You do not have permission to perform this action"
        if required:
            message = f"{message}. Required role: {' or '.join(required)}"
        ctx = context or {}
        ctx.update(required_roles=required, role=role)
        super().__init__(message=message, context=ctx)


class NotFoundError(CustomerApiError):
    """
    Raised when a requested resource does not exist.

    When:    EditUser / GetDistance with an unknown customer id.
    HTTP:    404 Not Found

    SQLAlchemy returns None for missing rows; services convert that None
    into this exception so routes stay free of status-code logic.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class RateLimitExceededError(CustomerApiError):
    """
    Raised when a client exceeds its per-IP request budget.

    HTTP:    429 Too Many Requests, with `Retry-After`
    """

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


class DatabaseError(CustomerApiError):
    """
    Raised when a database operation fails.

    HTTP:    400 Bad Request, message formatted as "Error: <message>"

    The message is always generic. The SQLAlchemy error itself is only
    logged, since it can reveal table names, constraint names or row values.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
