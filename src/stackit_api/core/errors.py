"""Domain error taxonomy shared by services and the HTTP layer.

Services raise these exceptions; the handlers registered in
``stackit_api.main`` turn them into ``{"error": kind, "message": text}``
responses with the matching status code.
"""

from __future__ import annotations

from fastapi import status


class StackItError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal"
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(StackItError):
    """Malformed or out-of-range input."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation_error"
    default_message = "Please check your input data"


class Unauthenticated(StackItError):
    """No principal, or the presented token could not be validated."""

    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "unauthenticated"
    default_message = "Please log in to access this resource"


class Forbidden(StackItError):
    """The caller is authenticated but may not perform the action."""

    status_code = status.HTTP_403_FORBIDDEN
    kind = "forbidden"
    default_message = "You do not have permission to perform this action"


class NotFound(StackItError):
    """Missing or soft-deleted entity."""

    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"
    default_message = "The requested resource does not exist"


class Conflict(StackItError):
    """A concurrent write changed the entity underneath this request."""

    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"
    default_message = "The resource was modified concurrently, please retry"


class RateLimited(StackItError):
    """Too many requests in the current window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    kind = "rate_limited"
    default_message = "Too many requests, please try again later"
