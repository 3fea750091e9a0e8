"""Shared API dependencies for authentication and common functionality."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from stackit_api.core.errors import Forbidden, RateLimited, Unauthenticated
from stackit_api.core.permissions import Permission, has_permission
from stackit_api.core.security import decode_identity_token
from stackit_api.core.settings import settings
from stackit_api.db.session import get_db
from stackit_api.models import User
from stackit_api.services.identity import resolve_user
from stackit_api.services.notifications import NotificationDispatcher
from stackit_api.services.rate_limit import RateLimiter, get_rate_limiter

# HTTP Bearer scheme; a missing header is reported by our own dependencies.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]
CredentialsDep = Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)]


def get_optional_user(credentials: CredentialsDep, db: SessionDep) -> User | None:
    """Return the caller's user record, or None for an anonymous guest.

    A token that is present but invalid is still rejected.

    Raises:
        Unauthenticated: If the bearer token cannot be validated.
    """
    if credentials is None:
        return None
    principal = decode_identity_token(credentials.credentials)
    return resolve_user(db, principal)


def get_current_user(user: Annotated[User | None, Depends(get_optional_user)]) -> User:
    """Get the current authenticated user from the identity token.

    Raises:
        Unauthenticated: If no token was presented or it is invalid.
    """
    if user is None:
        raise Unauthenticated("Access token is required")
    return user


# Type aliases for user dependencies
CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[User | None, Depends(get_optional_user)]


def require_permission(permission: Permission) -> Callable[..., User | None]:
    """Build a dependency that admits callers whose role grants ``permission``."""

    def dependency(user: OptionalUserDep) -> User | None:
        if user is None:
            if permission is Permission.VIEW:
                return None
            raise Unauthenticated("Please log in to access this resource")
        if not has_permission(user.role, permission):
            raise Forbidden("You do not have permission to perform this action")
        return user

    return dependency


def get_notification_dispatcher() -> NotificationDispatcher:
    """Return the dispatcher used to queue notifications."""
    return NotificationDispatcher()


DispatcherDep = Annotated[NotificationDispatcher, Depends(get_notification_dispatcher)]
RateLimiterDep = Annotated[RateLimiter, Depends(get_rate_limiter)]


def _limits(bucket: str) -> tuple[int, int]:
    match bucket:
        case "post":
            return settings.post_rate_limit, settings.post_rate_window_seconds
        case "vote":
            return settings.vote_rate_limit, settings.vote_rate_window_seconds
        case _:
            return settings.general_rate_limit, settings.general_rate_window_seconds


def rate_limit(bucket: str) -> Callable[..., None]:
    """Build a dependency counting the authenticated caller's hits in ``bucket``."""

    def dependency(user: CurrentUserDep, limiter: RateLimiterDep) -> None:
        if not settings.rate_limit_enabled:
            return
        limit, window = _limits(bucket)
        if not limiter.hit(bucket, f"user:{user.id}", limit=limit, window_seconds=window):
            raise RateLimited(f"Too many {bucket} requests, please try again later")

    return dependency


def general_rate_limit(request: Request, limiter: RateLimiterDep) -> None:
    """Count every API request against the caller's address."""
    if not settings.rate_limit_enabled:
        return
    caller = request.client.host if request.client else "unknown"
    limit, window = _limits("general")
    if not limiter.hit("general", f"ip:{caller}", limit=limit, window_seconds=window):
        raise RateLimited()
