"""Roles and the permissions each one grants."""

from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Account role stored on every user."""

    GUEST = "guest"
    USER = "user"
    ADMIN = "admin"


class Permission(str, Enum):
    """Actions gated by role."""

    VIEW = "view"
    VOTE = "vote"
    POST = "post"
    COMMENT = "comment"
    MODERATE = "moderate"
    DELETE = "delete"
    MANAGE_USERS = "manage_users"


_GUEST_PERMISSIONS = frozenset({Permission.VIEW})
_USER_PERMISSIONS = _GUEST_PERMISSIONS | {Permission.VOTE, Permission.POST, Permission.COMMENT}
_ADMIN_PERMISSIONS = frozenset(Permission)


def permissions_for(role: Role) -> frozenset[Permission]:
    """Return the permission set granted to ``role``."""
    match role:
        case Role.GUEST:
            return _GUEST_PERMISSIONS
        case Role.USER:
            return _USER_PERMISSIONS
        case Role.ADMIN:
            return _ADMIN_PERMISSIONS
    raise ValueError(f"Unknown role: {role!r}")


def has_permission(role: Role | None, permission: Permission) -> bool:
    """Return True if ``role`` (None meaning an anonymous guest) grants ``permission``."""
    return permission in permissions_for(role or Role.GUEST)
