"""Maps identity-provider principals onto local user records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from stackit_api.core.errors import Conflict, Forbidden, Unauthenticated
from stackit_api.core.permissions import Role
from stackit_api.core.security import Principal
from stackit_api.core.settings import settings
from stackit_api.models import User
from stackit_api.models.user import NAME_MAX_LENGTH

logger = logging.getLogger(__name__)


def _username_available(db: Session, username: str | None) -> bool:
    if not username or len(username) > NAME_MAX_LENGTH:
        return False
    return db.scalar(select(User.id).where(User.username == username)) is None


def _create_user(db: Session, principal: Principal, admin_emails: frozenset[str]) -> User:
    if not principal.email:
        raise Unauthenticated("The identity token does not carry an email address")

    if db.scalar(select(User.id).where(User.email == principal.email)) is not None:
        raise Conflict("This email address is already linked to another account")

    role = Role.ADMIN if principal.email in admin_emails else Role.USER
    user = User(
        idp_id=principal.subject,
        email=principal.email,
        first_name=(principal.first_name or "User")[:NAME_MAX_LENGTH],
        last_name=(principal.last_name or "")[:NAME_MAX_LENGTH],
        username=principal.username if _username_available(db, principal.username) else None,
        role=role,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the same principal first.
        db.rollback()
        existing = db.scalar(select(User).where(User.idp_id == principal.subject))
        if existing is None:
            raise
        return existing

    db.refresh(user)
    logger.info("Created user %s (%s) with role %s", user.id, user.email, user.role.value)
    return user


def resolve_user(
    db: Session,
    principal: Principal,
    admin_emails: Iterable[str] | None = None,
) -> User:
    """Return the local user for ``principal``, creating it on first sight.

    Users whose email is on the admin allow-list are escalated to admin on
    every load.

    Args:
        db: Database session.
        principal: Identity asserted by the identity provider.
        admin_emails: Allow-list override; defaults to the configured list.

    Raises:
        Unauthenticated: If a new principal has no email address.
        Forbidden: If the user account has been deactivated.
        Conflict: If the email already belongs to a different principal.
    """
    allow_list = (
        settings.admin_email_set
        if admin_emails is None
        else frozenset(email.strip().lower() for email in admin_emails)
    )

    user = db.scalar(select(User).where(User.idp_id == principal.subject))
    if user is None:
        user = _create_user(db, principal, allow_list)
    elif user.email.lower() in allow_list and user.role is not Role.ADMIN:
        user.role = Role.ADMIN
        db.commit()
        logger.info("Promoted user %s (%s) to admin", user.id, user.email)

    if not user.is_active:
        raise Forbidden("This account has been deactivated")
    return user
