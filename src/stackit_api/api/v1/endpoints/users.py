# src/stackit_api/api/v1/endpoints/users.py
"""User profile and user management endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from stackit_api.api.v1.dependencies import CurrentUserDep, SessionDep, require_permission
from stackit_api.core.errors import NotFound, ValidationError
from stackit_api.core.permissions import Permission, Role
from stackit_api.models import Answer, Question, User
from stackit_api.schemas import (
    Pagination,
    ProfileUpdate,
    PublicUserResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
    UserListResponse,
    UserProfileResponse,
)
from stackit_api.schemas.user import PublicUser, UserListItem, UserProfile, UserStats
from stackit_api.services.query import paginate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

ManageUsers = Depends(require_permission(Permission.MANAGE_USERS))


def _list_item(user: User) -> UserListItem:
    return UserListItem(
        id=user.id,
        email=user.email,
        name=user.full_name,
        username=user.username,
        role=user.role,
        reputation=user.reputation,
        is_active=user.is_active,
        created_at=user.created_at,
    )


def _count(db: Session, *clauses: Any) -> int:
    return int(db.scalar(select(func.count()).where(*clauses)) or 0)


@router.get("/profile", response_model=UserProfileResponse)
async def get_profile(current_user: CurrentUserDep) -> UserProfileResponse:
    """Return the caller's own profile."""
    return UserProfileResponse(user=UserProfile.model_validate(current_user))


@router.put("/profile", response_model=UserProfileResponse)
async def update_profile(
    payload: ProfileUpdate,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> UserProfileResponse:
    """Update bio, location, website or watched tags; omitted fields are kept."""
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for field, value in changes.items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return UserProfileResponse(user=UserProfile.model_validate(current_user))


@router.get("", response_model=UserListResponse, dependencies=[ManageUsers])
async def list_users(
    db: SessionDep,
    page: int = Query(1),
    limit: int = Query(20),
    search: str | None = Query(None, description="Matches name, email or username"),
    role: Role | None = Query(None),
) -> UserListResponse:
    """List users for administrators."""
    stmt = select(User).order_by(User.created_at.desc(), User.id.desc())
    term = (search or "").strip().lower()
    if term:
        stmt = stmt.where(
            or_(
                func.lower(User.first_name).contains(term, autoescape=True),
                func.lower(User.last_name).contains(term, autoescape=True),
                func.lower(User.email).contains(term, autoescape=True),
                func.lower(User.username).contains(term, autoescape=True),
            )
        )
    if role is not None:
        stmt = stmt.where(User.role == role)

    result = paginate(db, stmt, page=page, page_size=limit)
    return UserListResponse(
        users=[_list_item(user) for user in result.items],
        pagination=Pagination.from_page(result),
    )


@router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(user_id: int, db: SessionDep) -> PublicUserResponse:
    """Return a user's public profile with activity counts."""
    user = db.get(User, user_id)
    if user is None or not user.is_active:
        raise NotFound("User not found")

    stats = UserStats(
        questions=_count(db, Question.author_id == user.id, Question.is_active.is_(True)),
        answers=_count(db, Answer.author_id == user.id, Answer.is_active.is_(True)),
        accepted_answers=_count(
            db,
            Answer.author_id == user.id,
            Answer.is_active.is_(True),
            Answer.is_accepted.is_(True),
        ),
    )
    return PublicUserResponse(
        user=PublicUser(
            id=user.id,
            name=user.full_name,
            username=user.username,
            role=user.role,
            reputation=user.reputation,
            bio=user.bio,
            location=user.location,
            website=user.website,
            created_at=user.created_at,
            stats=stats,
        )
    )


@router.put("/{user_id}/role", response_model=RoleUpdateResponse, dependencies=[ManageUsers])
async def update_role(
    user_id: int,
    payload: RoleUpdateRequest,
    db: SessionDep,
    current_user: CurrentUserDep,
) -> RoleUpdateResponse:
    """Change a user's role."""
    if user_id == current_user.id:
        raise ValidationError("You cannot change your own role")

    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")

    user.role = payload.role
    db.commit()
    db.refresh(user)
    logger.info("User %s set role of user %s to %s", current_user.id, user.id, user.role.value)
    return RoleUpdateResponse(message="User role updated successfully", user=_list_item(user))
