"""User-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime
from urllib.parse import urlparse

from pydantic import Field, field_validator

from stackit_api.core.permissions import Role
from stackit_api.services.query import normalize_tags

from .common import ApiModel, Pagination


class UserProfile(ApiModel):
    """The caller's own profile."""

    id: int
    email: str
    first_name: str
    last_name: str
    username: str | None
    role: Role
    reputation: int
    watched_tags: list[str]
    bio: str
    location: str
    website: str
    created_at: datetime


class UserProfileResponse(ApiModel):
    user: UserProfile


class ProfileUpdate(ApiModel):
    """Schema for editing the caller's profile; omitted fields stay unchanged."""

    bio: str | None = Field(default=None, max_length=500)
    location: str | None = Field(default=None, max_length=200)
    website: str | None = Field(default=None, max_length=500)
    watched_tags: list[str] | None = None

    @field_validator("website")
    @classmethod
    def validate_website(cls, v: str | None) -> str | None:
        if v is None or v == "":
            return v
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("Website must be an http(s) URL")
        return v.strip()

    @field_validator("watched_tags")
    @classmethod
    def validate_watched_tags(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else normalize_tags(v)


class UserStats(ApiModel):
    questions: int
    answers: int
    accepted_answers: int


class PublicUser(ApiModel):
    """Profile visible to anyone."""

    id: int
    name: str
    username: str | None
    role: Role
    reputation: int
    bio: str
    location: str
    website: str
    created_at: datetime
    stats: UserStats


class PublicUserResponse(ApiModel):
    user: PublicUser


class UserListItem(ApiModel):
    id: int
    email: str
    name: str
    username: str | None
    role: Role
    reputation: int
    is_active: bool
    created_at: datetime


class UserListResponse(ApiModel):
    users: list[UserListItem]
    pagination: Pagination


class RoleUpdateRequest(ApiModel):
    role: Role


class RoleUpdateResponse(ApiModel):
    message: str
    user: UserListItem
