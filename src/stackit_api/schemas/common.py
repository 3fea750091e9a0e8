"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case accepted on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    """Plain acknowledgement."""

    message: str


class Pagination(ApiModel):
    """Paging metadata returned alongside list results."""

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: Any) -> Pagination:
        """Build pagination metadata from a ``services.query.Page``."""
        return cls(
            page=page.page,
            limit=page.page_size,
            total=page.total,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )


class AuthorSummary(ApiModel):
    """Public view of a content author."""

    id: int
    name: str
    username: str | None = None
    reputation: int = 0

    @classmethod
    def from_user(cls, user: Any) -> AuthorSummary:
        return cls(
            id=user.id,
            name=user.full_name,
            username=user.username,
            reputation=user.reputation,
        )
