"""Question-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from stackit_api.models.question import TAG_MAX_LENGTH, TITLE_MAX_LENGTH
from stackit_api.models.vote import VoteDirection
from stackit_api.services.query import normalize_tags

from .answer import AnswerOut
from .common import ApiModel, AuthorSummary, Pagination


class QuestionCreate(ApiModel):
    """Schema for asking a new question."""

    title: str = Field(..., description="Question title")
    description: str = Field(..., description="Question body")
    tags: list[str] | str = Field(..., description="Tags as a list or comma-separated string")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title is required")
        if len(v) > TITLE_MAX_LENGTH:
            raise ValueError(f"Title must be {TITLE_MAX_LENGTH} characters or less")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Description is required")
        return v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | str) -> list[str]:
        tags = normalize_tags(v)
        if not tags:
            raise ValueError("At least one tag is required")
        if any(len(tag) > TAG_MAX_LENGTH for tag in tags):
            raise ValueError(f"Tags must be {TAG_MAX_LENGTH} characters or less")
        return tags


class QuestionSummary(ApiModel):
    """Question as shown in listings."""

    id: int
    title: str
    description: str
    tags: list[str]
    author: AuthorSummary
    votes: int
    answers: int
    views: int
    has_accepted_answer: bool
    created_at: datetime
    last_activity: datetime


class QuestionListResponse(ApiModel):
    """Paginated question listing."""

    questions: list[QuestionSummary]
    pagination: Pagination


class QuestionDetail(ApiModel):
    """Full question with its active answers."""

    id: int
    title: str
    description: str
    tags: list[str]
    author: AuthorSummary
    votes: int
    views: int
    accepted_answer_id: int | None
    created_at: datetime
    last_activity: datetime
    user_vote: VoteDirection | None = None
    answers: list[AnswerOut]


class QuestionDetailResponse(ApiModel):
    """Envelope for a single question."""

    question: QuestionDetail


class QuestionCreateResponse(ApiModel):
    """Response after creating a question."""

    message: str
    question: QuestionSummary
