"""Answer-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field, field_validator

from stackit_api.models.answer import ANSWER_MIN_LENGTH
from stackit_api.models.vote import VoteDirection

from .common import ApiModel, AuthorSummary


def _validate_content(v: str) -> str:
    if len(v.strip()) < ANSWER_MIN_LENGTH:
        raise ValueError(f"Answer content must be at least {ANSWER_MIN_LENGTH} characters")
    return v


class AnswerCreate(ApiModel):
    """Schema for posting an answer."""

    question_id: int = Field(..., description="Question being answered")
    content: str = Field(..., description="Answer body")

    _check_content = field_validator("content")(_validate_content)


class AnswerUpdate(ApiModel):
    """Schema for editing an answer."""

    content: str

    _check_content = field_validator("content")(_validate_content)


class AnswerOut(ApiModel):
    """Answer as returned inside question details and after creation."""

    id: int
    content: str
    author: AuthorSummary
    votes: int
    is_accepted: bool
    created_at: datetime
    updated_at: datetime | None = None
    user_vote: VoteDirection | None = None


class AnswerCreateResponse(ApiModel):
    """Response after posting an answer."""

    message: str
    answer: AnswerOut


class AnswerEdit(ApiModel):
    id: int
    content: str
    updated_at: datetime


class AnswerUpdateResponse(ApiModel):
    """Response after editing an answer."""

    message: str
    answer: AnswerEdit


class AcceptResponse(ApiModel):
    """Response for accept/unaccept calls."""

    message: str
    answer_id: int
    accepted: bool
