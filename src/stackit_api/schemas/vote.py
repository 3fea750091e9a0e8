"""Vote-related Pydantic schemas."""

from __future__ import annotations

from stackit_api.models.vote import VoteDirection

from .common import ApiModel


class QuestionVoteRequest(ApiModel):
    """Schema for voting on a question."""

    vote_type: str


class QuestionVoteResponse(ApiModel):
    message: str
    vote_score: int
    user_vote: VoteDirection | None
    previous_vote: VoteDirection | None


class AnswerVoteRequest(ApiModel):
    """Schema for voting on an answer."""

    type: str


class AnswerVoteResponse(ApiModel):
    message: str
    votes: int
    user_vote: VoteDirection | None
