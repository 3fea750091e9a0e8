"""Pydantic schemas for the StackIt API."""

from .admin import DashboardResponse
from .answer import (
    AcceptResponse,
    AnswerCreate,
    AnswerCreateResponse,
    AnswerOut,
    AnswerUpdate,
    AnswerUpdateResponse,
)
from .common import ApiModel, AuthorSummary, MessageResponse, Pagination
from .notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationOut,
    NotificationReadResponse,
    UnreadCountResponse,
)
from .question import (
    QuestionCreate,
    QuestionCreateResponse,
    QuestionDetail,
    QuestionDetailResponse,
    QuestionListResponse,
    QuestionSummary,
)
from .user import (
    ProfileUpdate,
    PublicUserResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
    UserListResponse,
    UserProfileResponse,
)
from .vote import AnswerVoteRequest, AnswerVoteResponse, QuestionVoteRequest, QuestionVoteResponse

__all__ = [
    "AcceptResponse",
    "AnswerCreate",
    "AnswerCreateResponse",
    "AnswerOut",
    "AnswerUpdate",
    "AnswerUpdateResponse",
    "AnswerVoteRequest",
    "AnswerVoteResponse",
    "ApiModel",
    "AuthorSummary",
    "DashboardResponse",
    "MarkAllReadResponse",
    "MessageResponse",
    "NotificationListResponse",
    "NotificationOut",
    "NotificationReadResponse",
    "Pagination",
    "ProfileUpdate",
    "PublicUserResponse",
    "QuestionCreate",
    "QuestionCreateResponse",
    "QuestionDetail",
    "QuestionDetailResponse",
    "QuestionListResponse",
    "QuestionSummary",
    "QuestionVoteRequest",
    "QuestionVoteResponse",
    "RoleUpdateRequest",
    "RoleUpdateResponse",
    "UnreadCountResponse",
    "UserListResponse",
    "UserProfileResponse",
]
