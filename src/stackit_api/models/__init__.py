# src/stackit_api/models/__init__.py
"""SQLAlchemy models for the StackIt application."""

from .answer import Answer
from .notification import Notification, NotificationType
from .question import Question, QuestionTag, QuestionView
from .user import User
from .vote import AnswerVote, QuestionVote, VoteDirection

__all__ = [
    "Answer",
    "Notification", "NotificationType",
    "Question", "QuestionTag", "QuestionView",
    "User",
    "AnswerVote", "QuestionVote", "VoteDirection",
]
