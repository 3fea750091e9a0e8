# src/stackit_api/services/__init__.py
"""Business logic services for the StackIt application."""

from .notifications import NotificationDispatcher
from .query import Page, QuestionFilters, QuestionSort
from .rate_limit import RateLimiter
from .votes import VoteLedger, VoteOutcome

__all__ = [
    "NotificationDispatcher",
    "Page",
    "QuestionFilters",
    "QuestionSort",
    "RateLimiter",
    "VoteLedger",
    "VoteOutcome",
]
