# src/stackit_api/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .answers import router as answers_router
from .notifications import router as notifications_router
from .questions import router as questions_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "answers_router",
    "notifications_router",
    "questions_router",
    "users_router",
]
