"""Schemas for the moderation dashboard."""

from __future__ import annotations

from datetime import datetime

from .common import ApiModel


class DashboardTotals(ApiModel):
    users: int
    questions: int
    answers: int
    votes: int


class DashboardToday(ApiModel):
    users: int
    questions: int
    answers: int


class RecentQuestion(ApiModel):
    id: int
    title: str
    author_name: str
    created_at: datetime


class RecentUser(ApiModel):
    id: int
    name: str
    email: str
    role: str
    created_at: datetime


class DashboardResponse(ApiModel):
    totals: DashboardTotals
    today: DashboardToday
    recent_questions: list[RecentQuestion]
    recent_users: list[RecentUser]
