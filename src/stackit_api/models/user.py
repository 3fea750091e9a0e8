# src/stackit_api/models/user.py
"""SQLAlchemy model for locally mirrored identity-provider users."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from stackit_api.core.permissions import Role
from stackit_api.db.session import Base
from stackit_api.db.time import utcnow

NAME_MAX_LENGTH = 100


class User(Base):
    """Local user record created the first time a principal is seen.

    Users are never hard-deleted; ``is_active`` is cleared instead.
    """

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    idp_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(320), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, default="User")
    last_name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False, default="")
    username: Mapped[str | None] = mapped_column(String(NAME_MAX_LENGTH), unique=True, nullable=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, name="user_role", values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.USER,
    )
    reputation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    watched_tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    website: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    @property
    def full_name(self) -> str:
        """Return the display name built from first and last name."""
        return f"{self.first_name} {self.last_name}".strip()
