"""Application settings and configuration.

This module defines all configuration options for the StackIt API.
Settings are loaded from environment variables with sensible defaults.
"""

import json
from typing import Annotated, Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

# List settings read from the environment as comma-separated values.
CsvList = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="StackIt API", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./stackit.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Identity provider tokens
    identity_secret_key: str = Field(alias="IDENTITY_SECRET_KEY")
    identity_algorithm: str = Field(default="HS256", alias="IDENTITY_ALGORITHM")
    identity_audience: str | None = Field(default=None, alias="IDENTITY_AUDIENCE")
    identity_issuer: str | None = Field(default=None, alias="IDENTITY_ISSUER")

    # Users whose email appears here are escalated to admin on every load.
    admin_emails: CsvList = Field(default_factory=list, alias="ADMIN_EMAILS")

    # Shared counters for rate limiting; in-process when unset.
    redis_url: str | None = Field(default=None, alias="REDIS_URL")

    # Rate limiting (requests per window, per user)
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    post_rate_limit: int = Field(default=5, alias="POST_RATE_LIMIT")
    post_rate_window_seconds: int = Field(default=60, alias="POST_RATE_WINDOW_SECONDS")
    vote_rate_limit: int = Field(default=30, alias="VOTE_RATE_LIMIT")
    vote_rate_window_seconds: int = Field(default=60, alias="VOTE_RATE_WINDOW_SECONDS")
    general_rate_limit: int = Field(default=100, alias="GENERAL_RATE_LIMIT")
    general_rate_window_seconds: int = Field(default=900, alias="GENERAL_RATE_WINDOW_SECONDS")

    # Pagination
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=50, alias="MAX_PAGE_SIZE")
    notification_page_size: int = Field(default=20, alias="NOTIFICATION_PAGE_SIZE")

    # Notifications
    notification_timeout_seconds: float = Field(
        default=5.0,
        alias="NOTIFICATION_TIMEOUT_SECONDS",
    )
    notify_on_votes: bool = Field(default=True, alias="NOTIFY_ON_VOTES")
    notify_on_mentions: bool = Field(default=True, alias="NOTIFY_ON_MENTIONS")

    # Guarded vote updates retried before giving up with a conflict
    vote_max_retries: int = Field(default=3, alias="VOTE_MAX_RETRIES")

    # CORS configuration for web frontend access
    cors_origins: CsvList = Field(
        default=["http://localhost:3000"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: CsvList = Field(
        default=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: CsvList = Field(
        default=["Content-Type", "Authorization", "X-Requested-With"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator(
        "admin_emails", "cors_origins", "cors_allow_methods", "cors_allow_headers", mode="before"
    )
    @classmethod
    def split_csv(cls, v: Any) -> Any:
        """Accept ``a,b,c`` and JSON arrays as well as a list."""
        if isinstance(v, str) and v.strip().startswith("["):
            return json.loads(v)
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def admin_email_set(self) -> frozenset[str]:
        """Return the admin allow-list normalised to lowercase."""
        return frozenset(email.strip().lower() for email in self.admin_emails if email.strip())


settings = Settings()  # type: ignore[call-arg]
