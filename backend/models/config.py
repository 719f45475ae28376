import os
import sys
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _should_load_env_file() -> str | None:
    """Determine if .env should be loaded.

    Local development reads `backend/.env` for convenience. Under pytest or CI
    the file is skipped so tests that validate missing secrets fail fast.
    """
    if any("pytest" in str(x) for x in sys.argv if x):
        return None
    if os.environ.get("CI") in ("1", "true", "True"):
        return None
    return ".env"


class Settings(BaseSettings):
    # Environment configuration
    ENVIRONMENT: str = Field(
        default="development",
        description="Environment: 'development', 'test', 'staging' or 'production'",
    )

    DATABASE_URL: str = "sqlite:///./data/openwhistle.db"
    SECRET_KEY: str = Field(
        ...,  # Required, no default
        description="JWT secret key - must be set via SECRET_KEY environment variable",
    )
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=24 * 60,
        description="Lifetime of admin and report tokens",
    )
    BCRYPT_ROUNDS: int = Field(
        default=12,
        description="bcrypt work factor for admin passwords and report secrets",
    )
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3001"],
        description="Allowed CORS origins (comma-separated in env var)",
    )

    # Initial super admin (created on startup when no super admin exists)
    ADMIN_INIT_PASSWORD: str = Field(
        ...,  # Required, no default
        description="Password of the bootstrap super admin 'admin'",
    )

    # Database connection pool settings
    DB_POOL_SIZE: int = Field(
        default=5,
        description="Number of persistent connections in pool",
    )
    DB_MAX_OVERFLOW: int = Field(
        default=10,
        description="Extra connections when pool exhausted",
    )
    DB_POOL_TIMEOUT: int = Field(
        default=30,
        description="Seconds to wait for connection from pool",
    )
    DB_POOL_RECYCLE: int = Field(
        default=1800,
        description="Recycle connections after N seconds (30 min default)",
    )

    AUTO_CREATE_DB: bool = Field(
        default=False,
        description="When true (development only), call Base.metadata.create_all on startup",
    )

    SLOW_REQUEST_THRESHOLD: float = Field(
        default=1.0,
        description="Log warning for requests slower than this (seconds)",
    )

    # Uploads
    UPLOADS_DIR: str = Field(
        default="./data/uploads",
        description="Directory holding attachment files under generated names",
    )
    MAX_UPLOAD_BYTES: int = Field(
        default=10 * 1024 * 1024,
        description="Maximum size of a single attachment",
    )
    MAX_FILES_PER_MESSAGE: int = Field(
        default=5,
        description="Maximum number of attachments per message",
    )

    # Credentials
    SECRET_LENGTH: int = Field(
        default=12,
        description="Length of the access secret handed to whistleblowers",
    )

    # Login throttling (failed attempts only)
    LOGIN_MAX_FAILED_ATTEMPTS: int = Field(
        default=10,
        description="Failed logins per client allowed within the window",
    )
    LOGIN_WINDOW_SECONDS: int = Field(
        default=15 * 60,
        description="Sliding window for failed login attempts",
    )
    SUBMIT_RATE_LIMIT: str = Field(
        default="5/hour",
        description="slowapi limit for report submissions per client",
    )
    API_RATE_LIMIT: str = Field(
        default="100/minute",
        description="slowapi default limit for every other API route per client",
    )
    TRUSTED_PROXIES: List[str] = Field(
        default=[],
        description=(
            "Peer addresses whose X-Forwarded-For/X-Real-IP headers are honoured "
            "(comma-separated in env var)"
        ),
    )

    # Receipt confirmation deadline shown to handlers (never enforced)
    CONFIRMATION_DEADLINE_DAYS: int = Field(
        default=7,
        description="Days after submission by which receipt must be confirmed",
    )

    APP_URL: str = Field(
        default="http://localhost:3001",
        description="Frontend URL used in notification e-mails",
    )

    # Email Provider Settings
    EMAIL_PROVIDER: str = Field(
        default="console",
        description="Email provider: 'smtp' or 'console'",
    )
    SMTP_HOST: str = Field(
        default="localhost",
        description="SMTP server hostname",
    )
    SMTP_PORT: int = Field(
        default=587,
        description="SMTP server port",
    )
    SMTP_USER: str = Field(
        default="",
        description="SMTP username",
    )
    SMTP_PASSWORD: str = Field(
        default="",
        description="SMTP password",
    )
    SMTP_FROM_EMAIL: str = Field(
        default="meldestelle@example.com",
        description="From email address",
    )
    SMTP_FROM_NAME: str = Field(
        default="Interne Meldestelle",
        description="From display name",
    )
    SMTP_USE_TLS: bool = Field(
        default=True,
        description="Use STARTTLS for SMTP connection (port 587)",
    )
    SMTP_USE_SSL: bool = Field(
        default=False,
        description="Use implicit SSL for SMTP connection (port 465)",
    )

    @field_validator("CORS_ORIGINS", "TRUSTED_PROXIES", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: str | List[str]) -> List[str]:
        """Parse CORS origins and proxy addresses from comma-separated strings."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    model_config = SettingsConfigDict(
        env_file=_should_load_env_file(),
        env_file_encoding="utf-8",
        extra="ignore",  # Allow extra env vars (e.g., SENTRY_DSN) without validation errors
    )


# Instantiating Settings() raises pydantic.ValidationError if SECRET_KEY or
# ADMIN_INIT_PASSWORD is missing.
settings = Settings()  # type: ignore[call-arg]


def get_settings() -> Settings:
    """Get the settings instance (for dependency injection)."""
    return settings
