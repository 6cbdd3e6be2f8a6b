"""
Core configuration using Pydantic Settings.
Loads from environment variables.
"""

from typing import Literal
from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = Field(default="futuristic-hr", alias="APP_NAME")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )

    # API
    api_v1_prefix: str = "/api/v1"
    allowed_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8000"],
        alias="ALLOWED_ORIGINS",
    )

    # Database (any SQLAlchemy async URL, e.g. postgresql+asyncpg://...)
    database_url: str = Field(..., alias="DATABASE_URL")
    database_pool_size: int = Field(default=20, alias="DATABASE_POOL_SIZE")
    database_max_overflow: int = Field(default=10, alias="DATABASE_MAX_OVERFLOW")
    database_echo: bool = Field(default=False, alias="DATABASE_ECHO")

    # Celery
    celery_broker_url: RedisDsn = Field(..., alias="CELERY_BROKER_URL")
    celery_result_backend: RedisDsn = Field(..., alias="CELERY_RESULT_BACKEND")

    # Status change side effects: "inline" runs consumers in-process after
    # commit, "celery" hands the event to a worker.
    event_dispatch_mode: Literal["inline", "celery"] = Field(
        default="inline", alias="EVENT_DISPATCH_MODE"
    )
    event_max_attempts: int = Field(default=5, alias="EVENT_MAX_ATTEMPTS")
    # Seconds before an unfinished event is handed out again: pending events
    # nobody picked up, failed events past their retry window, stale claims
    event_redispatch_after: int = Field(default=900, alias="EVENT_REDISPATCH_AFTER")

    # Google Gemini
    google_api_key: str | None = Field(default=None, alias="GOOGLE_API_KEY")
    ai_model: str = Field(default="gemini-2.0-flash", alias="AI_MODEL")
    ai_max_attempts: int = Field(default=3, alias="AI_MAX_ATTEMPTS")
    ai_retry_base_delay: float = Field(default=2.0, alias="AI_RETRY_BASE_DELAY")

    # ATS providers
    ats_request_timeout: float = Field(default=30.0, alias="ATS_REQUEST_TIMEOUT")
    # 32-byte AES key (raw or URL-safe base64) for provider credentials at rest
    credentials_encryption_key: str = Field(..., alias="CREDENTIALS_ENCRYPTION_KEY")

    # Auth (tokens are issued by the external identity provider)
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")

    # Logging
    log_request_body: bool = Field(default=False, alias="LOG_REQUEST_BODY")
    log_max_body_size: int = Field(default=1024, alias="LOG_MAX_BODY_SIZE")
    json_logs: bool = Field(default=True, alias="JSON_LOGS")

    # Email
    smtp_host: str | None = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: str | None = Field(default=None, alias="SMTP_USER")
    smtp_password: str | None = Field(default=None, alias="SMTP_PASSWORD")
    from_email: str = Field(default="noreply@example.com", alias="FROM_EMAIL")
    from_name: str = Field(default="Futuristic HR", alias="FROM_NAME")


# Global settings instance
settings = Settings()
