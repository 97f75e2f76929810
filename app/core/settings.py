"""Application settings management."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Global settings loaded from environment variables."""

    app_name: str = "Onboarding Server"
    app_version: str = "0.1.0"
    environment: str = "development"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")

    catalogue_backend: Literal["memory", "http"] = Field(default="memory", alias="CATALOGUE_BACKEND")
    local_catalogue_url: str | None = Field(default=None, alias="LOCAL_CATALOGUE_URL")
    central_catalogue_url: str | None = Field(default=None, alias="CENTRAL_CATALOGUE_URL")
    catalogue_timeout_seconds: float = Field(default=5.0, alias="CATALOGUE_TIMEOUT_SECONDS")

    # Deadline for one inbound request; orchestrator work may outlive it.
    request_timeout_seconds: float = Field(default=10.0, alias="REQUEST_TIMEOUT_SECONDS")

    central_retry_attempts: int = Field(default=3, ge=1, alias="CENTRAL_RETRY_ATTEMPTS")
    central_retry_base_delay_seconds: float = Field(default=0.5, ge=0, alias="CENTRAL_RETRY_BASE_DELAY_SECONDS")
    central_retry_max_delay_seconds: float = Field(default=4.0, ge=0, alias="CENTRAL_RETRY_MAX_DELAY_SECONDS")

    cors_allowed_origins: list[str] = Field(default_factory=lambda: ["*"], alias="CORS_ALLOWED_ORIGINS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="forbid",
        populate_by_name=True,
    )


settings = Settings()
