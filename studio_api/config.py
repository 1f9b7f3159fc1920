"""Configuration management for the Code Studio API."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Code Studio"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    cors_origins: list[str] = Field(default_factory=list)

    # Database (unset -> in-memory storage)
    database_url: str | None = None
    db_echo: bool = False
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: float = 30.0
    auto_create_schema: bool = True

    # Assistant
    google_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    assistant_temperature: float = 0.4
    assistant_max_tokens: int = 8192

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Observability
    otel_exporter_otlp_endpoint: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
