"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables (or a local .env file).
"""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "CivicPoll"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Database - PostgreSQL
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = ""  # Required - loaded from environment
    POSTGRES_DB: str = "polling"
    POSTGRES_SSL: bool = False

    # Connection pool
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_ECHO: bool = False
    CREATE_TABLES_ON_STARTUP: bool = False

    @field_validator("POSTGRES_PASSWORD")
    @classmethod
    def validate_required_secrets(cls, v: str, info: Any) -> str:
        """Validate that required secrets are set."""
        if not v:
            raise ValueError(f"{info.field_name} must be set in environment")
        return v

    @property
    def DATABASE_URL(self) -> str:
        """Construct the asyncpg connection URL."""
        url = (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )
        return f"{url}?ssl=require" if self.POSTGRES_SSL else url

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        import json

        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    # Vote submission rate limiting (per client IP, fixed window)
    VOTE_RATE_LIMIT_REQUESTS: int = 1
    VOTE_RATE_LIMIT_WINDOW_SECONDS: int = 1

    # Live vote stream
    LIVE_STREAM_INTERVAL_SECONDS: float = 15.0

    # Vote history snapshots (trend data for the live stream)
    ENABLE_VOTE_HISTORY_SNAPSHOTS: bool = True
    VOTE_HISTORY_SNAPSHOT_MINUTES: int = 15


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
