"""
Dayflow configuration.
Loads variables from the .env file.
"""

from typing import Any

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database URL (Railway/Render format)
    # If set, overrides PostgreSQL individual vars
    DATABASE_URL: str | None = None

    # PostgreSQL (individual vars, fallback if DATABASE_URL not set)
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "dayflow"
    POSTGRES_USER: str = "dayflow"
    POSTGRES_PASSWORD: SecretStr | None = None

    # Environment (development | production)
    ENVIRONMENT: str = "development"

    # Document store writes
    STORE_RETRY_ATTEMPTS: int = 3
    STORE_RETRY_WAIT_MIN: float = 0.5
    STORE_RETRY_WAIT_MAX: float = 4.0

    # Extra CORS origins for the UI (empty = localhost only)
    CORS_ORIGINS: list[str] = []

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | list[Any]) -> list[str]:
        if isinstance(v, str):
            if not v.strip():
                return []
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                import json

                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [x.strip() for x in v.split(",") if x.strip()]
        return v

    @field_validator("STORE_RETRY_ATTEMPTS")
    @classmethod
    def check_retry_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("STORE_RETRY_ATTEMPTS must be at least 1")
        return v

    @property
    def database_url(self) -> str:
        """
        Get database URL based on environment.

        Priority:
        1. DATABASE_URL env var (Railway/Render format)
        2. PostgreSQL individual vars (production)
        3. SQLite (development)
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL

        if self.ENVIRONMENT == "production":
            if not self.POSTGRES_PASSWORD:
                raise ValueError("POSTGRES_PASSWORD required for production")
            return (
                f"postgres://{self.POSTGRES_USER}:"
                f"{self.POSTGRES_PASSWORD.get_secret_value()}"
                f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

        return "sqlite://db.sqlite3"


config = Settings()
