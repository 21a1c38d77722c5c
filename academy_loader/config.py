# academy_loader/config.py
"""
Configuration management for the academy loader.
Uses Pydantic for settings validation and environment variable management.
"""

import logging
import logging.handlers
import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

ASYNC_DRIVER = "postgresql+asyncpg"


def to_async_url(url: str) -> str:
    """Convert a sync postgres URL to the asyncpg dialect."""
    for prefix in ("postgresql://", "postgres://", "postgresql+psycopg2://"):
        if url.startswith(prefix):
            return url.replace(prefix, f"{ASYNC_DRIVER}://", 1)
    return url


class Settings(BaseSettings):
    """Loader settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    ENVIRONMENT: str = "development"

    # Database settings; DATABASE_URL wins over the discrete parts
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: int = Field(default=5433, ge=1, le=65535)
    DB_NAME: str = "academy"
    DB_USER: str = "postgres"
    DB_PASSWORD: str = ""
    DATABASE_ECHO: bool = False

    # Generation settings
    RANDOM_SEED: Optional[int] = None

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = None
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("DATABASE_URL", mode="before")
    def normalize_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Treat blank values as unset and switch sync URLs to asyncpg."""
        if v is None or not str(v).strip():
            return None
        return to_async_url(str(v).strip())

    @field_validator("LOG_LEVEL")
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def database_url(self) -> str:
        """Async connection URL, built from the DB_* parts when not given."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return URL.create(
            ASYNC_DRIVER,
            username=self.DB_USER,
            password=self.DB_PASSWORD or None,
            host=self.DB_HOST,
            port=self.DB_PORT,
            database=self.DB_NAME,
        ).render_as_string(hide_password=False)

    @property
    def safe_database_url(self) -> str:
        """Connection URL with the password masked, for log lines."""
        return make_url(self.database_url).render_as_string(hide_password=True)

    @property
    def is_production(self) -> bool:
        return (self.ENVIRONMENT or "").lower() == "production"


class DevelopmentSettings(Settings):
    """Development environment specific settings."""

    LOG_LEVEL: str = "DEBUG"


class TestingSettings(Settings):
    """Testing environment specific settings."""

    LOG_LEVEL: str = "DEBUG"
    DB_NAME: str = "academy_test"
    RANDOM_SEED: Optional[int] = 42


@lru_cache()
def get_settings() -> Settings:
    """
    Load and return the appropriate settings based on the ENVIRONMENT variable.
    Caches the result to prevent reading the .env file on every call.
    """
    environment = os.getenv("ENVIRONMENT", "development").lower()

    if environment == "production":
        return Settings()
    if environment in ("test", "testing"):
        return TestingSettings()
    return DevelopmentSettings()


def validate_settings(settings: Settings) -> List[str]:
    """Validate settings and return list of issues."""
    issues: List[str] = []

    if not settings.DATABASE_URL and not settings.DB_HOST:
        issues.append("DATABASE_URL or DB_HOST is required")

    if settings.DATABASE_URL and not settings.DATABASE_URL.startswith(
        f"{ASYNC_DRIVER}://"
    ):
        issues.append("DATABASE_URL must point to a PostgreSQL database")

    if settings.is_production and not settings.DATABASE_URL and not settings.DB_PASSWORD:
        issues.append("DB_PASSWORD must be set in production")

    if not isinstance(logging.getLevelName(settings.LOG_LEVEL), int):
        issues.append(f"Unknown LOG_LEVEL: {settings.LOG_LEVEL}")

    return issues


def setup_logging(settings: Settings) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = logging.Formatter(settings.LOG_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # SQL echo is controlled by DATABASE_ECHO, keep the pool quiet otherwise
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
    logging.getLogger("asyncpg").setLevel(logging.WARNING)


__all__ = [
    "Settings",
    "DevelopmentSettings",
    "TestingSettings",
    "get_settings",
    "validate_settings",
    "setup_logging",
    "to_async_url",
]
