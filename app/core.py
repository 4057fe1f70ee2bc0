"""Application configuration and settings management.

This module defines the application settings loaded from environment
variables and provides helper functions for accessing cached settings
and configuring logging.
"""

import logging
from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        DATABASE_URL: Database connection string.
        TOKEN_HEADER: Name of the request header carrying the API token.
        ALLOWED_ORIGINS: Allowed origins for CORS.
        REDIS_URL: Redis connection URL for rate limiting.
        RATE_LIMIT_ENABLED: Whether the login/profile rate limiter is active.
        RATE_LIMIT_TIMES: Requests allowed per window.
        RATE_LIMIT_SECONDS: Rate limiter window length in seconds.
        LOG_LEVEL: Root logging level.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="allow")

    DATABASE_URL: str = "sqlite:///./contacts.db"
    TOKEN_HEADER: str = "X-API-TOKEN"
    ALLOWED_ORIGINS: List[str] = ["*"]
    REDIS_URL: str = "redis://redis:6379"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_TIMES: int = 5
    RATE_LIMIT_SECONDS: int = 60
    LOG_LEVEL: str = "INFO"


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging for the service.

    Args:
        level (str | None): Level name; defaults to ``Settings.LOG_LEVEL``.
    """

    level_name = (level or get_settings().LOG_LEVEL).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
