"""Application configuration and settings management.

This module defines the application settings loaded from environment
variables and provides a helper for accessing the cached settings.
"""

from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables.

    Attributes:
        DATABASE_URL: SQLAlchemy URL of the backing store. ``sqlite`` URLs
            select the embedded engine, ``mysql``/``mariadb`` URLs the
            client/server engine. ``SQL_DB`` is accepted as an alias.
        SQL_ECHO: Echo every SQL statement through SQLAlchemy logging.
        DB_POOL_RECYCLE: Seconds before a pooled server connection is recycled.
        DEFAULT_PAGE_SIZE: Bookmark page size used when a request omits it.
        ACCESS_TOKEN_LENGTH: Length of generated session access tokens.
        BCRYPT_ROUNDS: Cost factor for password hashing.
        ALLOWED_ORIGINS: Allowed origins for CORS.
        LOG_LEVEL: Level of the ``newton`` logger.
        LOG_FORMAT: ``text`` or ``json``.
    """

    DATABASE_URL: str = Field(
        "sqlite:///./newton.db",
        validation_alias=AliasChoices("DATABASE_URL", "SQL_DB"),
    )
    SQL_ECHO: bool = False
    DB_POOL_RECYCLE: int = 3600
    DEFAULT_PAGE_SIZE: int = 10
    ACCESS_TOKEN_LENGTH: int = 32
    BCRYPT_ROUNDS: int = 12
    ALLOWED_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


@lru_cache()
def get_settings() -> Settings:
    """Return cached application settings.

    The settings object is cached to prevent reloading environment
    variables multiple times during application lifetime.
    """

    return Settings()
