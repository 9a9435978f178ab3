"""Configuration management for Mail Search.

This module handles application configuration using Pydantic settings.
Configuration can be loaded from environment variables or .env files.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with
    the MAIL_SEARCH_ prefix (e.g., MAIL_SEARCH_DATABASE_URL).
    """

    model_config = SettingsConfigDict(
        env_prefix="MAIL_SEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage Configuration
    database_url: str = Field(
        default="sqlite:///mail_search.sqlite3",
        description="SQLAlchemy URL of the relational store holding accounts and threads",
    )

    # Search Configuration
    search_max_results: int = Field(
        default=50,
        ge=1,
        description="Maximum number of ranked results returned by a search",
    )
    suggestion_max_results: int = Field(
        default=10,
        ge=1,
        description="Maximum number of autocomplete suggestions",
    )
    analytics_top_n: int = Field(
        default=5,
        ge=1,
        description="Number of entries kept for top senders and common topics",
    )
    recency_window_days: int = Field(
        default=7,
        ge=0,
        description="Threads with activity inside this window get the recency bonus",
    )

    # Identity Configuration
    session_tokens: dict[str, str] = Field(
        default_factory=dict,
        description=(
            "Mapping of session token to owner id, supplied by the identity provider. "
            "Set as JSON, e.g. MAIL_SEARCH_SESSION_TOKENS='{\"tok\": \"user_1\"}'."
        ),
    )
    cli_session_token: str | None = Field(
        default=None,
        description="Session token used by the command-line interface",
    )

    # Application Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings: Application settings instance.
    """
    return Settings()
