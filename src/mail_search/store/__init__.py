"""Owner-scoped relational storage for the mail corpus."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import ArgumentError

from mail_search.config import Settings
from mail_search.exceptions import ConfigurationError

from .repository import ThreadRepository


def build_engine(settings: Settings) -> Engine:
    """Create the SQLAlchemy engine for ``settings.database_url``.

    Raises:
        ConfigurationError: If the URL cannot be parsed.
    """
    try:
        return create_engine(settings.database_url)
    except ArgumentError as e:
        raise ConfigurationError(f"Invalid database_url: {settings.database_url!r}") from e


__all__ = ["ThreadRepository", "build_engine"]
