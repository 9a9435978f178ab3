"""Utility functions for Mail Search."""

import logging
from datetime import datetime, timezone

import structlog

from mail_search.config import Settings


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def configure_logging(settings: Settings) -> None:
    """Configure structlog to filter below the configured level.

    Args:
        settings: Application settings providing ``log_level``.
    """
    level = logging.getLevelName(settings.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
