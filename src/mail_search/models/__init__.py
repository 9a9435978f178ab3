"""Data models for Mail Search.

This module contains Pydantic models for data validation and serialization.
"""

from mail_search.models.mail import (
    Account,
    Attachment,
    CamelModel,
    Email,
    EmailAddress,
    EmailLabel,
    Folder,
    Sensitivity,
    Thread,
    ensure_utc,
)
from mail_search.models.search import (
    AnalyticsSummary,
    DateRange,
    SearchFilter,
    SearchResult,
    SenderCount,
    TopicCount,
)

__all__ = [
    "Account",
    "AnalyticsSummary",
    "CamelModel",
    "Attachment",
    "DateRange",
    "Email",
    "EmailAddress",
    "EmailLabel",
    "Folder",
    "SearchFilter",
    "SearchResult",
    "SenderCount",
    "Sensitivity",
    "Thread",
    "TopicCount",
    "ensure_utc",
]
