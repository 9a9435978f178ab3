"""Request and response models for search, suggestions and analytics."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator, model_validator

from mail_search.models.mail import CamelModel, Folder, Sensitivity, Thread, ensure_utc


class DateRange(CamelModel):
    """Inclusive date range."""

    start: datetime = Field(description="Lower bound (inclusive)")
    end: datetime = Field(description="Upper bound (inclusive)")

    @field_validator("start", "end")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    @model_validator(mode="after")
    def _ordered(self) -> "DateRange":
        if self.start > self.end:
            raise ValueError("date range start must not be after end")
        return self

    def contains(self, moment: datetime) -> bool:
        return self.start <= ensure_utc(moment) <= self.end


class SearchFilter(CamelModel):
    """Optional, conjunctive constraints for a search.

    ``has_attachments`` distinguishes ``None`` (no constraint) from ``False``
    (must have no attachments).
    """

    folder: Optional[Folder] = Field(default=None, description="Folder to scan")
    sender: Optional[str] = Field(default=None, description="Sender name/address substring")
    has_attachments: Optional[bool] = Field(default=None, description="Attachment constraint")
    sensitivity: Optional[Sensitivity] = Field(default=None, description="Required sensitivity")
    date_range: Optional[DateRange] = Field(default=None, description="Last activity range")

    def is_empty(self) -> bool:
        return (
            self.folder is None
            and not self.sender
            and self.has_attachments is None
            and self.sensitivity is None
            and self.date_range is None
        )


class SearchResult(CamelModel):
    """One ranked thread."""

    thread: Thread
    relevance: float
    matched_fields: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)


class SenderCount(CamelModel):
    sender: str
    count: int


class TopicCount(CamelModel):
    topic: str
    count: int


class AnalyticsSummary(CamelModel):
    """Corpus-wide counts for one owner."""

    total_emails: int = 0
    total_threads: int = 0
    recent_activity: int = 0
    top_senders: list[SenderCount] = Field(default_factory=list)
    common_topics: list[TopicCount] = Field(default_factory=list)
