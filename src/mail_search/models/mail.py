"""Mailbox data models: accounts, threads, emails and their addresses.

These are read-only views for the search engine. Nothing in the search path
mutates them.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC and normalise aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys.

    Python code builds instances by field name; JSON goes out by alias.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Folder(str, Enum):
    """Mailbox folder, backed by the per-thread status flags."""

    INBOX = "inbox"
    SENT = "sent"
    DRAFT = "draft"


class EmailLabel(str, Enum):
    """Label assigned to a single email."""

    INBOX = "inbox"
    SENT = "sent"
    DRAFT = "draft"


class Sensitivity(str, Enum):
    """Privacy classification of an email."""

    NORMAL = "normal"
    PRIVATE = "private"
    PERSONAL = "personal"
    CONFIDENTIAL = "confidential"


class EmailAddress(CamelModel):
    """A mailbox address with an optional display name."""

    name: Optional[str] = Field(default=None, description="Display name")
    address: str = Field(description="Email address")

    @property
    def display(self) -> str:
        return self.name or self.address


class Attachment(CamelModel):
    """Attachment metadata. Content is never loaded."""

    id: str = Field(description="Attachment ID")
    name: str = Field(description="File name")
    mime_type: str = Field(description="MIME type")
    size: int = Field(ge=0, description="Size in bytes")
    inline: bool = Field(default=False, description="Whether the attachment is inline")


class Email(CamelModel):
    """A single email inside a thread."""

    id: str = Field(description="Unique email ID")
    subject: str = Field(default="", description="Email subject")
    body_snippet: Optional[str] = Field(default=None, description="Short preview of the body")
    body: Optional[str] = Field(default=None, description="Full body, may contain markup")
    sent_at: datetime = Field(description="Sent timestamp")
    received_at: datetime = Field(description="Received timestamp")
    has_attachments: bool = Field(default=False, description="Whether the email has attachments")
    email_label: EmailLabel = Field(default=EmailLabel.INBOX, description="Email label")
    sensitivity: Sensitivity = Field(default=Sensitivity.NORMAL, description="Sensitivity level")
    sender: EmailAddress = Field(description="From address")
    to: list[EmailAddress] = Field(default_factory=list, description="To recipients")
    cc: list[EmailAddress] = Field(default_factory=list, description="Cc recipients")
    bcc: list[EmailAddress] = Field(default_factory=list, description="Bcc recipients")
    attachments: list[Attachment] = Field(default_factory=list, description="Attachments")

    @field_validator("sent_at", "received_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)


class Thread(CamelModel):
    """A conversation: one or more emails sharing a subject and participants."""

    id: str = Field(description="Unique thread ID")
    subject: str = Field(default="", description="Thread subject")
    last_message_date: datetime = Field(description="Timestamp of the latest message")
    participant_ids: list[str] = Field(default_factory=list, description="Participant IDs")
    inbox_status: bool = Field(default=False, description="Thread is in the inbox")
    draft_status: bool = Field(default=False, description="Thread is a draft")
    sent_status: bool = Field(default=False, description="Thread is in sent")
    emails: list[Email] = Field(default_factory=list, description="Emails in the thread")

    @field_validator("last_message_date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        return ensure_utc(v)

    def in_folder(self, folder: Folder) -> bool:
        """Return whether the matching status flag is set for ``folder``."""
        if folder is Folder.INBOX:
            return self.inbox_status
        if folder is Folder.SENT:
            return self.sent_status
        return self.draft_status


class Account(CamelModel):
    """A connected mailbox owned by one authenticated principal."""

    id: str = Field(description="Account ID")
    owner_id: str = Field(description="Identity-provider user ID of the owner")
    email_address: str = Field(description="Mailbox address")
    name: str = Field(default="", description="Account display name")
    provider: str = Field(default="", description="Mail provider")
