"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from mail_search.models import Attachment, Email, EmailAddress, Sensitivity, Thread

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)
OLD = NOW - timedelta(days=30)


def build_email(
    id: str = "e1",
    subject: str = "",
    snippet: str | None = None,
    body: str | None = None,
    sender_name: str | None = None,
    sender_address: str = "someone@example.com",
    to: list[tuple[str | None, str]] | None = None,
    sent_at: datetime | None = None,
    has_attachments: bool = False,
    sensitivity: Sensitivity = Sensitivity.NORMAL,
    attachments: list[Attachment] | None = None,
) -> Email:
    sent = sent_at or OLD
    return Email(
        id=id,
        subject=subject,
        body_snippet=snippet,
        body=body,
        sent_at=sent,
        received_at=sent,
        has_attachments=has_attachments,
        sensitivity=sensitivity,
        sender=EmailAddress(name=sender_name, address=sender_address),
        to=[EmailAddress(name=name, address=address) for name, address in (to or [])],
        attachments=attachments or [],
    )


def build_thread(
    id: str = "t1",
    subject: str = "",
    emails: list[Email] | None = None,
    last_message_date: datetime | None = None,
    inbox: bool = True,
    sent: bool = False,
    draft: bool = False,
) -> Thread:
    return Thread(
        id=id,
        subject=subject,
        last_message_date=last_message_date or OLD,
        participant_ids=["p1", "p2"],
        inbox_status=inbox,
        sent_status=sent,
        draft_status=draft,
        emails=emails if emails is not None else [build_email(id=f"{id}-e1")],
    )


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used by engines under test."""
    return NOW


@pytest.fixture
def make_email():
    """Factory for emails with harmless defaults (old, no role words, no attachments)."""
    return build_email


@pytest.fixture
def make_thread():
    """Factory for inbox threads last active 30 days before NOW."""
    return build_thread


@pytest.fixture
def engine():
    """SearchEngine whose clock is pinned to NOW."""
    from mail_search.search import SearchEngine

    return SearchEngine(clock=lambda: NOW)


@pytest.fixture
def mock_settings():
    """Provide settings for testing."""
    from mail_search.config import Settings

    return Settings(
        database_url="sqlite://",
        session_tokens={"token-alice": "alice", "token-bob": "bob"},
        log_level="DEBUG",
        debug=True,
    )


@pytest.fixture
def repository(tmp_path):
    """SQLite-backed repository with the schema created."""
    from sqlalchemy import create_engine

    from mail_search.store import ThreadRepository

    repo = ThreadRepository(create_engine(f"sqlite:///{tmp_path / 'mail.sqlite3'}"))
    repo.initialize()
    return repo


@pytest.fixture
def populated_repository(repository):
    """Two owners with overlapping subjects, so scoping mistakes show up."""
    from mail_search.models import Account

    repository.add_account(
        Account(id="acc-alice", owner_id="alice", email_address="alice@example.com")
    )
    repository.add_account(Account(id="acc-bob", owner_id="bob", email_address="bob@example.com"))

    repository.save_thread(
        "acc-alice",
        build_thread(
            id="alice-1",
            subject="Project Update",
            last_message_date=NOW - timedelta(days=2),
            emails=[
                build_email(
                    id="alice-1-a",
                    subject="Project Update",
                    snippet="first draft of the plan",
                    sender_name="Dana Lee",
                    sender_address="dana@example.com",
                    to=[("Alice", "alice@example.com")],
                    sent_at=NOW - timedelta(days=3),
                ),
                build_email(
                    id="alice-1-b",
                    subject="Re: Project Update",
                    snippet="looks good to me",
                    sender_name="Alice",
                    sender_address="alice@example.com",
                    to=[("Dana Lee", "dana@example.com")],
                    sent_at=NOW - timedelta(days=2),
                    has_attachments=True,
                    attachments=[
                        Attachment(id="att-1", name="plan.pdf", mime_type="application/pdf", size=2048)
                    ],
                ),
            ],
        ),
    )
    repository.save_thread(
        "acc-alice",
        build_thread(
            id="alice-2",
            subject="Lunch order",
            inbox=False,
            sent=True,
            last_message_date=NOW - timedelta(days=10),
            emails=[build_email(id="alice-2-a", subject="Lunch order", snippet="pizza again")],
        ),
    )
    repository.save_thread(
        "acc-bob",
        build_thread(
            id="bob-1",
            subject="Project Kickoff",
            last_message_date=NOW - timedelta(days=1),
            emails=[build_email(id="bob-1-a", subject="Project Kickoff", snippet="private notes")],
        ),
    )
    return repository
