"""Relational store for accounts, threads and emails.

Every read is scoped by owner: queries join through ``accounts.owner_id`` so a
principal can never load another principal's threads. Timestamps are stored
as UTC ISO-8601 text, which sorts correctly on SQLite and PostgreSQL alike.
"""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from mail_search.exceptions import StorageUnavailableError
from mail_search.models import (
    Account,
    Attachment,
    Email,
    EmailAddress,
    Folder,
    Thread,
    ensure_utc,
)
from mail_search.search.text import contains

logger = structlog.get_logger()


_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS accounts (
        id TEXT PRIMARY KEY,
        owner_id TEXT NOT NULL,
        email_address TEXT NOT NULL,
        name TEXT NOT NULL DEFAULT '',
        provider TEXT NOT NULL DEFAULT ''
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_accounts_owner ON accounts(owner_id)",
    """
    CREATE TABLE IF NOT EXISTS threads (
        id TEXT PRIMARY KEY,
        account_id TEXT NOT NULL REFERENCES accounts(id),
        subject TEXT NOT NULL DEFAULT '',
        last_message_date TEXT NOT NULL,
        participant_ids_json TEXT NOT NULL,
        inbox_status BOOLEAN NOT NULL,
        draft_status BOOLEAN NOT NULL,
        sent_status BOOLEAN NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_threads_account ON threads(account_id)",
    "CREATE INDEX IF NOT EXISTS idx_threads_last_message ON threads(last_message_date)",
    """
    CREATE TABLE IF NOT EXISTS emails (
        id TEXT PRIMARY KEY,
        thread_id TEXT NOT NULL REFERENCES threads(id),
        subject TEXT NOT NULL DEFAULT '',
        body_snippet TEXT,
        body TEXT,
        sent_at TEXT NOT NULL,
        received_at TEXT NOT NULL,
        has_attachments BOOLEAN NOT NULL,
        email_label TEXT NOT NULL,
        sensitivity TEXT NOT NULL,
        from_name TEXT,
        from_address TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_emails_thread ON emails(thread_id)",
    """
    CREATE TABLE IF NOT EXISTS email_recipients (
        email_id TEXT NOT NULL REFERENCES emails(id),
        kind TEXT NOT NULL,
        position INTEGER NOT NULL,
        name TEXT,
        address TEXT NOT NULL,
        PRIMARY KEY (email_id, kind, position)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS attachments (
        id TEXT PRIMARY KEY,
        email_id TEXT NOT NULL REFERENCES emails(id),
        name TEXT NOT NULL,
        mime_type TEXT NOT NULL,
        size INTEGER NOT NULL,
        inline BOOLEAN NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_attachments_email ON attachments(email_id)",
)

# Folder -> thread status column. Column names never come from user input.
_FOLDER_COLUMNS = {
    Folder.INBOX: "t.inbox_status",
    Folder.SENT: "t.sent_status",
    Folder.DRAFT: "t.draft_status",
}

_RECIPIENT_KINDS = ("to", "cc", "bcc")


def _to_iso(value: datetime) -> str:
    return ensure_utc(value).isoformat(timespec="microseconds")


def _from_iso(value: str) -> datetime:
    return datetime.fromisoformat(value)


class ThreadRepository:
    """Owner-scoped, read-mostly access to the mail corpus."""

    def __init__(self, engine: Engine) -> None:
        """Create a repository.

        Args:
            engine: SQLAlchemy engine bound to the mail database.
        """

        self._engine = engine

    def initialize(self) -> None:
        """Create tables and indexes if they do not exist (idempotent)."""

        with self._begin("initialize") as conn:
            for statement in _SCHEMA:
                conn.execute(text(statement))
        logger.info("mail_schema_ensured")

    # Reads

    def load_corpus(self, owner_id: str, folder: Folder | None = None) -> list[Thread]:
        """Load every thread owned by ``owner_id`` with emails newest-first.

        Args:
            owner_id: Resolved identity of the requesting principal.
            folder: When given, only threads whose status flag is set.

        Returns:
            Threads ordered by last activity, most recent first.
        """

        where = ""
        params: dict[str, Any] = {}
        if folder is not None:
            where = f"{_FOLDER_COLUMNS[folder]} = :flag"
            params["flag"] = True

        threads = self._load(owner_id, where, params, newest_first=True)
        logger.info(
            "corpus_loaded",
            folder=folder.value if folder else None,
            thread_count=len(threads),
        )
        return threads

    def list_threads(self, owner_id: str, folder: Folder = Folder.INBOX) -> list[Thread]:
        """Plain folder listing, no scoring."""

        return self.load_corpus(owner_id, folder)

    def get_thread(self, owner_id: str, thread_id: str) -> Thread | None:
        """Fetch one thread with emails oldest-first, or None if missing or not owned."""

        threads = self._load(
            owner_id, "t.id = :thread_id", {"thread_id": thread_id}, newest_first=False
        )
        return threads[0] if threads else None

    def find_threads(self, owner_id: str, needle: str) -> list[Thread]:
        """Threads whose subject or any email subject/body/snippet contains ``needle``.

        Matching is done in Python so case folding covers non-ASCII text on every
        backend; SQLite's LOWER() only folds ASCII.
        """

        needle = needle.lower()
        return [
            thread
            for thread in self._load(owner_id, "", {}, newest_first=True)
            if contains(thread.subject, needle)
            or any(
                contains(email.subject, needle)
                or contains(email.body, needle)
                or contains(email.body_snippet, needle)
                for email in thread.emails
            )
        ]

    # Writes (ingestion)

    def add_account(self, account: Account) -> None:
        with self._begin("add_account") as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO accounts (id, owner_id, email_address, name, provider)
                    VALUES (:id, :owner_id, :email_address, :name, :provider)
                    """
                ),
                account.model_dump(),
            )

    def save_thread(self, account_id: str, thread: Thread) -> None:
        """Insert a thread together with its emails, recipients and attachments."""

        with self._begin("save_thread") as conn:
            conn.execute(
                text(
                    """
                    INSERT INTO threads (
                        id, account_id, subject, last_message_date, participant_ids_json,
                        inbox_status, draft_status, sent_status
                    )
                    VALUES (
                        :id, :account_id, :subject, :last_message_date, :participant_ids_json,
                        :inbox_status, :draft_status, :sent_status
                    )
                    """
                ),
                {
                    "id": thread.id,
                    "account_id": account_id,
                    "subject": thread.subject,
                    "last_message_date": _to_iso(thread.last_message_date),
                    "participant_ids_json": json.dumps(thread.participant_ids),
                    "inbox_status": thread.inbox_status,
                    "draft_status": thread.draft_status,
                    "sent_status": thread.sent_status,
                },
            )

            for email in thread.emails:
                self._insert_email(conn, thread.id, email)

    def _insert_email(self, conn: Connection, thread_id: str, email: Email) -> None:
        conn.execute(
            text(
                """
                INSERT INTO emails (
                    id, thread_id, subject, body_snippet, body, sent_at, received_at,
                    has_attachments, email_label, sensitivity, from_name, from_address
                )
                VALUES (
                    :id, :thread_id, :subject, :body_snippet, :body, :sent_at, :received_at,
                    :has_attachments, :email_label, :sensitivity, :from_name, :from_address
                )
                """
            ),
            {
                "id": email.id,
                "thread_id": thread_id,
                "subject": email.subject,
                "body_snippet": email.body_snippet,
                "body": email.body,
                "sent_at": _to_iso(email.sent_at),
                "received_at": _to_iso(email.received_at),
                "has_attachments": email.has_attachments,
                "email_label": email.email_label.value,
                "sensitivity": email.sensitivity.value,
                "from_name": email.sender.name,
                "from_address": email.sender.address,
            },
        )

        recipients = [
            {
                "email_id": email.id,
                "kind": kind,
                "position": position,
                "name": addr.name,
                "address": addr.address,
            }
            for kind in _RECIPIENT_KINDS
            for position, addr in enumerate(getattr(email, kind))
        ]
        if recipients:
            conn.execute(
                text(
                    """
                    INSERT INTO email_recipients (email_id, kind, position, name, address)
                    VALUES (:email_id, :kind, :position, :name, :address)
                    """
                ),
                recipients,
            )

        if email.attachments:
            conn.execute(
                text(
                    """
                    INSERT INTO attachments (id, email_id, name, mime_type, size, inline)
                    VALUES (:id, :email_id, :name, :mime_type, :size, :inline)
                    """
                ),
                [{**a.model_dump(), "email_id": email.id} for a in email.attachments],
            )

    # Internals

    @contextmanager
    def _begin(self, operation: str) -> Iterator[Connection]:
        try:
            with self._engine.begin() as conn:
                yield conn
        except SQLAlchemyError as e:
            logger.error("storage_query_failed", operation=operation, error=str(e))
            raise StorageUnavailableError(f"Mail store unavailable during {operation}") from e

    def _load(
        self,
        owner_id: str,
        where: str,
        params: dict[str, Any],
        *,
        newest_first: bool,
    ) -> list[Thread]:
        scope = "a.owner_id = :owner_id"
        if where:
            scope = f"{scope} AND {where}"
        bind = {**params, "owner_id": owner_id}
        email_order = "DESC" if newest_first else "ASC"

        with self._begin("load_threads") as conn:
            thread_rows = conn.execute(
                text(
                    f"""
                    SELECT t.id, t.subject, t.last_message_date, t.participant_ids_json,
                           t.inbox_status, t.draft_status, t.sent_status
                    FROM threads t
                    JOIN accounts a ON a.id = t.account_id
                    WHERE {scope}
                    ORDER BY t.last_message_date DESC, t.id ASC
                    """
                ),
                bind,
            ).mappings().all()

            if not thread_rows:
                return []

            email_rows = conn.execute(
                text(
                    f"""
                    SELECT e.*
                    FROM emails e
                    JOIN threads t ON t.id = e.thread_id
                    JOIN accounts a ON a.id = t.account_id
                    WHERE {scope}
                    ORDER BY e.sent_at {email_order}, e.id ASC
                    """
                ),
                bind,
            ).mappings().all()

            recipient_rows = conn.execute(
                text(
                    f"""
                    SELECT r.email_id, r.kind, r.name, r.address
                    FROM email_recipients r
                    JOIN emails e ON e.id = r.email_id
                    JOIN threads t ON t.id = e.thread_id
                    JOIN accounts a ON a.id = t.account_id
                    WHERE {scope}
                    ORDER BY r.email_id, r.kind, r.position
                    """
                ),
                bind,
            ).mappings().all()

            attachment_rows = conn.execute(
                text(
                    f"""
                    SELECT x.id, x.email_id, x.name, x.mime_type, x.size, x.inline
                    FROM attachments x
                    JOIN emails e ON e.id = x.email_id
                    JOIN threads t ON t.id = e.thread_id
                    JOIN accounts a ON a.id = t.account_id
                    WHERE {scope}
                    ORDER BY x.email_id, x.id
                    """
                ),
                bind,
            ).mappings().all()

        recipients: dict[str, dict[str, list[EmailAddress]]] = defaultdict(
            lambda: {kind: [] for kind in _RECIPIENT_KINDS}
        )
        for row in recipient_rows:
            recipients[row["email_id"]][row["kind"]].append(
                EmailAddress(name=row["name"], address=row["address"])
            )

        attachments: dict[str, list[Attachment]] = defaultdict(list)
        for row in attachment_rows:
            attachments[row["email_id"]].append(
                Attachment(
                    id=row["id"],
                    name=row["name"],
                    mime_type=row["mime_type"],
                    size=int(row["size"]),
                    inline=bool(row["inline"]),
                )
            )

        emails: dict[str, list[Email]] = defaultdict(list)
        for row in email_rows:
            addressed = recipients[row["id"]]
            emails[row["thread_id"]].append(
                Email(
                    id=row["id"],
                    subject=row["subject"] or "",
                    body_snippet=row["body_snippet"],
                    body=row["body"],
                    sent_at=_from_iso(row["sent_at"]),
                    received_at=_from_iso(row["received_at"]),
                    has_attachments=bool(row["has_attachments"]),
                    email_label=row["email_label"],
                    sensitivity=row["sensitivity"],
                    sender=EmailAddress(name=row["from_name"], address=row["from_address"]),
                    to=addressed["to"],
                    cc=addressed["cc"],
                    bcc=addressed["bcc"],
                    attachments=attachments[row["id"]],
                )
            )

        return [
            Thread(
                id=row["id"],
                subject=row["subject"] or "",
                last_message_date=_from_iso(row["last_message_date"]),
                participant_ids=json.loads(row["participant_ids_json"]),
                inbox_status=bool(row["inbox_status"]),
                draft_status=bool(row["draft_status"]),
                sent_status=bool(row["sent_status"]),
                emails=emails[row["id"]],
            )
            for row in thread_rows
        ]
