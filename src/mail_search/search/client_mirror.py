"""Instant-preview filtering and ranking over already-fetched threads.

These functions back keystroke-level narrowing in the UI while the
authoritative search request is in flight. They are pure, synchronous and do
no I/O, so callers only need to debounce them.

The preview ranking deliberately uses its own, cheaper weights (no semantic
or fuzzy matching, no importance boost) and is not guaranteed to order
results the same way as ``SearchEngine.rank``. Differences from the server
path:

- text is matched per email; the thread subject is not consulted
- the folder flag is checked here because there is no folder-scoped load
- the date range applies to each email's ``sent_at``
"""

from __future__ import annotations

import html
import re
from datetime import datetime

from mail_search.models import Email, SearchFilter, Thread
from mail_search.search.suggestions import MAX_SUGGESTIONS, MIN_PARTIAL_LENGTH, MIN_WORD_LENGTH
from mail_search.search.text import contains, days_since
from mail_search.utils import utc_now

SUBJECT_WEIGHT = 10
SENDER_NAME_WEIGHT = 8
SENDER_ADDRESS_WEIGHT = 6
SNIPPET_WEIGHT = 4
BODY_WEIGHT = 3
RECIPIENT_NAME_WEIGHT = 5
RECIPIENT_ADDRESS_WEIGHT = 4
RECENCY_WEIGHT = 2
RECENCY_WINDOW_DAYS = 7

HIGHLIGHT_OPEN = '<mark class="bg-yellow-200">'
HIGHLIGHT_CLOSE = "</mark>"


def _email_matches_text(email: Email, q: str) -> bool:
    return (
        contains(email.subject, q)
        or contains(email.body_snippet, q)
        or contains(email.body, q)
        or contains(email.sender.name, q)
        or contains(email.sender.address, q)
        or any(contains(r.name, q) or contains(r.address, q) for r in email.to)
    )


def _email_matches_filters(email: Email, filters: SearchFilter) -> bool:
    if filters.sender:
        sender = filters.sender.lower()
        if not (contains(email.sender.name, sender) or contains(email.sender.address, sender)):
            return False
    if filters.has_attachments is not None and email.has_attachments != filters.has_attachments:
        return False
    if filters.sensitivity is not None and email.sensitivity != filters.sensitivity:
        return False
    if filters.date_range is not None and not filters.date_range.contains(email.sent_at):
        return False
    return True


def filter_threads_realtime(
    threads: list[Thread], query: str, filters: SearchFilter | None = None
) -> list[Thread]:
    """Threads with at least one email matching the text and every filter at once."""

    filters = filters or SearchFilter()
    if not query.strip() and filters.is_empty():
        return list(threads)

    blank = not query.strip()
    q = query.lower()

    kept = []
    for thread in threads:
        if filters.folder is not None and not thread.in_folder(filters.folder):
            continue
        if any(
            (blank or _email_matches_text(email, q)) and _email_matches_filters(email, filters)
            for email in thread.emails
        ):
            kept.append(thread)
    return kept


def calculate_relevance_score(
    thread: Thread, query: str, now: datetime | None = None
) -> float:
    """Preview score used only for ordering; a blank query scores zero."""

    if not query.strip():
        return 0

    now = now or utc_now()
    q = query.lower()
    score = 0

    for email in thread.emails:
        if contains(email.subject, q):
            score += SUBJECT_WEIGHT
        if contains(email.sender.name, q):
            score += SENDER_NAME_WEIGHT
        if contains(email.sender.address, q):
            score += SENDER_ADDRESS_WEIGHT
        if contains(email.body_snippet, q):
            score += SNIPPET_WEIGHT
        if contains(email.body, q):
            score += BODY_WEIGHT
        for recipient in email.to:
            if contains(recipient.name, q):
                score += RECIPIENT_NAME_WEIGHT
            if contains(recipient.address, q):
                score += RECIPIENT_ADDRESS_WEIGHT

    if days_since(thread.last_message_date, now) <= RECENCY_WINDOW_DAYS:
        score += RECENCY_WEIGHT

    return score


def sort_threads_by_relevance(
    threads: list[Thread],
    query: str,
    now: datetime | None = None,
) -> list[Thread]:
    """Order threads by preview score, dropping zero scores. Blank query is a no-op."""

    if not query.strip():
        return list(threads)

    now = now or utc_now()
    scored = [(thread, calculate_relevance_score(thread, query, now)) for thread in threads]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [thread for thread, _ in scored]


def highlight_matches(text: str, query: str) -> str:
    """Wrap each case-insensitive occurrence of ``query`` in a mark span.

    The surrounding text is HTML-escaped so the result is safe to render.
    """

    if not query.strip():
        return html.escape(text)

    pattern = re.compile(re.escape(query), re.IGNORECASE)
    parts: list[str] = []
    last = 0
    for match in pattern.finditer(text):
        parts.append(html.escape(text[last : match.start()]))
        parts.append(f"{HIGHLIGHT_OPEN}{html.escape(match.group(0))}{HIGHLIGHT_CLOSE}")
        last = match.end()
    parts.append(html.escape(text[last:]))
    return "".join(parts)


def suggestions_from_threads(threads: list[Thread], query: str) -> list[str]:
    """Preview suggestions: whole subjects, senders and snippet words."""

    if len(query) < MIN_PARTIAL_LENGTH:
        return []

    q = query.lower()
    found: dict[str, None] = {}

    for thread in threads:
        if contains(thread.subject, q):
            found.setdefault(thread.subject)

        for email in thread.emails:
            if contains(email.sender.name, q):
                found.setdefault(email.sender.name)
            if contains(email.sender.address, q):
                found.setdefault(email.sender.address)

        for email in thread.emails:
            if not email.body_snippet:
                continue
            for word in email.body_snippet.lower().split():
                if q in word and len(word) >= MIN_WORD_LENGTH:
                    found.setdefault(word)

    return list(found)[:MAX_SUGGESTIONS]
