"""Text helpers shared by the matchers, booster and aggregators."""

from __future__ import annotations

from datetime import datetime, timedelta

from mail_search.models import Thread

DAY = timedelta(days=1)


def contains(haystack: str | None, needle_lower: str) -> bool:
    """Case-insensitive containment; ``needle_lower`` must already be lowercased.

    A missing haystack never matches.
    """
    if not haystack:
        return False
    return needle_lower in haystack.lower()


def thread_text(thread: Thread) -> str:
    """Lowercased subject plus every body snippet of the thread."""
    snippets = " ".join(email.body_snippet or "" for email in thread.emails)
    return f"{thread.subject} {snippets}".lower()


def days_since(moment: datetime, now: datetime) -> float:
    return (now - moment) / DAY
