"""Corpus-wide counts for the search dashboard."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

from mail_search.models import AnalyticsSummary, SenderCount, Thread, TopicCount
from mail_search.search.text import days_since, thread_text

TOPIC_VOCABULARY = (
    "meeting",
    "project",
    "report",
    "update",
    "review",
    "deadline",
    "budget",
    "team",
)
TOP_N = 5
RECENT_ACTIVITY_DAYS = 7


def top_senders(threads: list[Thread], limit: int = TOP_N) -> list[SenderCount]:
    """Most frequent senders by display name, falling back to address.

    Ties keep first-encountered order.
    """
    counts: Counter[str] = Counter()
    for thread in threads:
        for email in thread.emails:
            counts[email.sender.display] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [SenderCount(sender=sender, count=count) for sender, count in ranked[:limit]]


def common_topics(threads: list[Thread], limit: int = TOP_N) -> list[TopicCount]:
    """How many threads mention each vocabulary word, most common first."""
    counts: Counter[str] = Counter()
    for thread in threads:
        text = thread_text(thread)
        for topic in TOPIC_VOCABULARY:
            if topic in text:
                counts[topic] += 1

    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [TopicCount(topic=topic, count=count) for topic, count in ranked[:limit]]


def summarize(
    threads: list[Thread],
    now: datetime,
    limit: int = TOP_N,
    recent_days: int = RECENT_ACTIVITY_DAYS,
) -> AnalyticsSummary:
    """Build the analytics summary. An empty corpus yields zeros and empty lists."""
    return AnalyticsSummary(
        total_emails=sum(len(thread.emails) for thread in threads),
        total_threads=len(threads),
        recent_activity=sum(
            1 for thread in threads if days_since(thread.last_message_date, now) < recent_days
        ),
        top_senders=top_senders(threads, limit),
        common_topics=common_topics(threads, limit),
    )
