"""Query-independent importance and recency bonuses."""

from __future__ import annotations

from datetime import datetime

from mail_search.models import Sensitivity, Thread
from mail_search.search.text import contains, days_since, thread_text

IMPORTANT_SENDER_KEYWORDS = ("ceo", "manager", "director", "hr", "finance")
URGENCY_KEYWORDS = ("urgent", "important", "critical", "priority", "asap", "deadline")

IMPORTANT_SENDER_BONUS = 0.3
URGENCY_BONUS = 0.2
CONFIDENTIAL_BONUS = 0.3
ATTACHMENT_BONUS = 0.1
RECENCY_BONUS = 0.2
RECENCY_WINDOW_DAYS = 7


def importance_score(thread: Thread) -> float:
    """Additive bonus from sender role, urgency wording, sensitivity and attachments."""

    score = 0.0

    if any(
        contains(email.sender.name, keyword) or contains(email.sender.address, keyword)
        for email in thread.emails
        for keyword in IMPORTANT_SENDER_KEYWORDS
    ):
        score += IMPORTANT_SENDER_BONUS

    text = thread_text(thread)
    if any(keyword in text for keyword in URGENCY_KEYWORDS):
        score += URGENCY_BONUS

    if any(email.sensitivity == Sensitivity.CONFIDENTIAL for email in thread.emails):
        score += CONFIDENTIAL_BONUS

    if any(email.has_attachments for email in thread.emails):
        score += ATTACHMENT_BONUS

    return score


def recency_bonus(
    thread: Thread, now: datetime, window_days: int = RECENCY_WINDOW_DAYS
) -> float:
    """Flat bonus, applied once, when the thread's last message is inside the window."""
    if days_since(thread.last_message_date, now) <= window_days:
        return RECENCY_BONUS
    return 0.0
