"""Match strategies.

Each matcher scores one thread against a query string and reports which fields
matched plus short highlights explaining why. Matchers are stateless and never
raise on missing optional fields; a null body simply does not match.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol

from mail_search.models import Thread
from mail_search.search.text import contains, thread_text

SNIPPET_HIGHLIGHT_CHARS = 100

SEMANTIC_BONUS = 3.0
FUZZY_BONUS = 2.0
FUZZY_MIN_TOKEN_LENGTH = 3
FUZZY_PREFIX_RATIO = 0.7

# Category -> keywords. A category fires when the query mentions one of its
# keywords and the thread text mentions one too (not necessarily the same one).
SEMANTIC_CATEGORIES: dict[str, tuple[str, ...]] = {
    "meeting": ("meeting", "schedule", "appointment", "call", "conference"),
    "project": ("project", "task", "work", "assignment", "deliverable"),
    "report": ("report", "analysis", "summary", "review", "assessment"),
    "urgent": ("urgent", "important", "critical", "priority", "asap"),
    "deadline": ("deadline", "due", "timeline", "schedule"),
    "budget": ("budget", "cost", "expense", "financial", "money"),
    "team": ("team", "collaboration", "group", "department", "staff"),
}


@dataclass
class MatchOutcome:
    """Partial score and provenance produced by one strategy."""

    relevance: float = 0.0
    matched_fields: list[str] = field(default_factory=list)
    highlights: list[str] = field(default_factory=list)

    def add(self, points: float, matched_field: str, highlight: str | None = None) -> None:
        self.relevance += points
        self.matched_fields.append(matched_field)
        if highlight is not None:
            self.highlights.append(highlight)


class MatchStrategy(Protocol):
    """Scores a single thread against a query."""

    name: str

    def score(self, thread: Thread, query: str) -> MatchOutcome: ...


class ExactMatcher:
    """Weighted case-insensitive substring matching over thread and email fields.

    Every matching field of every email accumulates into one total.
    """

    name = "exact"

    SUBJECT = 10.0
    EMAIL_SUBJECT = 8.0
    SNIPPET = 6.0
    BODY = 5.0
    SENDER_NAME = 7.0
    SENDER_ADDRESS = 6.0
    RECIPIENT_NAME = 5.0
    RECIPIENT_ADDRESS = 4.0

    def score(self, thread: Thread, query: str) -> MatchOutcome:
        outcome = MatchOutcome()
        if not query.strip():
            return outcome

        q = query.lower()

        if contains(thread.subject, q):
            outcome.add(self.SUBJECT, "subject", f"Subject: {thread.subject}")

        for email in thread.emails:
            if contains(email.subject, q):
                outcome.add(self.EMAIL_SUBJECT, "email_subject", f"Email: {email.subject}")

            if contains(email.body_snippet, q):
                snippet = email.body_snippet or ""
                outcome.add(
                    self.SNIPPET,
                    "email_body",
                    f"Content: {snippet[:SNIPPET_HIGHLIGHT_CHARS]}...",
                )

            if contains(email.body, q):
                outcome.add(self.BODY, "email_body_full")

            if contains(email.sender.name, q):
                outcome.add(self.SENDER_NAME, "sender_name", f"From: {email.sender.name}")

            if contains(email.sender.address, q):
                outcome.add(self.SENDER_ADDRESS, "sender_email", f"From: {email.sender.address}")

            for recipient in email.to:
                if contains(recipient.name, q):
                    outcome.add(self.RECIPIENT_NAME, "recipient_name", f"To: {recipient.name}")
                if contains(recipient.address, q):
                    outcome.add(
                        self.RECIPIENT_ADDRESS, "recipient_email", f"To: {recipient.address}"
                    )

        return outcome


class SemanticCategoryMatcher:
    """Keyword-category expansion: "call" in the query finds a thread about a "meeting"."""

    name = "semantic"

    def __init__(self, categories: dict[str, tuple[str, ...]] | None = None) -> None:
        self.categories = categories or SEMANTIC_CATEGORIES

    def score(self, thread: Thread, query: str) -> MatchOutcome:
        outcome = MatchOutcome()
        if not query.strip():
            return outcome

        q = query.lower()
        text = thread_text(thread)

        for category, keywords in self.categories.items():
            if not any(keyword in q for keyword in keywords):
                continue
            if any(keyword in text for keyword in keywords):
                outcome.add(SEMANTIC_BONUS, f"semantic_{category}", f"Related to: {category}")

        return outcome


class FuzzyMatcher:
    """Truncated-prefix containment per query token.

    Tolerates suffix typos and inflection ("meetng" still hits "meeting"),
    not interior corruption. This is not edit-distance matching.
    """

    name = "fuzzy"

    def score(self, thread: Thread, query: str) -> MatchOutcome:
        outcome = MatchOutcome()
        tokens = [t for t in query.lower().split() if len(t) >= FUZZY_MIN_TOKEN_LENGTH]
        if not tokens:
            return outcome

        text = thread_text(thread)
        for token in tokens:
            prefix = token[: math.floor(len(token) * FUZZY_PREFIX_RATIO)]
            if prefix in text:
                outcome.add(FUZZY_BONUS, "fuzzy_match", f"Partial match: {token}")

        return outcome
