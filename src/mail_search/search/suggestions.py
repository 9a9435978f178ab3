"""Autocomplete suggestions drawn from the owner's own mail."""

from __future__ import annotations

import re
from collections.abc import Iterable

from mail_search.models import Thread
from mail_search.search.text import contains

MIN_PARTIAL_LENGTH = 2
MAX_SUGGESTIONS = 10
MIN_WORD_LENGTH = 3

_NON_WORD = re.compile(r"[^\w]")


def generate_suggestions(
    threads: Iterable[Thread], partial_query: str, limit: int = MAX_SUGGESTIONS
) -> list[str]:
    """Words and phrases containing ``partial_query``.

    Subject words come first, then sender names/addresses and two-word snippet
    phrases in the order they are encountered. Output is de-duplicated and
    deterministic for a given corpus order.
    """

    if len(partial_query) < MIN_PARTIAL_LENGTH:
        return []

    q = partial_query.lower()

    # dicts keep insertion order, which makes the output deterministic.
    words: dict[str, None] = {}
    phrases: dict[str, None] = {}

    for thread in threads:
        for token in thread.subject.split():
            word = _NON_WORD.sub("", token.lower())
            if len(word) >= MIN_WORD_LENGTH and q in word:
                words.setdefault(word)

        for email in thread.emails:
            if contains(email.sender.name, q):
                phrases.setdefault(email.sender.name)
            if contains(email.sender.address, q):
                phrases.setdefault(email.sender.address)

        for email in thread.emails:
            if not email.body_snippet:
                continue
            tokens = email.body_snippet.lower().split()
            for first, second in zip(tokens, tokens[1:]):
                phrase = f"{first} {second}"
                if q in phrase:
                    phrases.setdefault(phrase)

    merged = dict.fromkeys([*words, *phrases])
    return list(merged)[:limit]
