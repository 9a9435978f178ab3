"""Search orchestrator.

Combines the match strategies, the filter evaluator and the importance and
recency booster into one ranked result list. Everything here is a pure
function of the threads passed in; loading and owner scoping happen in the
service layer.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

import structlog

from mail_search.models import AnalyticsSummary, SearchFilter, SearchResult, Thread
from mail_search.search import analytics as analytics_module
from mail_search.search.boost import RECENCY_WINDOW_DAYS, importance_score, recency_bonus
from mail_search.search.filters import FILTER_PASS_BONUS, passes_filters
from mail_search.search.strategies import (
    ExactMatcher,
    FuzzyMatcher,
    MatchStrategy,
    SemanticCategoryMatcher,
)
from mail_search.search.suggestions import MAX_SUGGESTIONS, generate_suggestions
from mail_search.utils import utc_now

logger = structlog.get_logger()

MAX_RESULTS = 50
MAX_HIGHLIGHTS = 3

DEFAULT_STRATEGIES: tuple[tuple[MatchStrategy, float], ...] = (
    (ExactMatcher(), 1.0),
    (SemanticCategoryMatcher(), 0.8),
    (FuzzyMatcher(), 0.6),
)


class SearchEngine:
    """Stateless relevance ranking over an in-memory corpus.

    Results are sorted by relevance descending. Ties keep corpus order, which
    the store defines as most recent activity first.
    """

    def __init__(
        self,
        strategies: tuple[tuple[MatchStrategy, float], ...] = DEFAULT_STRATEGIES,
        max_results: int = MAX_RESULTS,
        max_suggestions: int = MAX_SUGGESTIONS,
        analytics_top_n: int = analytics_module.TOP_N,
        recency_window_days: int = RECENCY_WINDOW_DAYS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Create an engine.

        Args:
            strategies: Pairs of matcher and weight applied to its score.
            max_results: Cap on the number of ranked results.
            max_suggestions: Cap on the number of suggestions.
            analytics_top_n: Entries kept for top senders and topics.
            recency_window_days: Window for the recency bonus and recent activity.
            clock: Source of "now", injectable for tests.
        """
        self.strategies = strategies
        self.max_results = max_results
        self.max_suggestions = max_suggestions
        self.analytics_top_n = analytics_top_n
        self.recency_window_days = recency_window_days
        self.clock = clock

    def score_thread(
        self, thread: Thread, query: str, filters: SearchFilter, now: datetime
    ) -> SearchResult | None:
        """Score one thread, or return None when it is filtered out or irrelevant.

        With a non-blank query a thread needs a positive match score; the flat
        bonuses only reorder matches. With a blank query every thread that passes
        the filters is kept, ordered by its bonuses.
        """

        relevance = 0.0
        matched_fields: list[str] = []
        highlights: list[str] = []

        for strategy, weight in self.strategies:
            outcome = strategy.score(thread, query)
            relevance += outcome.relevance * weight
            matched_fields.extend(outcome.matched_fields)
            highlights.extend(outcome.highlights)

        if not passes_filters(thread, filters):
            return None

        if query.strip() and relevance <= 0:
            return None

        relevance += FILTER_PASS_BONUS
        relevance += recency_bonus(thread, now, self.recency_window_days)
        relevance += importance_score(thread)

        if relevance <= 0:
            return None

        return SearchResult(
            thread=thread,
            relevance=relevance,
            matched_fields=list(dict.fromkeys(matched_fields)),
            highlights=list(dict.fromkeys(highlights))[:MAX_HIGHLIGHTS],
        )

    def rank(
        self, threads: list[Thread], query: str, filters: SearchFilter | None = None
    ) -> list[SearchResult]:
        """Rank ``threads`` against ``query``.

        An empty query still runs the pipeline, so inclusion then depends only
        on filters and flat bonuses.
        """

        filters = filters or SearchFilter()
        now = self.clock()

        results = [
            result
            for thread in threads
            if (result := self.score_thread(thread, query, filters, now)) is not None
        ]
        # sorted() is stable, so equal scores keep corpus order.
        results = sorted(results, key=lambda r: r.relevance, reverse=True)

        logger.debug(
            "search_ranked",
            strategies=[strategy.name for strategy, _ in self.strategies],
            scanned=len(threads),
            matched=len(results),
            returned=min(len(results), self.max_results),
            query_length=len(query),
        )
        return results[: self.max_results]

    def suggest(self, threads: list[Thread], partial_query: str) -> list[str]:
        return generate_suggestions(threads, partial_query, self.max_suggestions)

    def analytics(self, threads: list[Thread]) -> AnalyticsSummary:
        return analytics_module.summarize(
            threads,
            now=self.clock(),
            limit=self.analytics_top_n,
            recent_days=self.recency_window_days,
        )
