"""Owner-scoped entry points for search, suggestions, analytics and listing.

Every operation resolves and checks the owner before touching storage, loads
the corpus fresh, and hands it to the stateless ``SearchEngine``. No results
are cached between calls.
"""

from __future__ import annotations

from typing import Protocol

import structlog

from mail_search.config import Settings
from mail_search.exceptions import AuthenticationRequiredError, ThreadNotFoundError
from mail_search.models import AnalyticsSummary, Folder, SearchFilter, SearchResult, Thread
from mail_search.search import SearchEngine
from mail_search.search.suggestions import MIN_PARTIAL_LENGTH
from mail_search.store import ThreadRepository

logger = structlog.get_logger()


class SessionResolver(Protocol):
    """Maps an opaque session token from the identity provider to an owner id."""

    def resolve(self, token: str | None) -> str | None: ...


class StaticSessionResolver:
    """Session resolver backed by a fixed token -> owner mapping."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    @classmethod
    def from_settings(cls, settings: Settings) -> "StaticSessionResolver":
        return cls(settings.session_tokens)

    def resolve(self, token: str | None) -> str | None:
        if not token:
            return None
        return self._tokens.get(token)


def require_owner(owner_id: str | None) -> str:
    """Fail closed when no owner identity was resolved.

    Raises:
        AuthenticationRequiredError: If ``owner_id`` is missing or blank.
    """
    if owner_id is None or not owner_id.strip():
        raise AuthenticationRequiredError("Authentication required")
    return owner_id


class MailSearchService:
    """Public operations over one principal's mail."""

    def __init__(self, repository: ThreadRepository, engine: SearchEngine | None = None) -> None:
        """Create the service.

        Args:
            repository: Owner-scoped thread store.
            engine: Ranking engine. If None, uses default weights and limits.
        """
        self.repository = repository
        self.engine = engine or SearchEngine()

    @classmethod
    def from_settings(cls, repository: ThreadRepository, settings: Settings) -> "MailSearchService":
        engine = SearchEngine(
            max_results=settings.search_max_results,
            max_suggestions=settings.suggestion_max_results,
            analytics_top_n=settings.analytics_top_n,
            recency_window_days=settings.recency_window_days,
        )
        return cls(repository, engine)

    def search(
        self, owner_id: str | None, query: str, filters: SearchFilter | None = None
    ) -> list[SearchResult]:
        """Ranked threads for ``query``; a blank query returns [] without loading."""

        owner = require_owner(owner_id)
        if not query.strip():
            return []

        filters = filters or SearchFilter()
        corpus = self.repository.load_corpus(owner, filters.folder)
        results = self.engine.rank(corpus, query, filters)
        logger.info(
            "search_completed",
            scanned=len(corpus),
            returned=len(results),
            query_length=len(query),
            folder=filters.folder.value if filters.folder else None,
        )
        return results

    def suggest(self, owner_id: str | None, partial_query: str) -> list[str]:
        owner = require_owner(owner_id)
        if len(partial_query) < MIN_PARTIAL_LENGTH:
            return []
        return self.engine.suggest(self.repository.load_corpus(owner), partial_query)

    def analytics(self, owner_id: str | None) -> AnalyticsSummary:
        owner = require_owner(owner_id)
        return self.engine.analytics(self.repository.load_corpus(owner))

    def list_threads(self, owner_id: str | None, folder: Folder = Folder.INBOX) -> list[Thread]:
        owner = require_owner(owner_id)
        return self.repository.list_threads(owner, folder)

    def find_threads(self, owner_id: str | None, needle: str) -> list[Thread]:
        owner = require_owner(owner_id)
        return self.repository.find_threads(owner, needle)

    def get_thread(self, owner_id: str | None, thread_id: str) -> Thread:
        """Fetch one owned thread, emails oldest-first.

        Raises:
            AuthenticationRequiredError: If no owner was resolved.
            ThreadNotFoundError: If the thread is missing or owned by someone else.
        """
        owner = require_owner(owner_id)
        thread = self.repository.get_thread(owner, thread_id)
        if thread is None:
            raise ThreadNotFoundError(f"Thread not found: {thread_id}")
        return thread
