"""API models for the Mail Search HTTP boundary."""

from __future__ import annotations

from mail_search.models import (
    AnalyticsSummary,
    CamelModel,
    SearchFilter,
    SearchResult,
    Thread,
)


class SearchResponse(CamelModel):
    results: list[SearchResult]
    total: int
    query: str | None = None
    filters: SearchFilter | None = None
    search_time: int | None = None


class SuggestionsResponse(CamelModel):
    suggestions: list[str]


class AnalyticsResponse(CamelModel):
    analytics: AnalyticsSummary


class ThreadListResponse(CamelModel):
    threads: list[Thread]


class ThreadResponse(CamelModel):
    thread: Thread


class ErrorResponse(CamelModel):
    """Body of every non-2xx response."""

    error: str
    detail: str | None = None


ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid filter"},
    401: {"model": ErrorResponse, "description": "Missing or unknown session"},
    404: {"model": ErrorResponse, "description": "Thread not found"},
    503: {"model": ErrorResponse, "description": "Mail store unavailable, retry later"},
}
