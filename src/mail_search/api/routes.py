"""Mail search and thread listing API.

The owner is always resolved from the session token; no endpoint accepts an
owner id from the client.
"""

from __future__ import annotations

import time
from typing import Literal

from fastapi import APIRouter, Depends, Header, Query, Request

from mail_search.api.models import (
    ERROR_RESPONSES,
    AnalyticsResponse,
    SearchResponse,
    SuggestionsResponse,
    ThreadListResponse,
    ThreadResponse,
)
from mail_search.models import Folder
from mail_search.search import build_filter
from mail_search.service import MailSearchService, require_owner

router = APIRouter(prefix="/api/mail", tags=["mail"], responses=ERROR_RESPONSES)


def get_service(request: Request) -> MailSearchService:
    return request.app.state.service


def current_owner(request: Request, authorization: str | None = Header(default=None)) -> str:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[len("bearer ") :].strip()
    return require_owner(request.app.state.resolver.resolve(token))


@router.get("/search", response_model=None)
def search(
    q: str = "",
    type: Literal["search", "suggestions", "analytics"] = "search",
    folder: str | None = None,
    sender: str | None = None,
    has_attachments: str | None = Query(default=None, alias="hasAttachments"),
    sensitivity: str | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    owner: str = Depends(current_owner),
    service: MailSearchService = Depends(get_service),
) -> SearchResponse | SuggestionsResponse | AnalyticsResponse:
    if type == "suggestions":
        return SuggestionsResponse(suggestions=service.suggest(owner, q))

    if type == "analytics":
        return AnalyticsResponse(analytics=service.analytics(owner))

    filters = build_filter(
        folder=folder,
        sender=sender,
        has_attachments=has_attachments,
        sensitivity=sensitivity,
        start_date=start_date,
        end_date=end_date,
    )
    if not q.strip():
        return SearchResponse(results=[], total=0)

    results = service.search(owner, q, filters)
    return SearchResponse(
        results=results,
        total=len(results),
        query=q,
        filters=filters,
        search_time=int(time.time() * 1000),
    )


@router.get("/threads", response_model=ThreadListResponse)
def list_threads(
    folder: str = Folder.INBOX.value,
    q: str | None = None,
    owner: str = Depends(current_owner),
    service: MailSearchService = Depends(get_service),
) -> ThreadListResponse:
    if q:
        return ThreadListResponse(threads=service.find_threads(owner, q))
    selected = build_filter(folder=folder).folder or Folder.INBOX
    return ThreadListResponse(threads=service.list_threads(owner, selected))


@router.get("/threads/{thread_id}", response_model=ThreadResponse)
def get_thread(
    thread_id: str,
    owner: str = Depends(current_owner),
    service: MailSearchService = Depends(get_service),
) -> ThreadResponse:
    return ThreadResponse(thread=service.get_thread(owner, thread_id))
