"""FastAPI application factory."""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mail_search import __version__
from mail_search.api.models import ErrorResponse
from mail_search.api.routes import router as mail_router
from mail_search.config import Settings, get_settings
from mail_search.exceptions import (
    AuthenticationRequiredError,
    InvalidFilterError,
    StorageUnavailableError,
    ThreadNotFoundError,
)
from mail_search.service import MailSearchService, SessionResolver, StaticSessionResolver
from mail_search.store import ThreadRepository, build_engine
from mail_search.utils import configure_logging

logger = structlog.get_logger()

STORAGE_RETRY_AFTER_SECONDS = 5


def _error_response(
    status_code: int,
    error: str,
    detail: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def create_app(
    settings: Settings | None = None,
    service: MailSearchService | None = None,
    resolver: SessionResolver | None = None,
) -> FastAPI:
    """Build the API.

    Args:
        settings: Application settings. If None, uses cached settings.
        service: Search service. If None, one is built on ``settings.database_url``.
        resolver: Session resolver. If None, uses ``settings.session_tokens``.
    """

    settings = settings or get_settings()
    configure_logging(settings)

    if service is None:
        service = MailSearchService.from_settings(
            ThreadRepository(build_engine(settings)), settings
        )

    app = FastAPI(title="Mail Search", version=__version__, debug=settings.debug)
    app.state.service = service
    app.state.resolver = resolver or StaticSessionResolver.from_settings(settings)
    app.include_router(mail_router)

    @app.on_event("startup")
    def _startup() -> None:
        service.repository.initialize()

    @app.exception_handler(AuthenticationRequiredError)
    def _unauthorized(request: Request, exc: AuthenticationRequiredError) -> JSONResponse:
        return _error_response(401, "Unauthorized")

    @app.exception_handler(ThreadNotFoundError)
    def _not_found(request: Request, exc: ThreadNotFoundError) -> JSONResponse:
        return _error_response(404, "Thread not found")

    @app.exception_handler(InvalidFilterError)
    def _invalid_filter(request: Request, exc: InvalidFilterError) -> JSONResponse:
        return _error_response(400, "Invalid filter", str(exc))

    @app.exception_handler(StorageUnavailableError)
    def _storage_unavailable(request: Request, exc: StorageUnavailableError) -> JSONResponse:
        logger.error("request_storage_unavailable", path=request.url.path, error=str(exc))
        return _error_response(
            503,
            "Search failed",
            "Mail store unavailable, retry later",
            headers={"Retry-After": str(STORAGE_RETRY_AFTER_SECONDS)},
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    logger.info("mail_search_api_created", version=__version__, debug=settings.debug)
    return app
