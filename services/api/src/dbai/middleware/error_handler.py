"""Global error handlers mapping engine errors to JSON responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from dbai.errors import (
    CompletionValidationError,
    NoCandidatesError,
    NotConfiguredError,
    TopicInUseError,
    TopicNotFoundError,
    TopicValidationError,
    WriteConflictError,
)

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Handle HTTP exceptions with consistent JSON format."""
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        """Handle validation errors with consistent JSON format."""
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    @app.exception_handler(TopicValidationError)
    @app.exception_handler(CompletionValidationError)
    async def field_error_handler(_request: Request, exc: TopicValidationError | CompletionValidationError) -> JSONResponse:
        """Write-time validation failures name the offending field."""
        return JSONResponse(
            status_code=422,
            content={"detail": exc.reason, "field": exc.field},
        )

    @app.exception_handler(TopicNotFoundError)
    async def not_found_handler(_request: Request, _exc: TopicNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": "Topic not found"})

    @app.exception_handler(TopicInUseError)
    async def in_use_handler(_request: Request, _exc: TopicInUseError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": "Topic has been shown; disable it instead"})

    @app.exception_handler(NoCandidatesError)
    async def no_candidates_handler(request: Request, exc: NoCandidatesError) -> JSONResponse:
        logger.error("rotation_pool_empty", path=request.url.path)
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(NotConfiguredError)
    async def not_configured_handler(request: Request, exc: NotConfiguredError) -> JSONResponse:
        logger.error("store_not_configured", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=503, content={"detail": "Service temporarily unavailable"})

    @app.exception_handler(WriteConflictError)
    async def write_conflict_handler(request: Request, exc: WriteConflictError) -> JSONResponse:
        logger.error("write_conflict", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=409, content={"detail": "Conflicting write, retry later"})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions, always as JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )
