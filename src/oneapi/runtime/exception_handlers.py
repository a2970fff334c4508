"""
Exception handlers for OneAPI applications.

Maps OneAPI errors onto HTTP statuses and renders every failure with the
JSON:API error envelope:
- NotFoundError: 404
- ValidationError: 422, one error object per violation
- RequestValidationError (bad id, body or query): 400
- HTTPException: its own status
- StorageError and anything unexpected: 500, logged with traceback
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from oneapi.errors import NotFoundError, StorageError, ValidationError
from oneapi.runtime.formatter import error_document
from oneapi.runtime.logging import get_api_logger, log_with_context

logger = get_api_logger()


def _error_response(
    status_code: int, details: str | list[str], headers: dict[str, str] | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_document(status_code, details),
        headers=headers,
    )


def _describe_request_error(err: dict) -> str:
    loc = [str(part) for part in err.get("loc", ()) if part != "body"]
    where = ".".join(loc)
    return f"{where}: {err.get('msg', 'invalid value')}" if where else err.get("msg", "invalid")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the standard exception handlers on a FastAPI application.

    Args:
        app: FastAPI application instance
    """

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        return _error_response(404, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        """Convert aggregated field errors to 422 with one entry per violation."""
        log_with_context(
            logger,
            logging.DEBUG,
            f"Rejected {request.method} {request.url.path}",
            entity=exc.entity,
            errors=[e.message for e in exc.errors],
        )
        return _error_response(422, [e.message for e in exc.errors])

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed ids, bodies and query parameters are client errors (400)."""
        details = [_describe_request_error(err) for err in exc.errors()]
        return _error_response(400, details or ["invalid request"])

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _error_response(exc.status_code, detail, headers=exc.headers)

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        logger.error(
            f"Storage failure on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return _error_response(500, "internal storage error")

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            f"Unhandled error on {request.method} {request.url.path}: {exc}",
            exc_info=exc,
        )
        return _error_response(500, "Internal Server Error")
