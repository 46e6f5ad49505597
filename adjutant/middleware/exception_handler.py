"""Global exception handlers for the FastAPI application.

Every error leaves the API as ``{"error", "detail", "request_id"}``.
Stack traces are logged server-side and never sent to the client.
"""

import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from adjutant.errors import AdjutantError, format_error_response

logger = logging.getLogger(__name__)


def _get_request_id(request: Request) -> str:
    """Request id from ``RequestIDMiddleware``, or a fresh UUID-4 without it."""
    return getattr(request.state, "request_id", None) or str(uuid.uuid4())


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for any unhandled exception -- returns 500."""
    request_id = _get_request_id(request)
    logger.error(
        "Unhandled exception on %s %s [request_id=%s]",
        request.method, request.url.path, request_id,
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=format_error_response(
            error="Internal Server Error",
            detail="Internal server error",
            request_id=request_id,
        ),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = _get_request_id(request)
    logger.warning(
        "HTTP %s on %s %s [request_id=%s]: %s",
        exc.status_code, request.method, request.url.path, request_id, exc.detail,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            error=str(exc.detail) if exc.detail else "Error",
            detail=str(exc.detail) if exc.detail else None,
            request_id=request_id,
        ),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Pydantic / request-validation errors -- returns 422."""
    request_id = _get_request_id(request)
    errors = exc.errors()
    logger.warning(
        "Validation error on %s %s [request_id=%s]: %d error(s)",
        request.method, request.url.path, request_id, len(errors),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=format_error_response(
            error="Validation failed",
            detail=[{k: v for k, v in e.items() if k != "ctx"} for e in errors],
            request_id=request_id,
        ),
    )


async def adjutant_error_handler(request: Request, exc: AdjutantError) -> JSONResponse:
    """Domain errors -- status code comes from the exception."""
    request_id = _get_request_id(request)
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "%s on %s %s [request_id=%s]: %s",
        type(exc).__name__, request.method, request.url.path, request_id, exc,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=format_error_response(
            error=type(exc).__name__,
            detail=str(exc),
            request_id=request_id,
        ),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all global exception handlers on *app*."""
    app.add_exception_handler(RequestValidationError, validation_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(AdjutantError, adjutant_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, global_exception_handler)
