"""Error Handlers — the transport tier of the error taxonomy.

Invariants:
    - UserApiError → its http_status with the structured error envelope
      (InvalidInput 400, UserNotFound 404, DuplicateEmail/DuplicateUserId 409)
    - RequestValidationError (malformed JSON, wrong types) → 400 with field details
    - Exception (catch-all, includes storage errors and timeouts) → 500, never
      leaks internal details, and still echoes X-Request-ID
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from userapi.api.middleware import REQUEST_ID_HEADER
from userapi.core.errors import ErrorCategory, ErrorSeverity, UserApiError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_api_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _register_api_error_handler(app: FastAPI) -> None:

    @app.exception_handler(UserApiError)
    async def api_error_handler(request: Request, exc: UserApiError):
        """Handle all service-level errors."""
        logger.warning(
            f"UserApiError: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "request_id": _request_id(request),
                "user_id": exc.context.user_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle body decoding and Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}",
            extra={"error_code": "VALIDATION_ERROR", "request_id": _request_id(request)},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        request_id = _request_id(request)
        logger.error(
            f"Unhandled exception on {request.url.path}: {type(exc).__name__}",
            exc_info=exc,
            extra={"error_code": "INTERNAL_ERROR", "request_id": request_id},
        )
        # rendered outside RequestContextMiddleware, so the id is echoed here
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            headers={REQUEST_ID_HEADER: request_id} if request_id else None,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "Internal server error",
                    "category": ErrorCategory.INTERNAL.value,
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response (messages only, no input echo)."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request body",
            "category": ErrorCategory.VALIDATION.value,
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
