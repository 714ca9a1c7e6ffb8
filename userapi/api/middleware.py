"""HTTP Middleware — request id, access logging and request timeout.

Invariants:
    - Every response carries X-Request-ID (incoming value honoured, else generated)
    - request.state.request_id is set before any route or error handler runs
    - A request exceeding the timeout gets 504 with the standard error envelope
    - Access log lines never include request bodies

Registration order (outermost first): CORS → RequestContext → RequestTimeout.
"""

import asyncio
import contextlib
import logging
import time
import uuid

from fastapi import status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from userapi.core.errors import ErrorCategory, ErrorSeverity

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log one line when it completes."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()
        extra = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else None,
        }
        try:
            response = await call_next(request)
        except Exception:
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.error(f"{request.method} {request.url.path} failed", extra=extra)
            raise

        extra["status_code"] = response.status_code
        extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            f"{request.method} {request.url.path} {response.status_code}",
            extra=extra,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class RequestTimeoutMiddleware(BaseHTTPMiddleware):
    """Fail requests whose handler has not produced a response within `timeout` seconds."""

    def __init__(self, app, timeout: float):
        super().__init__(app)
        self.timeout = timeout

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        # a TimeoutError raised inside the handler stays a 500, only our own deadline is a 504
        task = asyncio.ensure_future(call_next(request))
        done, _ = await asyncio.wait({task}, timeout=self.timeout)
        if task in done:
            return task.result()

        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task
        logger.warning(
            f"Request timed out after {self.timeout}s",
            extra={
                "request_id": getattr(request.state, "request_id", None),
                "path": request.url.path,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={
                "error": {
                    "code": "REQUEST_TIMEOUT",
                    "message": "Request timed out",
                    "category": ErrorCategory.TIMEOUT.value,
                    "severity": ErrorSeverity.ERROR.value,
                },
            },
        )
