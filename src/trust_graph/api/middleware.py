"""API middleware: error handling and request timing.

Registers exception handlers and a request timing middleware
on the FastAPI app.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog
from fastapi.responses import ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from trust_graph.domain.errors import NetworkError, ValidationError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request, Response

logger = structlog.get_logger(__name__)

# NetworkError.kind -> HTTP status
STATUS_BY_KIND: dict[str, int] = {
    "not_found": 404,
    "conflict": 409,
    "invalid_state": 409,
    "validation": 422,
}


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def _network_error_handler(
    request: Request,
    exc: NetworkError,
) -> ORJSONResponse:
    """Convert a domain NetworkError to a structured 4xx response."""
    detail: dict[str, Any] = {"kind": exc.kind, "message": exc.message}
    if isinstance(exc, ValidationError):
        detail["field"] = exc.field
    status_code = STATUS_BY_KIND.get(exc.kind, 400)
    logger.info(
        "request_rejected",
        path=request.url.path,
        kind=exc.kind,
        status_code=status_code,
    )
    return ORJSONResponse(status_code=status_code, content={"detail": detail})


async def _generic_error_handler(
    _request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Convert unhandled exceptions to a structured 500 response."""
    logger.error("unhandled_exception", exc_info=exc)
    return ORJSONResponse(
        status_code=500,
        content={
            "detail": {
                "kind": "internal",
                "message": "Internal server error",
                "type": type(exc).__name__,
            }
        },
    )


# ---------------------------------------------------------------------------
# Request timing middleware
# ---------------------------------------------------------------------------


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Adds an X-Request-Time-Ms header to every response."""

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        start_time = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = (time.monotonic() - start_time) * 1000
        response.headers["X-Request-Time-Ms"] = f"{elapsed_ms:.1f}"
        return response


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


def register_middleware(app: FastAPI) -> None:
    """Attach all middleware and exception handlers to the app."""
    app.add_exception_handler(NetworkError, _network_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_error_handler)
    app.add_middleware(RequestTimingMiddleware)
