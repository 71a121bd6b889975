"""Per-request logging context and access log."""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-Id"

# Probes hit these every few seconds; keep them out of the access log
_UNLOGGED_PATHS = frozenset({"/health", "/ready"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind request_id, method and path into the structlog context for the
    duration of the request, echo the request id back, and log one
    ``request_completed`` event per request.

    A client-supplied ``X-Request-Id`` is reused so ids can be correlated
    across services; otherwise a UUID4 is generated.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        started = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - started) * 1000, 2)

        response.headers[REQUEST_ID_HEADER] = request_id
        if request.url.path not in _UNLOGGED_PATHS:
            logger.info("request_completed", status_code=response.status_code, duration_ms=duration_ms)
        return response
