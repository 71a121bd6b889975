"""HTTP middleware and exception handlers."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from audiotour.config import Settings
from audiotour.middleware.error_handler import setup_error_handlers
from audiotour.middleware.logging import setup_logging
from audiotour.middleware.rate_limit import RateLimitMiddleware
from audiotour.middleware.request_context import REQUEST_ID_HEADER, RequestContextMiddleware

_ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
_ALLOWED_HEADERS = ["Authorization", "Content-Type", REQUEST_ID_HEADER]
_EXPOSED_HEADERS = [REQUEST_ID_HEADER, "X-RateLimit-Remaining", "X-RateLimit-Limit", "Retry-After"]


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Install logging, exception handlers and the middleware stack.

    Starlette runs middleware outermost-last-added, so the effective order is
    CORS -> request context -> rate limit -> routes. CORS sits outside the rate
    limiter so browsers can read 429 responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)

    app.add_middleware(
        RateLimitMiddleware,
        requests_per_window=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=_ALLOWED_METHODS,
        allow_headers=_ALLOWED_HEADERS,
        expose_headers=_EXPOSED_HEADERS,
    )
