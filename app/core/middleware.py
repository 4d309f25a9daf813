"""
HTTP middleware for the application.
Assigns a correlation id to every request and logs each request with timing.
"""

import time
import structlog
from typing import Callable
from fastapi import FastAPI, Request, Response
from asgi_correlation_id import CorrelationIdMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every request once it completes, or once it fails."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                process_time_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    """Install request logging and correlation ids.

    Starlette runs middleware in reverse order of addition, so the
    correlation id middleware is added last to wrap the logger.
    """
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
