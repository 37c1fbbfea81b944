"""Logging middleware for request tracking."""
import time
import uuid
from typing import Callable, Iterable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Bind a request id to every log line of a request and log its outcome.

    An incoming ``X-Request-ID`` (set by the reverse proxy) is reused so the
    proxy's access log and ours can be joined. Paths in ``quiet_paths`` (load
    balancer health probes) are not logged.
    """

    def __init__(self, app: ASGIApp, quiet_paths: Iterable[str] = ("/health",)):
        super().__init__(app)
        self.quiet_paths = frozenset(quiet_paths)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_host=request.client.host if request.client else None,
        )

        quiet = request.url.path in self.quiet_paths
        start_time = time.time()

        if not quiet:
            # Query strings only; bodies can hold phone numbers and prayer requests
            logger.info(
                "request_started",
                query_params=str(request.query_params) if request.query_params else None,
            )

        try:
            response = await call_next(request)
        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            raise

        duration = time.time() - start_time
        response.headers[REQUEST_ID_HEADER] = request_id

        if not quiet:
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )

        return response
