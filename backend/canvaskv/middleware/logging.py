"""
CanvasKV Gateway: Request Logging Middleware
=============================================

What:  One access-log line per request, written after the response is built.
How:   Sits between the request ID and authorization layers, so the line
       carries the correlation ID and rejected (401) requests are logged too.

Severity follows the status class:
    5xx → ERROR   (error boundary, store failures)
    4xx → WARNING (401, 404, bulk validation)
    else → INFO

Logged: method, path, status, duration, client IP, request ID.
Not logged: bodies, the Authorization header, stored values. Canvas
documents can be large and bearer tokens are secrets.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from canvaskv.middleware.request_id import request_id_var

logger = logging.getLogger("canvaskv.access")

QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        rid = request_id_var.get("")
        client = request.client.host if request.client else "-"
        logger.log(
            level_for_status(response.status_code),
            "[%s] %s %s -> %d in %.1fms (client %s)",
            rid,
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            client,
            extra={
                "request_id": rid,
                "status": response.status_code,
                "duration_ms": round(elapsed_ms, 2),
            },
        )
        return response
