"""
CanvasKV Gateway: Error Boundary Middleware
============================================

What:  Single failure boundary around all handler execution.
How:   Any exception escaping the router (i.e. not one of the GatewayError
       types already rendered by the exception handlers) is logged with its
       traceback and converted into `500 <error message>` as plain text.
When:  Innermost middleware, so the response still passes back through the
       logging, request ID and CORS layers.

The message is returned unsanitized: clients see the raw error text, e.g. a
JSON decode error for a malformed body.
"""

import logging

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from canvaskv.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


class ErrorBoundaryMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                "[%s] Unexpected error on %s %s: %s",
                request_id_var.get(""),
                request.method,
                request.url.path,
                str(exc),
                exc_info=True,
            )
            return PlainTextResponse(str(exc) or "Server Error", status_code=500)
