"""
CanvasKV Gateway: CORS Middleware
==================================

What:  Answers OPTIONS requests and stamps CORS headers on every other response.
How:   Outermost middleware. OPTIONS never reaches authorization or routing;
       all other responses (2xx, 401, 404, 500) get the CORS header set on the
       way out.
Who:   Browser clients of the drawing application on any origin.

OPTIONS handling:
    Origin + Access-Control-Request-Method + Access-Control-Request-Headers
    all present   → 200, CORS header set, empty body (CORS preflight)
    otherwise     → 200, only `Allow: <methods>`

Headers are added unconditionally, with or without an Origin request header.
"""

import logging
from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

ALLOWED_METHODS = "GET, POST, PUT, DELETE, PATCH, OPTIONS"
ALLOWED_HEADERS = "Content-Type, Authorization"

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ALLOWED_METHODS,
    "Access-Control-Allow-Headers": ALLOWED_HEADERS,
}

PREFLIGHT_REQUEST_HEADERS = (
    "Origin",
    "Access-Control-Request-Method",
    "Access-Control-Request-Headers",
)


def is_preflight(request: Request) -> bool:
    return all(request.headers.get(name) is not None for name in PREFLIGHT_REQUEST_HEADERS)


def apply_cors_headers(response: Response) -> Response:
    for name, value in CORS_HEADERS.items():
        response.headers[name] = value
    return response


class CORSMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            if is_preflight(request):
                return Response(status_code=200, headers=CORS_HEADERS)
            return Response(status_code=200, headers={"Allow": ALLOWED_METHODS})

        response = await call_next(request)
        return apply_cors_headers(response)
