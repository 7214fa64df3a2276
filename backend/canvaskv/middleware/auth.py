"""
CanvasKV Gateway: Authorization Middleware
===========================================

What:  Bearer-token gate in front of every route.
How:   Compares the token from `Authorization: Bearer <token>` with the
       configured secret. Anything else is answered with 401 before routing.
When:  After CORS (so preflights are never rejected) and before the error
       boundary and handlers.

Fails closed:
    - header missing                       → 401
    - scheme other than the literal Bearer → 401
    - token differs from API_TOKEN         → 401
    - API_TOKEN not configured             → 401 for everyone

There is no session, expiry or per-user identity; one static shared secret.
"""

import hmac
import logging
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp

from canvaskv.exceptions import UnauthorizedError
from canvaskv.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def is_authorized(authorization: Optional[str], api_token: str) -> bool:
    """
    Check an Authorization header value against the configured secret.

    The comparison is exact and constant-time (hmac.compare_digest).
    """
    if not api_token:
        return False
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return False
    token = authorization[len(BEARER_PREFIX):]
    return hmac.compare_digest(token.encode("utf-8"), api_token.encode("utf-8"))


class AuthorizationMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, api_token: str):
        super().__init__(app)
        self.api_token = api_token

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not is_authorized(request.headers.get("Authorization"), self.api_token):
            error = UnauthorizedError()
            logger.warning(
                "[%s] Rejected %s %s: %s",
                request_id_var.get(""), request.method, request.url.path, error.message,
            )
            return PlainTextResponse(error.message, status_code=error.status_code)

        return await call_next(request)
