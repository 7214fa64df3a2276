"""
CanvasKV Gateway: Custom Exception Hierarchy
=============================================

What:  Application-specific exceptions for the gateway's error taxonomy.
How:   Each exception carries a message, an optional context dict and the HTTP
       status it maps to. Handlers registered in main.py render the message
       as a plain-text body with that status.
Who:   Raised by services and store adapters; caught by global handlers.

Exception Hierarchy:
    GatewayError (base)       → 500
    ├── ValidationError       → 400 Bad Request (missing field, wrong body shape)
    ├── UnauthorizedError     → 401 Unauthorized
    ├── NotFoundError         → 404 Not Found
    └── StoreError            → 500 (key-value store rejected a request)

Anything outside this hierarchy is an unexpected error and is handled by the
error boundary middleware instead.
"""

from typing import Any, Dict, Optional


class GatewayError(Exception):
    """
    Base exception for all gateway errors.

    Attributes:
        message:      Client-facing error text (returned verbatim as the body)
        context:      Additional debug info (logged, not returned)
        status_code:  HTTP status the global handler responds with
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "Server Error",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(GatewayError):
    """
    Raised when client input fails a presence or shape check.

    When:    Non-array body for /bulk, bulk item without key/value, empty key,
             rename without a name.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Bad Request",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthorizedError(GatewayError):
    """Missing, malformed or mismatched bearer credential. HTTP 401."""

    status_code = 401

    def __init__(
        self,
        message: str = "Unauthorized",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(GatewayError):
    """
    Raised when a requested key or canvas does not exist in the store.

    The store returns None for missing keys; services convert that into this
    exception so routes stay free of status-code logic.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Not Found",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class StoreError(GatewayError):
    """
    Raised by store adapters when the backing store rejects a request.

    When:    Cloudflare API answered with a non-success status, for example.
    HTTP:    500 Internal Server Error, message exposed as-is.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "Key-value store request failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
