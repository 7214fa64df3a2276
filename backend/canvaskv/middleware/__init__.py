"""
CanvasKV Gateway: Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [CORS] → [Request ID] → [Logging] → [Authorization] → [Error Boundary] → Router

    1. CORS: answers OPTIONS itself; adds CORS headers to every other response
    2. Request ID: correlation ID for logs, echoed as X-Request-ID
    3. Logging: access log line including 401s and 500s
    4. Authorization: bearer-token gate, 401 before any handler runs
    5. Error Boundary: unexpected exceptions → 500 with the error message

    Responses travel back out through the same layers in reverse, so even a
    500 from the error boundary carries the CORS headers.
"""
