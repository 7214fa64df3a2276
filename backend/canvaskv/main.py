"""
CanvasKV Gateway: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() wires settings, store, middleware,
       exception handlers and the enabled route sets together.
Who:   uvicorn (`uvicorn canvaskv.main:app`), the `canvaskv-gateway` script,
       and the test suite (which builds apps with its own settings and store).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  CORS → Request ID → Logging → Auth → Error Boundary│
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐ │
    │  │ kv: /values, │ │ canvas:      │ │ GET /health │ │
    │  │ /keys, /bulk │ │ /api/canvases│ │             │ │
    │  └──────────────┘ └──────────────┘ └─────────────┘ │
    │                                                     │
    │  Exception Handlers (plain text bodies):            │
    │  GatewayError → its status │ 404/405 → 404          │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, validate configuration, optionally create the
              SQL schema.
    Shutdown: close the store (HTTP client / connection pool).
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from canvaskv import __version__
from canvaskv.config import Settings, settings as default_settings
from canvaskv.context import GatewayContext
from canvaskv.exceptions import GatewayError
from canvaskv.middleware.auth import AuthorizationMiddleware
from canvaskv.middleware.cors import CORSMiddleware
from canvaskv.middleware.error_boundary import ErrorBoundaryMiddleware
from canvaskv.middleware.logging import RequestLoggingMiddleware
from canvaskv.middleware.request_id import RequestIDMiddleware, request_id_var
from canvaskv.routes import canvases, health, kv
from canvaskv.stores import KVStore, SqlKVStore, build_store

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    context: GatewayContext = app.state.context
    config = context.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("CanvasKV Gateway %s starting up...", __version__)

    try:
        config.validate_required_for_production()
    except ValueError as e:
        # Not fatal: a misconfigured gateway still answers, with 401s
        logger.error("Configuration error: %s", str(e))

    if config.kv_auto_create_schema and isinstance(context.store, SqlKVStore):
        await context.store.create_schema()

    logger.info("Store backend: %s", context.store.backend_name)
    logger.info("Enabled APIs: %s", ", ".join(config.enabled_api_list) or "none")
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("CanvasKV Gateway shutting down...")
    await context.store.close()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to plain-text responses.

    Handler table:
        GatewayError (and subclasses) → exc.status_code, body exc.message
        Starlette 404 / 405           → 404 "Not Found"
        other Starlette HTTPException → its status, body detail

    Exceptions outside these types propagate to ErrorBoundaryMiddleware.
    """

    @app.exception_handler(GatewayError)
    async def handle_gateway_error(request: Request, exc: GatewayError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.info("[%s] %s %s -> %d: %s", rid, request.method, request.url.path,
                        exc.status_code, exc.message)
        return PlainTextResponse(exc.message, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        # Unknown method on a known path is reported like an unknown path
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[KVStore] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; defaults to the environment-loaded settings.
        store:    KV store to serve; defaults to build_store(settings).

    Returns:
        A FastAPI instance whose `state.context` holds the settings and store.
    """
    settings = settings or default_settings
    store = store if store is not None else build_store(settings)

    app = FastAPI(
        title="CanvasKV Gateway",
        description=(
            "Authorized HTTP gateway over a key-value store: canvas document CRUD "
            "and a bulk key/value API."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url=None,
        openapi_url="/openapi.json",
        redirect_slashes=False,
        lifespan=lifespan,
    )
    app.state.context = GatewayContext(settings=settings, store=store)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: execution order is
    # CORS → RequestID → Logging → Authorization → ErrorBoundary
    app.add_middleware(ErrorBoundaryMiddleware)
    app.add_middleware(AuthorizationMiddleware, api_token=settings.api_token)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(CORSMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    enabled = settings.enabled_api_list
    if "kv" in enabled:
        app.include_router(kv.router)
    if "canvas" in enabled:
        app.include_router(canvases.router)
    app.include_router(health.router)

    return app


# uvicorn expects `canvaskv.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve `app` with uvicorn."""
    import uvicorn

    uvicorn.run(
        "canvaskv.main:app",
        host=default_settings.backend_host,
        port=default_settings.backend_port,
        log_level=default_settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
