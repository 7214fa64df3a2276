"""
CanvasKV Gateway: Application Package Initializer
==================================================

What: Marks the `canvaskv` directory as a Python package.
Who:  Imported by uvicorn (`canvaskv.main:app`), Alembic and pytest.

Architecture Note:
    The gateway is a thin layered service:

    ┌─────────────────────────────────────┐
    │     Middleware (CORS, Auth, ...)    │  ← cross-cutting, every request
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← key namespacing, validation, fan-out
    ├─────────────────────────────────────┤
    │       Stores (KV collaborators)     │  ← memory / SQL / Cloudflare KV
    └─────────────────────────────────────┘

    Services receive the store per call, so each layer can be tested on its own
    with an in-memory store.
"""

__version__ = "1.0.0"
