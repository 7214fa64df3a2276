"""
CanvasKV Gateway: Request Context
==================================

What:  The per-application object holding the store handle and settings.
How:   create_app() stores one GatewayContext on `app.state.context`; routes
       receive the store through the `get_store` dependency.
"""

from dataclasses import dataclass

from fastapi import Request

from canvaskv.config import Settings
from canvaskv.stores.base import KVStore


@dataclass(frozen=True)
class GatewayContext:
    settings: Settings
    store: KVStore


def get_context(request: Request) -> GatewayContext:
    return request.app.state.context


def get_store(request: Request) -> KVStore:
    """FastAPI dependency: the application's KV store."""
    return get_context(request).store
