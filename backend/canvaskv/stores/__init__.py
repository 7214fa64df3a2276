"""
CanvasKV Gateway: Key-Value Store Adapters
===========================================

What:  Implementations of the KVStore contract plus the factory that picks
       one from configuration.

Inventory:
    - base.py:        KVStore abstract interface
    - memory.py:      MemoryKVStore (dict, development and tests)
    - sql.py:         SqlKVStore (kv_entries table, async SQLAlchemy)
    - cloudflare.py:  CloudflareKVStore (Workers KV REST API, httpx)
"""

from canvaskv.config import Settings
from canvaskv.stores.base import KVStore
from canvaskv.stores.cloudflare import CloudflareKVStore
from canvaskv.stores.memory import MemoryKVStore
from canvaskv.stores.sql import SqlKVStore


def build_store(settings: Settings) -> KVStore:
    """Instantiate the adapter named by KV_BACKEND."""
    if settings.kv_backend == "sql":
        from canvaskv.database import build_engine
        return SqlKVStore(build_engine(settings))

    if settings.kv_backend == "cloudflare":
        return CloudflareKVStore(
            account_id=settings.cloudflare_account_id,
            namespace_id=settings.cloudflare_namespace_id,
            api_token=settings.cloudflare_api_token,
            api_base=settings.cloudflare_api_base,
        )

    return MemoryKVStore()


__all__ = [
    "KVStore",
    "MemoryKVStore",
    "SqlKVStore",
    "CloudflareKVStore",
    "build_store",
]
