"""
CanvasKV Gateway: In-Memory Store
==================================

What:  Process-local KVStore backed by a dict.
Who:   Default backend for development; used by the test suite.

Values live only as long as the process. Every coroutine completes without
awaiting anything, so no lock is needed inside a single event loop.
"""

from typing import Any, Dict, List, Optional

from canvaskv.stores.base import KVStore


class MemoryKVStore(KVStore):
    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def list_keys(self, prefix: str = "") -> List[Dict[str, Any]]:
        return [{"name": key} for key in sorted(self._data) if key.startswith(prefix)]

    async def health_check(self) -> bool:
        return True

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
