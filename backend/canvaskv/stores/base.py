"""
CanvasKV Gateway: Abstract Key-Value Store Interface
=====================================================

What:  Abstract base class defining the contract every store adapter honors.
How:   Concrete adapters (memory, sql, cloudflare) inherit from KVStore and
       implement get/put/delete/list_keys. Services only talk to this interface.
Who:   Called by KVService and CanvasService.

Consistency:
    The interface promises nothing beyond single-key operations. There is no
    cross-key transaction and no compare-and-set; concurrent writers to the
    same key resolve as last-write-wins.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class KVStore(ABC):
    """
    Contract:
        - get() returns the raw string value, or None when the key is absent
        - put() overwrites unconditionally
        - delete() of an absent key is not an error
        - list_keys() returns key descriptors sorted by name, each at least
          {"name": <key>}; adapters may add fields (expiration, metadata)
        - Failures of the backing store raise (StoreError or the client's own
          exception); they are never swallowed
    """

    backend_name: str = "abstract"

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        ...

    async def get_json(self, key: str) -> Optional[Any]:
        """
        Fetch a key and parse it as JSON.

        Returns None when the key is absent. A stored value that is not valid
        JSON raises json.JSONDecodeError.
        """
        raw = await self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    @abstractmethod
    async def list_keys(self, prefix: str = "") -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Lightweight reachability probe for GET /health.

        Returns: True if the store answered, False otherwise. Never raises.
        """
        ...

    async def close(self) -> None:
        """Release connections/clients. Default: nothing to release."""
        return None
