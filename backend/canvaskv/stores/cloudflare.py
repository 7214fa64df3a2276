"""
CanvasKV Gateway: Cloudflare Workers KV Store
==============================================

What:  KVStore adapter for a Workers KV namespace via the Cloudflare REST API.
How:   One shared httpx.AsyncClient per store (connection pooling), bearer
       authenticated with a Cloudflare API token.
Who:   Selected with KV_BACKEND=cloudflare.

Endpoints used (relative to
{api_base}/accounts/{account_id}/storage/kv/namespaces/{namespace_id}):
    GET    /values/{key}    → raw value, 404 when absent
    PUT    /values/{key}    → write raw value
    DELETE /values/{key}    → remove key
    GET    /keys?prefix=... → {"result": [{"name": ...}, ...], "result_info": {...}}

Keys are percent-encoded as a single path segment. Only the first page of
/keys is read (up to 1000 keys); the gateway does not paginate.
"""

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from canvaskv.exceptions import StoreError
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.cloudflare.com/client/v4"


class CloudflareKVStore(KVStore):
    backend_name = "cloudflare"

    def __init__(
        self,
        account_id: str,
        namespace_id: str,
        api_token: str,
        api_base: str = DEFAULT_API_BASE,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            account_id:    Cloudflare account identifier
            namespace_id:  Workers KV namespace identifier
            api_token:     API token with Workers KV Storage edit permission
            api_base:      API root, overridable for proxies
            transport:     Custom httpx transport (tests pass httpx.MockTransport)
        """
        base_url = (
            f"{api_base.rstrip('/')}/accounts/{account_id}"
            f"/storage/kv/namespaces/{namespace_id}"
        )
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {api_token}"},
            transport=transport,
        )

    @staticmethod
    def _value_path(key: str) -> str:
        return f"/values/{quote(key, safe='')}"

    @staticmethod
    def _raise_for_status(response: httpx.Response, operation: str, key: str = "") -> None:
        """Translate a non-2xx Cloudflare response into StoreError."""
        if response.is_success:
            return

        detail = response.reason_phrase
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            errors = body.get("errors") or []
            if isinstance(errors, list) and errors:
                detail = "; ".join(
                    str(err.get("message", err)) if isinstance(err, dict) else str(err)
                    for err in errors
                )

        logger.error(
            "Cloudflare KV %s failed: status=%d key=%s detail=%s",
            operation, response.status_code, key, detail,
        )
        raise StoreError(
            message=f"KV {operation} failed with status {response.status_code}: {detail}",
            context={"status": response.status_code, "key": key, "operation": operation},
        )

    async def get(self, key: str) -> Optional[str]:
        response = await self._client.get(self._value_path(key))
        if response.status_code == 404:
            return None
        self._raise_for_status(response, "get", key)
        return response.text

    async def put(self, key: str, value: str) -> None:
        response = await self._client.put(
            self._value_path(key),
            content=value.encode("utf-8"),
            headers={"Content-Type": "text/plain; charset=utf-8"},
        )
        self._raise_for_status(response, "put", key)

    async def delete(self, key: str) -> None:
        response = await self._client.delete(self._value_path(key))
        if response.status_code == 404:
            return
        self._raise_for_status(response, "delete", key)

    async def list_keys(self, prefix: str = "") -> List[Dict[str, Any]]:
        params = {"prefix": prefix} if prefix else {}
        response = await self._client.get("/keys", params=params)
        self._raise_for_status(response, "list", prefix)
        return list(response.json().get("result") or [])

    async def health_check(self) -> bool:
        try:
            response = await self._client.get("/keys", params={"limit": 10})
            return response.is_success
        except httpx.HTTPError as e:
            logger.warning("Cloudflare KV health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        await self._client.aclose()
