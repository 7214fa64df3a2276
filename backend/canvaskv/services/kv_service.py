"""
CanvasKV Gateway: Generic KV Service
=====================================

What:  Business logic behind the generic key/value API (/values, /keys, /bulk).
How:   Thin wrappers over the KVStore plus batch validation and fan-out.
Who:   Called by routes/kv.py.

Bulk write policy:
    A batch is validated completely before the first store call. One bad item
    rejects the whole request with ValidationError and nothing is written.
    Once validation passes, writes fan out concurrently; if one of them fails
    the request fails and writes that already completed stay in place.
"""

import asyncio
import json
import logging
from typing import Any, List

from canvaskv.exceptions import NotFoundError, ValidationError
from canvaskv.schemas.kv import BulkPutItem, KeyListResponse, ResultInfo
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)

BULK_PUT_NOT_ARRAY = "Request body must be an array"
BULK_PUT_BAD_ITEM = "Each item in bulk put must have a key and value"
BULK_DELETE_NOT_ARRAY = "Request body must be an array of keys"


class KVService:
    """
    Responsibilities:
        - get_value():   raw value passthrough with empty-key and not-found handling
        - list_keys():   prefix listing wrapped in the cloud-API envelope
        - bulk_put():    validate-then-write batch
        - bulk_delete(): validate-then-delete batch
    """

    async def get_value(self, store: KVStore, key: str) -> str:
        if not key:
            raise ValidationError(message="Key not specified", field="key")

        value = await store.get(key)
        if value is None:
            raise NotFoundError(message="Not Found", resource_id=key)
        return value

    async def list_keys(self, store: KVStore, prefix: str = "") -> KeyListResponse:
        keys = await store.list_keys(prefix)
        return KeyListResponse(result=keys, result_info=ResultInfo(count=len(keys)))

    def validate_bulk_put(self, payload: Any) -> List[BulkPutItem]:
        """
        Check every item of a PUT /bulk body before anything is written.

        An item needs a non-empty string `key` and a `value` that is present and
        not null. String values are stored as-is; any other JSON value is stored
        serialized.

        Raises:
            ValidationError: body is not an array, or any item is malformed.
                The offending index is recorded in the error context.
        """
        if not isinstance(payload, list):
            raise ValidationError(message=BULK_PUT_NOT_ARRAY)

        items: List[BulkPutItem] = []
        for index, item in enumerate(payload):
            if (
                not isinstance(item, dict)
                or not isinstance(item.get("key"), str)
                or not item["key"]
                or item.get("value") is None
            ):
                raise ValidationError(message=BULK_PUT_BAD_ITEM, context={"index": index})

            value = item["value"]
            if not isinstance(value, str):
                value = json.dumps(value)
            items.append(BulkPutItem(key=item["key"], value=value))
        return items

    async def bulk_put(self, store: KVStore, payload: Any) -> int:
        items = self.validate_bulk_put(payload)
        await asyncio.gather(*(store.put(item.key, item.value) for item in items))
        logger.info("Bulk put wrote %d key(s)", len(items))
        return len(items)

    def validate_bulk_delete(self, payload: Any) -> List[str]:
        if not isinstance(payload, list) or not all(
            isinstance(key, str) and key for key in payload
        ):
            raise ValidationError(message=BULK_DELETE_NOT_ARRAY)
        return payload

    async def bulk_delete(self, store: KVStore, payload: Any) -> int:
        keys = self.validate_bulk_delete(payload)
        await asyncio.gather(*(store.delete(key) for key in keys))
        logger.info("Bulk delete removed %d key(s)", len(keys))
        return len(keys)


kv_service = KVService()
