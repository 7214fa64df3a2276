"""
CanvasKV Gateway: Generic KV Route Handlers
============================================

What:  GET /values/{key}, GET /keys, PUT /bulk, DELETE /bulk.
How:   Extracts path/query/body, delegates to KVService, formats the response.
Who:   Clients that treat the gateway as a proxy for the managed KV namespace.

Bodies are parsed with `request.json()` rather than a Pydantic body model:
malformed JSON is an unexpected error (500 with the parser message), and
shape problems are reported by the service as 400 plain text.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response

from canvaskv.context import get_store
from canvaskv.schemas.kv import KeyListResponse, SuccessResponse
from canvaskv.services.kv_service import kv_service
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Key/Value"])


@router.get(
    "/values/{key:path}",
    summary="Fetch the raw value stored under a key",
    responses={
        200: {"description": "Stored value, returned verbatim as application/json"},
        400: {"description": "Key segment empty"},
        404: {"description": "Key not found"},
    },
)
async def get_value(key: str, store: KVStore = Depends(get_store)) -> Response:
    """
    Values are stored pre-serialized, so they are passed through without
    re-encoding.
    """
    value = await kv_service.get_value(store, key)
    return Response(content=value, media_type="application/json")


@router.get(
    "/keys",
    response_model=KeyListResponse,
    summary="List keys under an optional prefix",
)
async def list_keys(
    prefix: str = Query(default="", description="Only return keys starting with this prefix"),
    store: KVStore = Depends(get_store),
) -> KeyListResponse:
    return await kv_service.list_keys(store, prefix)


@router.put(
    "/bulk",
    response_model=SuccessResponse,
    summary="Write a batch of key/value pairs",
    description=(
        "Body: JSON array of {key, value}. The whole batch is validated before "
        "any write; one malformed item rejects the request with 400."
    ),
)
async def bulk_put(request: Request, store: KVStore = Depends(get_store)) -> SuccessResponse:
    payload = await request.json()
    await kv_service.bulk_put(store, payload)
    return SuccessResponse()


@router.delete(
    "/bulk",
    response_model=SuccessResponse,
    summary="Delete a batch of keys",
    description="Body: JSON array of keys. Deleting an absent key is not an error.",
)
async def bulk_delete(request: Request, store: KVStore = Depends(get_store)) -> SuccessResponse:
    payload = await request.json()
    await kv_service.bulk_delete(store, payload)
    return SuccessResponse()
