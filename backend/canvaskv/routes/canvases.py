"""
CanvasKV Gateway: Canvas Route Handlers
========================================

What:  CRUD endpoints for canvas documents under /api/canvases.
How:   Parses the JSON body, delegates to CanvasService, maps the result to a
       status code. Errors are raised by the service and rendered by the
       global handlers.
Who:   Called by the drawing application's storage adapter.

Route Inventory:
    GET    /api/canvases        → 200 list of metadata records
    POST   /api/canvases        → 201 metadata of the new canvas
    GET    /api/canvases/{id}   → 200 drawing document
    PUT    /api/canvases/{id}   → 204 (404 if unknown)
    DELETE /api/canvases/{id}   → 204 (idempotent)
    PATCH  /api/canvases/{id}   → 204 rename (400 without name, 404 if unknown)
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from canvaskv.context import get_store
from canvaskv.schemas.canvas import CanvasMetadata
from canvaskv.services.canvas_service import canvas_service
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Canvases"])


@router.get("/canvases", summary="List all canvases")
async def list_canvases(store: KVStore = Depends(get_store)) -> JSONResponse:
    """Metadata records are returned as stored, including unknown fields."""
    records = await canvas_service.list_canvases(store)
    return JSONResponse(content=records)


@router.post(
    "/canvases",
    status_code=201,
    response_model=CanvasMetadata,
    response_model_by_alias=True,
    response_model_exclude_none=True,
    summary="Create a canvas",
)
async def create_canvas(request: Request, store: KVStore = Depends(get_store)) -> CanvasMetadata:
    payload = await request.json()
    return await canvas_service.create_canvas(store, payload)


@router.get("/canvases/{canvas_id}", summary="Load a canvas document")
async def load_canvas(canvas_id: str, store: KVStore = Depends(get_store)) -> JSONResponse:
    data = await canvas_service.load_canvas(store, canvas_id)
    return JSONResponse(content=data)


@router.put("/canvases/{canvas_id}", status_code=204, summary="Save a canvas document")
async def save_canvas(
    canvas_id: str,
    request: Request,
    store: KVStore = Depends(get_store),
) -> Response:
    payload = await request.json()
    await canvas_service.save_canvas(store, canvas_id, payload)
    return Response(status_code=204)


@router.delete("/canvases/{canvas_id}", status_code=204, summary="Delete a canvas")
async def delete_canvas(canvas_id: str, store: KVStore = Depends(get_store)) -> Response:
    await canvas_service.delete_canvas(store, canvas_id)
    return Response(status_code=204)


@router.patch("/canvases/{canvas_id}", status_code=204, summary="Rename a canvas")
async def rename_canvas(
    canvas_id: str,
    request: Request,
    store: KVStore = Depends(get_store),
) -> Response:
    payload = await request.json()
    await canvas_service.rename_canvas(store, canvas_id, payload)
    return Response(status_code=204)
