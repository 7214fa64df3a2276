"""
CanvasKV Gateway: Health Check Route
=====================================

What:  Health check endpoint for monitoring and load balancer probes.
How:   Runs the store adapter's lightweight probe and reports aggregate status.
Who:   Called by container health checks and monitoring (with the bearer token,
       like every other route).

Status levels:
    - healthy:   store reachable (HTTP 200)
    - unhealthy: store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from canvaskv import __version__
from canvaskv.context import get_store
from canvaskv.schemas.kv import HealthResponse
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
    responses={503: {"description": "Store unreachable", "model": HealthResponse}},
)
async def health_check(store: KVStore = Depends(get_store)) -> JSONResponse:
    reachable = await store.health_check()
    if not reachable:
        logger.warning("Health check: %s store unreachable", store.backend_name)

    body = HealthResponse(
        status="healthy" if reachable else "unhealthy",
        version=__version__,
        store_backend=store.backend_name,
        store="reachable" if reachable else "unreachable",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    return JSONResponse(status_code=200 if reachable else 503, content=body.model_dump())
