"""
CanvasKV Gateway: Generic KV and Service Schemas
=================================================

What:  Response envelopes for the generic key/value API and the health check,
       plus the validated bulk-put item.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class BulkPutItem(BaseModel):
    """One validated entry of a PUT /bulk batch."""
    key: str = Field(min_length=1)
    value: str


class ResultInfo(BaseModel):
    count: int = Field(description="Number of keys in `result`")


class KeyListResponse(BaseModel):
    """
    What:  Envelope returned by GET /keys.

    Mirrors the Cloudflare API response shape so clients written against the
    managed store's REST API can talk to the gateway unchanged.

    Example:
        {
            "result": [{"name": "foo1"}, {"name": "foo2"}],
            "success": true,
            "errors": [],
            "messages": [],
            "result_info": {"count": 2}
        }
    """
    result: List[Dict[str, Any]]
    success: bool = True
    errors: List[Any] = Field(default_factory=list)
    messages: List[Any] = Field(default_factory=list)
    result_info: ResultInfo


class SuccessResponse(BaseModel):
    success: bool = True


class HealthResponse(BaseModel):
    """
    What:  Health check response for GET /health.
    """
    status: str = Field(description="Overall status: healthy, unhealthy")
    version: str = Field(description="Application version")
    store_backend: str = Field(description="Configured KV backend: memory, sql, cloudflare")
    store: str = Field(description="Store connectivity: reachable, unreachable")
    uptime_seconds: float = Field(description="Seconds since service started")
