"""
CanvasKV Gateway: Canvas Schemas
=================================

What:  Pydantic model for the canvas metadata record and the key namespaces
       canvas records live under.
How:   Field names are snake_case in Python and camelCase on the wire
       (aliases), matching what the drawing client reads and writes.

Key Layout:
    excalidraw-canvas-meta:<id>   → CanvasMetadata JSON (cheap to list)
    excalidraw-canvas-data:<id>   → full drawing document JSON
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

KEY_PREFIX_METADATA = "excalidraw-canvas-meta:"
KEY_PREFIX_DATA = "excalidraw-canvas-data:"

DEFAULT_CANVAS_NAME = "Untitled Canvas"

# Placeholder until the gateway knows about users
DEFAULT_USER_ID = 1


def metadata_key(canvas_id: str) -> str:
    return f"{KEY_PREFIX_METADATA}{canvas_id}"


def data_key(canvas_id: str) -> str:
    return f"{KEY_PREFIX_DATA}{canvas_id}"


def utc_timestamp() -> str:
    """Current UTC time as ISO 8601 with millisecond precision and a Z suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class CanvasMetadata(BaseModel):
    """
    What:  Lightweight descriptor of a canvas document.
    Who:   Returned by POST /api/canvases and listed by GET /api/canvases.

    Extra fields found in a stored record are kept and written back unchanged.
    """

    id: str = Field(description="Canvas identifier (UUID string)")
    name: str = Field(description="Display name")
    created_at: str = Field(alias="createdAt", description="Creation time (ISO 8601, UTC)")
    updated_at: str = Field(alias="updatedAt", description="Last save/rename time (ISO 8601, UTC)")
    user_id: int = Field(default=DEFAULT_USER_ID, alias="userId")
    thumbnail: Optional[str] = Field(default=None, description="Optional preview image")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_record(self) -> dict:
        """Wire/storage representation (camelCase, no null thumbnail)."""
        return self.model_dump(by_alias=True, exclude_none=True)
