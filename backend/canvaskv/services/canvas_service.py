"""
CanvasKV Gateway: Canvas Service (Business Logic)
==================================================

What:  Create/list/load/save/delete/rename for canvas documents.
How:   Each canvas is two store keys, a small metadata record and the full
       drawing document. Reads and writes of the pair fan out concurrently.
Who:   Called by routes/canvases.py; receives the store on every call.

Dual Write:
    ┌──────────────┐      put excalidraw-canvas-meta:<id>
    │ _dual_write  │──┬──▶
    └──────────────┘  └──▶ put excalidraw-canvas-data:<id>

    Both puts are issued together and awaited together. The store has no
    cross-key transaction, so between the two completions a reader can see the
    new metadata with the old data (or the reverse). If one put fails the other
    is not undone: the failure is logged as an incomplete dual write and the
    request fails. A later save of the same canvas repairs the pair.

Design Decision:
    CanvasService is stateless; the store is passed per call, like a database
    session, so tests hand it a MemoryKVStore directly.
"""

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from canvaskv.exceptions import NotFoundError, ValidationError
from canvaskv.schemas.canvas import (
    DEFAULT_CANVAS_NAME,
    KEY_PREFIX_METADATA,
    CanvasMetadata,
    data_key,
    metadata_key,
    utc_timestamp,
)
from canvaskv.stores.base import KVStore

logger = logging.getLogger(__name__)


class CanvasService:
    """
    Responsibilities:
        - list_canvases():  prefix scan of the metadata namespace
        - create_canvas():  new id, timestamps, dual write
        - load_canvas():    data record by id
        - save_canvas():    overwrite data, bump updatedAt (metadata must exist)
        - delete_canvas():  remove both keys, idempotent
        - rename_canvas():  update the name in both records
    """

    async def list_canvases(self, store: KVStore) -> List[Dict[str, Any]]:
        """
        Return every metadata record.

        Keys that disappear between the list and the fetch (concurrent delete)
        come back as None and are dropped.
        """
        keys = await store.list_keys(KEY_PREFIX_METADATA)
        records = await asyncio.gather(*(store.get_json(entry["name"]) for entry in keys))
        return [record for record in records if record is not None]

    async def create_canvas(self, store: KVStore, payload: Any) -> CanvasMetadata:
        """
        Create a canvas from a drawing document.

        The document is stored verbatim as the data record. The metadata name
        comes from `appState.name`, falling back to "Untitled Canvas".

        Returns:
            The new metadata; createdAt and updatedAt are identical.
        """
        body = self._require_object(payload)
        canvas_id = str(uuid.uuid4())
        now = utc_timestamp()

        metadata = CanvasMetadata(
            id=canvas_id,
            name=self._name_from_app_state(body) or DEFAULT_CANVAS_NAME,
            created_at=now,
            updated_at=now,
        )
        await self._dual_write(store, canvas_id, metadata, body)
        logger.info("Canvas %s created (name=%r)", canvas_id, metadata.name)
        return metadata

    async def load_canvas(self, store: KVStore, canvas_id: str) -> Any:
        data = await store.get_json(data_key(canvas_id))
        if data is None:
            raise NotFoundError(message="Canvas not found", resource_id=canvas_id)
        return data

    async def save_canvas(self, store: KVStore, canvas_id: str, payload: Any) -> None:
        """
        Overwrite a canvas' data record.

        Raises:
            NotFoundError: no metadata for canvas_id; nothing is written.
        """
        body = self._require_object(payload)
        metadata = await self._load_metadata(store, canvas_id)

        name = self._name_from_app_state(body)
        if name:
            metadata.name = name
        metadata.updated_at = utc_timestamp()

        await self._dual_write(store, canvas_id, metadata, body)
        logger.info("Canvas %s saved", canvas_id)

    async def delete_canvas(self, store: KVStore, canvas_id: str) -> None:
        await asyncio.gather(
            store.delete(metadata_key(canvas_id)),
            store.delete(data_key(canvas_id)),
        )
        logger.info("Canvas %s deleted", canvas_id)

    async def rename_canvas(self, store: KVStore, canvas_id: str, payload: Any) -> None:
        """
        Set a new name in both the metadata and `data.appState.name`.

        Raises:
            ValidationError: body has no non-empty string `name`.
            NotFoundError: metadata missing (checked first) or data missing.
        """
        name = payload.get("name") if isinstance(payload, dict) else None
        if not isinstance(name, str) or not name:
            raise ValidationError(message="Name is required", field="name")

        raw_metadata, data = await asyncio.gather(
            store.get_json(metadata_key(canvas_id)),
            store.get_json(data_key(canvas_id)),
        )
        # Records overwritten through the generic KV API may not be objects
        if not isinstance(raw_metadata, dict):
            raise NotFoundError(message="Canvas not found", resource_id=canvas_id)
        if not isinstance(data, dict):
            raise NotFoundError(message="Canvas data not found", resource_id=canvas_id)

        metadata = CanvasMetadata.model_validate(raw_metadata)
        metadata.name = name
        metadata.updated_at = utc_timestamp()

        app_state = data.get("appState")
        if not isinstance(app_state, dict):
            app_state = {}
            data["appState"] = app_state
        app_state["name"] = name

        await self._dual_write(store, canvas_id, metadata, data)
        logger.info("Canvas %s renamed to %r", canvas_id, name)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _load_metadata(self, store: KVStore, canvas_id: str) -> CanvasMetadata:
        raw = await store.get_json(metadata_key(canvas_id))
        if not isinstance(raw, dict):
            raise NotFoundError(message="Canvas not found", resource_id=canvas_id)
        return CanvasMetadata.model_validate(raw)

    async def _dual_write(
        self,
        store: KVStore,
        canvas_id: str,
        metadata: CanvasMetadata,
        data: Any,
    ) -> None:
        results = await asyncio.gather(
            store.put(metadata_key(canvas_id), json.dumps(metadata.to_record())),
            store.put(data_key(canvas_id), json.dumps(data)),
            return_exceptions=True,
        )
        failures = [result for result in results if isinstance(result, BaseException)]
        if not failures:
            return

        if len(failures) < len(results):
            written = "metadata" if not isinstance(results[0], BaseException) else "data"
            logger.error(
                "Canvas %s dual write incomplete: only %s was written (%s)",
                canvas_id, written, failures[0],
            )
        raise failures[0]

    @staticmethod
    def _require_object(payload: Any) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ValidationError(message="Request body must be an object")
        return payload

    @staticmethod
    def _name_from_app_state(body: Dict[str, Any]) -> Optional[str]:
        app_state = body.get("appState")
        if isinstance(app_state, dict):
            name = app_state.get("name")
            if isinstance(name, str) and name:
                return name
        return None


canvas_service = CanvasService()
