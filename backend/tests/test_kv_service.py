"""
CanvasKV Gateway: KV Service Unit Tests
========================================

What:  Tests for KVService (value lookup, listing, bulk validation and writes).
How:   Runs against MemoryKVStore or an AsyncMock store; no HTTP involved.

What we test:
    ✅ Empty key → ValidationError, absent key → NotFoundError
    ✅ Listing envelope carries count
    ✅ Bulk put validates every item before the first write
    ✅ Bulk delete requires an array of non-empty string keys
"""

import json
from unittest.mock import AsyncMock

import pytest

from canvaskv.exceptions import NotFoundError, ValidationError
from canvaskv.services.kv_service import KVService
from canvaskv.stores.memory import MemoryKVStore


class TestGetValue:

    def setup_method(self):
        self.service = KVService()

    @pytest.mark.asyncio
    async def test_returns_raw_value(self):
        store = MemoryKVStore({"k": '{"a": 1}'})
        assert await self.service.get_value(store, "k") == '{"a": 1}'

    @pytest.mark.asyncio
    async def test_empty_key_rejected(self):
        with pytest.raises(ValidationError, match="Key not specified"):
            await self.service.get_value(MemoryKVStore(), "")

    @pytest.mark.asyncio
    async def test_absent_key_not_found(self):
        with pytest.raises(NotFoundError):
            await self.service.get_value(MemoryKVStore(), "missing")


class TestListKeys:

    @pytest.mark.asyncio
    async def test_envelope(self):
        store = MemoryKVStore({"foo1": "1", "foo2": "2", "bar1": "3"})
        result = await KVService().list_keys(store, "foo")

        assert result.result == [{"name": "foo1"}, {"name": "foo2"}]
        assert result.success is True
        assert result.errors == []
        assert result.messages == []
        assert result.result_info.count == 2


class TestBulkPutValidation:

    def setup_method(self):
        self.service = KVService()

    def test_non_array_rejected(self):
        with pytest.raises(ValidationError, match="must be an array"):
            self.service.validate_bulk_put({"key": "a", "value": "1"})

    @pytest.mark.parametrize(
        "bad_item",
        [
            {"key": "b"},
            {"value": "1"},
            {"key": "", "value": "1"},
            {"key": "b", "value": None},
            {"key": 7, "value": "1"},
            "not-an-object",
        ],
    )
    def test_malformed_item_rejected_with_index(self, bad_item):
        payload = [{"key": "a", "value": "1"}, bad_item]
        with pytest.raises(ValidationError, match="must have a key and value") as exc_info:
            self.service.validate_bulk_put(payload)
        assert exc_info.value.context["index"] == 1

    def test_empty_string_value_is_allowed(self):
        items = self.service.validate_bulk_put([{"key": "a", "value": ""}])
        assert items[0].value == ""

    def test_non_string_value_serialized(self):
        items = self.service.validate_bulk_put([{"key": "a", "value": {"x": [1, 2]}}])
        assert json.loads(items[0].value) == {"x": [1, 2]}


class TestBulkPut:

    def setup_method(self):
        self.service = KVService()

    @pytest.mark.asyncio
    async def test_writes_every_item(self):
        store = MemoryKVStore()
        count = await self.service.bulk_put(
            store, [{"key": "a", "value": "1"}, {"key": "b", "value": "2"}]
        )
        assert count == 2
        assert await store.get("a") == "1"
        assert await store.get("b") == "2"

    @pytest.mark.asyncio
    async def test_invalid_batch_issues_no_store_calls(self):
        store = AsyncMock()
        with pytest.raises(ValidationError):
            await self.service.bulk_put(store, [{"key": "a", "value": "1"}, {"key": "b"}])
        store.put.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self):
        store = MemoryKVStore()
        store.put = AsyncMock(side_effect=RuntimeError("kv down"))
        with pytest.raises(RuntimeError, match="kv down"):
            await self.service.bulk_put(store, [{"key": "a", "value": "1"}])


class TestBulkDelete:

    def setup_method(self):
        self.service = KVService()

    @pytest.mark.asyncio
    async def test_deletes_present_and_absent_keys(self):
        store = MemoryKVStore({"a": "1", "b": "2", "c": "3"})
        count = await self.service.bulk_delete(store, ["a", "b", "never-existed"])
        assert count == 3
        assert await store.list_keys() == [{"name": "c"}]

    @pytest.mark.parametrize("payload", [{"keys": ["a"]}, "a", ["a", 3], ["a", ""]])
    def test_rejects_non_array_of_keys(self, payload):
        with pytest.raises(ValidationError, match="array of keys"):
            self.service.validate_bulk_delete(payload)
