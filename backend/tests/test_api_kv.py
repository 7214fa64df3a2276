"""
CanvasKV Gateway: Generic KV API Integration Tests
===================================================

What:  End-to-end tests for /values, /keys and /bulk through the full
       middleware chain.
How:   HTTPX AsyncClient over ASGITransport, app backed by MemoryKVStore.

What we test:
    ✅ Raw value passthrough, empty key → 400, missing key → 404
    ✅ /keys envelope with and without prefix
    ✅ Bulk put/delete success and all-or-nothing validation
    ✅ Unexpected errors → 500 with the raw message and CORS headers
    ✅ Unknown path or method → 404
    ✅ Repeated and concurrent bulk writes on the SQL backend
"""

import asyncio
from unittest.mock import AsyncMock

import pytest
from httpx import AsyncClient, ASGITransport

from canvaskv.main import create_app


class TestGetValue:

    @pytest.mark.asyncio
    async def test_returns_stored_text_verbatim(self, test_client, auth_headers, memory_store):
        await memory_store.put("doc", '{"a":1}')

        response = await test_client.get("/values/doc", headers=auth_headers)

        assert response.status_code == 200
        assert response.text == '{"a":1}'
        assert response.headers["content-type"].startswith("application/json")
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_key_with_slash(self, test_client, auth_headers, memory_store):
        await memory_store.put("folder/item", '"v"')
        response = await test_client.get("/values/folder/item", headers=auth_headers)
        assert response.status_code == 200
        assert response.text == '"v"'

    @pytest.mark.asyncio
    async def test_empty_key_is_bad_request(self, test_client, auth_headers):
        response = await test_client.get("/values/", headers=auth_headers)
        assert response.status_code == 400
        assert response.text == "Key not specified"

    @pytest.mark.asyncio
    async def test_missing_key_is_not_found(self, test_client, auth_headers):
        response = await test_client.get("/values/missing", headers=auth_headers)
        assert response.status_code == 404
        assert response.text == "Not Found"
        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestListKeys:

    @pytest.mark.asyncio
    async def test_prefix_envelope(self, test_client, auth_headers, memory_store):
        for key in ("foo1", "foo2", "bar1"):
            await memory_store.put(key, "1")

        response = await test_client.get("/keys", params={"prefix": "foo"}, headers=auth_headers)

        assert response.status_code == 200
        assert response.json() == {
            "result": [{"name": "foo1"}, {"name": "foo2"}],
            "success": True,
            "errors": [],
            "messages": [],
            "result_info": {"count": 2},
        }

    @pytest.mark.asyncio
    async def test_no_prefix_lists_everything(self, test_client, auth_headers, memory_store):
        await memory_store.put("a", "1")
        await memory_store.put("b", "2")

        response = await test_client.get("/keys", headers=auth_headers)

        assert response.json()["result_info"] == {"count": 2}

    @pytest.mark.asyncio
    async def test_empty_store(self, test_client, auth_headers):
        response = await test_client.get("/keys", headers=auth_headers)
        assert response.json()["result"] == []
        assert response.json()["result_info"] == {"count": 0}


class TestBulkPut:

    @pytest.mark.asyncio
    async def test_writes_batch(self, test_client, auth_headers, memory_store):
        response = await test_client.put(
            "/bulk",
            json=[{"key": "a", "value": "1"}, {"key": "b", "value": '{"x":2}'}],
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert await memory_store.get("a") == "1"
        assert await memory_store.get("b") == '{"x":2}'

    @pytest.mark.asyncio
    async def test_one_bad_item_writes_nothing(self, test_client, auth_headers, memory_store):
        response = await test_client.put(
            "/bulk",
            json=[{"key": "a", "value": "1"}, {"key": "b"}],
            headers=auth_headers,
        )

        assert response.status_code == 400
        assert response.text == "Each item in bulk put must have a key and value"
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_non_array_body(self, test_client, auth_headers):
        response = await test_client.put("/bulk", json={"key": "a", "value": "1"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.text == "Request body must be an array"

    @pytest.mark.asyncio
    async def test_empty_batch_succeeds(self, test_client, auth_headers):
        response = await test_client.put("/bulk", json=[], headers=auth_headers)
        assert response.status_code == 200


class TestBulkDelete:

    @pytest.mark.asyncio
    async def test_deletes_keys(self, test_client, auth_headers, memory_store):
        await memory_store.put("a", "1")
        await memory_store.put("b", "2")

        response = await test_client.request(
            "DELETE", "/bulk", json=["a", "never-existed"], headers=auth_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert "a" not in memory_store
        assert "b" in memory_store

    @pytest.mark.asyncio
    async def test_non_array_body(self, test_client, auth_headers):
        response = await test_client.request(
            "DELETE", "/bulk", json={"keys": ["a"]}, headers=auth_headers
        )
        assert response.status_code == 400
        assert response.text == "Request body must be an array of keys"


class TestErrorBoundary:

    @pytest.mark.asyncio
    async def test_invalid_json_is_server_error(self, test_client, auth_headers):
        response = await test_client.put(
            "/bulk",
            content=b"{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == 500
        assert response.text
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_store_failure_message_is_returned(self, test_client, auth_headers, memory_store):
        memory_store.get = AsyncMock(side_effect=RuntimeError("kv down"))

        response = await test_client.get("/values/anything", headers=auth_headers)

        assert response.status_code == 500
        assert response.text == "kv down"
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Methods"] == (
            "GET, POST, PUT, DELETE, PATCH, OPTIONS"
        )

    @pytest.mark.asyncio
    async def test_partial_bulk_write_failure(self, test_client, auth_headers, memory_store):
        real_put = memory_store.put

        async def put_failing_on_b(key, value):
            if key == "b":
                raise RuntimeError("write b failed")
            await real_put(key, value)

        memory_store.put = put_failing_on_b

        response = await test_client.put(
            "/bulk",
            json=[{"key": "a", "value": "1"}, {"key": "b", "value": "2"}],
            headers=auth_headers,
        )

        assert response.status_code == 500
        assert response.text == "write b failed"


class TestRouting:

    @pytest.mark.asyncio
    async def test_unknown_path(self, test_client, auth_headers):
        response = await test_client.get("/nope", headers=auth_headers)
        assert response.status_code == 404
        assert response.text == "Not Found"
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    @pytest.mark.asyncio
    async def test_unknown_method_on_known_path(self, test_client, auth_headers):
        response = await test_client.post("/keys", headers=auth_headers)
        assert response.status_code == 404
        assert response.text == "Not Found"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client, auth_headers):
        response = await test_client.get(
            "/keys", headers={**auth_headers, "X-Request-ID": "req-123"}
        )
        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_request_id_generated_when_absent(self, test_client, auth_headers):
        response = await test_client.get("/keys", headers=auth_headers)
        assert response.headers["X-Request-ID"]

    @pytest.mark.asyncio
    async def test_unsafe_request_id_is_replaced(self, test_client, auth_headers):
        response = await test_client.get(
            "/keys", headers={**auth_headers, "X-Request-ID": "bad id with spaces/and slashes"}
        )
        assert response.headers["X-Request-ID"] != "bad id with spaces/and slashes"
        assert response.headers["X-Request-ID"].isalnum()

    @pytest.mark.asyncio
    async def test_request_id_on_rejected_request(self, test_client):
        response = await test_client.get("/keys", headers={"X-Request-ID": "req-401"})
        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == "req-401"


class TestSqlBackedBulkPut:

    @pytest.mark.asyncio
    async def test_repeated_key_in_one_batch(self, test_settings, sql_store, auth_headers):
        app = create_app(settings=test_settings, store=sql_store)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.put(
                "/bulk",
                json=[{"key": "a", "value": "1"}, {"key": "a", "value": "2"}],
                headers=auth_headers,
            )

        assert response.status_code == 200
        assert await sql_store.get("a") in ("1", "2")
        assert await sql_store.list_keys() == [{"name": "a"}]

    @pytest.mark.asyncio
    async def test_concurrent_batches_of_new_keys(self, test_settings, sql_store, auth_headers):
        app = create_app(settings=test_settings, store=sql_store)
        batch = [{"key": f"k{i}", "value": str(i)} for i in range(5)]

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            responses = await asyncio.gather(
                client.put("/bulk", json=batch, headers=auth_headers),
                client.put("/bulk", json=batch, headers=auth_headers),
            )

        assert [response.status_code for response in responses] == [200, 200]
        assert len(await sql_store.list_keys("k")) == 5
