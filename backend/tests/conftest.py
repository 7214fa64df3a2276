"""
CanvasKV Gateway: Test Configuration (conftest.py)
===================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:  Settings with a known API token and the memory backend
    ├── memory_store:   Fresh MemoryKVStore
    ├── app:            FastAPI app built by create_app(test_settings, memory_store)
    ├── test_client:    HTTPX AsyncClient talking to `app` over ASGITransport
    ├── auth_headers:   Valid bearer header for `test_settings`
    └── sql_store:      SqlKVStore on a temporary SQLite file (aiosqlite)
"""

import os

# Override settings for testing BEFORE any canvaskv imports: canvaskv.main
# builds a module-level app from the environment at import time.
os.environ["API_TOKEN"] = "env-token-not-used-by-tests"
os.environ["KV_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from canvaskv.config import Settings
from canvaskv.database import build_engine
from canvaskv.main import create_app
from canvaskv.stores.memory import MemoryKVStore
from canvaskv.stores.sql import SqlKVStore

API_TOKEN = "test-token"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        api_token=API_TOKEN,
        kv_backend="memory",
        enabled_apis="kv,canvas",
        log_level="WARNING",
    )


@pytest.fixture
def memory_store() -> MemoryKVStore:
    return MemoryKVStore()


@pytest.fixture
def app(test_settings, memory_store):
    return create_app(settings=test_settings, store=memory_store)


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {API_TOKEN}"}


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the ASGI app (no server).

    Usage:
        async def test_keys(test_client, auth_headers):
            response = await test_client.get("/keys", headers=auth_headers)
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """SqlKVStore on a throwaway SQLite database with the schema created."""
    settings = Settings(
        kv_backend="sql",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'kv.db'}",
        log_level="WARNING",
    )
    store = SqlKVStore(build_engine(settings))
    await store.create_schema()
    yield store
    await store.close()
